"""Token issuing and inspection commands."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from src.onboarding.core.exceptions import AuthFailure, ConfigurationError
from src.onboarding.core.services import TokenCodec
from src.onboarding.core.services.auth.auth_orchestrator import (
    NATURAL_KEY_CLAIM,
    RESOURCE_ID_CLAIM,
)
from src.onboarding.core.services.jwt import preview_jwt
from src.onboarding.runtime.config.config_data import ConfigData

from .utils import ConfigOption, console, load_cli_config

token_app = typer.Typer(help="🔑 Issue and inspect bearer tokens")


def _codec(config: ConfigData) -> TokenCodec:
    try:
        return TokenCodec.from_config(config.token)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e


def _claims_table(claims: dict, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Claim", style="cyan")
    table.add_column("Value", style="green")
    for name, value in claims.items():
        rendered = json.dumps(value) if not isinstance(value, str) else value
        if name == "exp" and isinstance(value, int):
            rendered = f"{value} ({datetime.fromtimestamp(value, UTC).isoformat()})"
        table.add_row(name, rendered)
    return table


@token_app.command("issue")
def issue_token(
    natural_key: str = typer.Argument(..., help="Natural key to embed"),
    resource_id: int = typer.Argument(..., help="Resource record id to embed"),
    ttl: Optional[int] = typer.Option(None, "--ttl", help="Lifetime in seconds (defaults to config)"),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Sign a token directly, without touching either upstream system."""
    config = load_cli_config(config_path)
    lifetime = ttl if ttl is not None else config.token.ttl_seconds
    if lifetime <= 0:
        console.print("[red]❌ --ttl must be positive[/red]")
        raise typer.Exit(code=2)

    codec = _codec(config)
    token = codec.issue(
        {RESOURCE_ID_CLAIM: resource_id, NATURAL_KEY_CLAIM: natural_key}, lifetime
    )
    console.print(token, soft_wrap=True)


@token_app.command("inspect")
def inspect_token(
    token: str = typer.Argument(..., help="Compact-serialized token"),
    unverified: bool = typer.Option(
        False, "--unverified", help="Decode without checking signature or expiry"
    ),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Validate a token and print its claims."""
    try:
        if unverified:
            preview = preview_jwt(token)
            console.print("[yellow]⚠️  Signature NOT verified[/yellow]")
            console.print(_claims_table(preview.claims, f"Claims (alg={preview.alg})"))
            return
        claims = _codec(load_cli_config(config_path)).validate(token)
    except AuthFailure as e:
        reason = getattr(e, "reason", "invalid")
        console.print(f"[red]❌ Token rejected: {reason}[/red]")
        raise typer.Exit(code=1) from e

    console.print("[green]✅ Token is valid[/green]")
    console.print(_claims_table(claims, "Claims"))
