"""Commands that run the service or its signup saga."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from src.onboarding.api.http.app_data import build_dependencies
from src.onboarding.core.exceptions import InputValidationError, SignupFailed

from .utils import ConfigOption, console, load_cli_config


def serve(
    config_path: Optional[Path] = ConfigOption,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (overrides config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (overrides config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    from src.onboarding.api.http.app import create_app

    config = load_cli_config(config_path)
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold]Client onboarding API[/bold]\n"
            f"Environment: [cyan]{config.app.environment}[/cyan]\n"
            f"Listening on: [green]http://{bind_host}:{bind_port}[/green]",
            border_style="blue",
        )
    )

    if reload:
        # Reload needs an import string; the factory reloads config itself
        uvicorn.run(
            "src.onboarding.api.http.app:create_app",
            factory=True,
            host=bind_host,
            port=bind_port,
            reload=True,
            access_log=False,
        )
        return

    uvicorn.run(create_app(config), host=bind_host, port=bind_port, access_log=False)


def signup(
    natural_key: str = typer.Argument(..., help="Natural key of the caller (e.g. tax id)"),
    secret: str = typer.Option(
        ..., "--secret", "-s", prompt=True, hide_input=True, help="Password for the identity"
    ),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Run the signup saga against the configured backends."""
    config = load_cli_config(config_path)
    deps = build_dependencies(config)

    try:
        result = asyncio.run(deps.signup_orchestrator.signup(natural_key, secret))
    except InputValidationError as e:
        console.print(f"[red]❌ Invalid natural key: {e.message}[/red]")
        raise typer.Exit(code=2) from e
    except SignupFailed as e:
        console.print(
            f"[red]❌ Signup failed at step '{e.reason}' "
            f"(final state: {e.state.value})[/red]"
        )
        if e.detail:
            console.print(f"[dim]{e.detail}[/dim]")
        raise typer.Exit(code=1) from e

    console.print(
        f"[green]✅ Signed up '{result.natural_key}' "
        f"-> resource {result.resource_id} (subject {result.subject_id})[/green]"
    )


def register_service_commands(app: typer.Typer) -> None:
    app.command("serve")(serve)
    app.command("signup")(signup)
