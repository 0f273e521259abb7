"""Shared helpers for CLI commands."""

from pathlib import Path

import typer
from rich.console import Console

from src.onboarding.core.exceptions import ConfigurationError
from src.onboarding.runtime.config.config_data import ConfigData
from src.onboarding.runtime.settings import EnvironmentVariables, load_config

console = Console()

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config.yaml (defaults to $CONFIG_PATH or ./config.yaml)",
    exists=True,
    dir_okay=False,
)


def load_cli_config(config_path: Path | None) -> ConfigData:
    """Load configuration, exiting with status 1 when it is unusable."""
    try:
        if config_path is None:
            return load_config()
        return load_config(EnvironmentVariables(CONFIG_PATH=config_path))
    except ConfigurationError as e:
        console.print(f"[red]❌ Configuration error: {e.message}[/red]")
        raise typer.Exit(code=1) from e
