"""Main CLI application module."""

import typer

from .service_commands import register_service_commands
from .token_commands import token_app

# Create the main CLI application
app = typer.Typer(
    help="Client onboarding service: signup saga and bearer tokens",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register commands
register_service_commands(app)
app.add_typer(token_app, name="token")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
