"""Main CLI application module."""

import typer

from .db_commands import db_app
from .server_commands import serve

# Create the main CLI application
app = typer.Typer(
    help="🛠️  User API CLI - database and server management",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.command()(serve)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
