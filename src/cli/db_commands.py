"""Database CLI commands."""

import typer
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from src.user_api.runtime.init_db import init_db, seed_db

console = Console()

db_app = typer.Typer(help="🗄️  Database commands")


@db_app.command()
def migrate(
    fresh: bool = typer.Option(
        False, "--fresh", help="Drop every table before creating it again"
    ),
) -> None:
    """Create the users and emails tables."""
    if fresh:
        console.print("[yellow]Dropping existing tables[/yellow]")

    try:
        init_db(fresh=fresh)
    except SQLAlchemyError as e:
        console.print(f"[red]❌ Failed to migrate: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print("[green]✅ Database migrated[/green]")


@db_app.command()
def seed() -> None:
    """Insert the sample users and their emails."""
    try:
        inserted = seed_db()
    except SQLAlchemyError as e:
        console.print(f"[red]❌ Failed to seed: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Seeded {inserted} user(s)[/green]")
