"""Database management commands."""

import typer

from github_activity_tracker.cli.common import console, run_async_command
from github_activity_tracker.config import get_settings
from github_activity_tracker.db import create_database

app = typer.Typer(help="Database commands")


@app.command("init")
def init_database() -> None:
    """Create any missing tables."""
    settings = get_settings()

    async def _init() -> None:
        database = create_database(settings)
        try:
            await database.create_tables()
        finally:
            await database.dispose()

    run_async_command(_init(), error_prefix="Schema initialization failed")
    console.print(f"[green]✓[/green] Database ready at {settings.database_url}")
