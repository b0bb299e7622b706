"""Main CLI application for GitHub Activity Tracker."""

from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from github_activity_tracker import __version__
from github_activity_tracker.api import create_app
from github_activity_tracker.cli import db as db_cmd
from github_activity_tracker.cli import github as github_cmd
from github_activity_tracker.cli import repos as repos_cmd
from github_activity_tracker.cli import sync as sync_cmd
from github_activity_tracker.cli.common import require_token, run_async_command
from github_activity_tracker.config import get_settings
from github_activity_tracker.db import create_database
from github_activity_tracker.github import GitHubClient, MultiRepoOrchestrator
from github_activity_tracker.logging import setup_logging

app = typer.Typer(
    name="ghtracker",
    help="Ingests GitHub activity for tracked repositories and serves it over HTTP.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghtracker version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """GitHub Activity Tracker - commits, pull requests, issues and reviews."""
    settings = get_settings()
    log_config = settings.logging

    # Setup logging with CLI overrides
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port")] = None,
    skip_initial_sync: Annotated[
        bool,
        typer.Option("--skip-initial-sync", help="Serve immediately without syncing first"),
    ] = False,
) -> None:
    """Initialize the schema, sync tracked repositories, then serve the API.

    Exits with code 1 when the token is missing or the schema cannot be
    created. Runs until SIGINT/SIGTERM.
    """
    settings = get_settings()
    require_token(settings)

    async def _startup() -> None:
        database = create_database(settings)
        try:
            try:
                await database.create_tables()
            except SQLAlchemyError as e:
                console.print(f"[red]Schema initialization failed:[/red] {e}")
                raise typer.Exit(1) from None

            if skip_initial_sync:
                return
            async with GitHubClient() as client:
                result = await MultiRepoOrchestrator(database, client, settings).sync_all()
            console.print(
                f"Initial sync: {result.repos_succeeded}/{len(result.repo_results)} "
                f"repositories, {result.total_inserted} new records"
            )
        finally:
            await database.dispose()

    run_async_command(_startup(), error_prefix="Startup failed")

    application = create_app(create_database(settings), settings)
    uvicorn.run(
        application,
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


# Register subcommands
app.add_typer(db_cmd.app, name="db")
app.add_typer(github_cmd.app, name="github")
app.add_typer(repos_cmd.app, name="repos")
app.add_typer(sync_cmd.app, name="sync")


if __name__ == "__main__":
    app()
