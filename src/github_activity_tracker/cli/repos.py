"""Tracked repository management commands."""

import typer
from rich.table import Table

from github_activity_tracker.cli.common import (
    RepoArgument,
    console,
    require_token,
    run_async_command,
    validate_repo,
)
from github_activity_tracker.config import get_settings
from github_activity_tracker.github import GitHubClient
from github_activity_tracker.tracked_repos import TrackedRepositories

app = typer.Typer(help="Manage tracked repositories")


def _tracked() -> TrackedRepositories:
    return TrackedRepositories(get_settings().repos_file)


@app.command("list")
def list_repositories() -> None:
    """Show the tracked repositories in sync order."""
    tracked = _tracked()
    names = tracked.load()
    if not names:
        console.print(f"[yellow]No repositories tracked in {tracked.path}[/yellow]")
        return

    table = Table(title=f"Tracked repositories ({tracked.path})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Repository", style="cyan")
    for index, name in enumerate(names, start=1):
        table.add_row(str(index), name)
    console.print(table)


@app.command("add")
def add_repository(
    repo: RepoArgument,
    skip_check: bool = typer.Option(
        False,
        "--skip-check",
        help="Don't confirm the repository exists on GitHub",
    ),
) -> None:
    """Start tracking a repository.

    Examples:
        ghtracker repos add prebid/prebid-server
        ghtracker repos add prebid/Prebid.js --skip-check
    """
    validate_repo(repo)

    if not skip_check:
        require_token()

        async def _exists() -> bool:
            async with GitHubClient() as client:
                return await client.repository_exists(repo)

        if not run_async_command(_exists(), error_prefix="GitHub check failed"):
            console.print(f"[red]Error:[/red] Repository {repo} not found on GitHub")
            raise typer.Exit(1)

    tracked = _tracked()
    if tracked.add(repo):
        console.print(f"[green]✓[/green] Now tracking {repo}")
    else:
        console.print(f"[dim]{repo} is already tracked[/dim]")


@app.command("remove")
def remove_repository(repo: RepoArgument) -> None:
    """Stop tracking a repository. Stored activity is kept until it ages out."""
    if not _tracked().remove(repo):
        console.print(f"[red]Error:[/red] {repo} is not tracked")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Stopped tracking {repo}")
