"""Sync commands for GitHub Activity Tracker."""

import json
from typing import Any

import typer

from github_activity_tracker.cli.common import (
    OutputFormatOption,
    RepoArgument,
    ReposListOption,
    console,
    open_database,
    require_token,
    run_async_command,
    validate_repo,
    validate_repo_list,
)
from github_activity_tracker.config import get_settings
from github_activity_tracker.github import GitHubClient, MultiRepoOrchestrator, OutputFormat
from github_activity_tracker.tracked_repos import TrackedRepositories

app = typer.Typer(help="Sync activity from GitHub")


def _print_repo_result(result: dict[str, Any]) -> None:
    """Text summary of one repository's sync."""
    name = result["repository"]
    if not result["success"]:
        console.print(f"  [red]✗[/red] {name}: {result['error']}")
        return

    console.print(
        f"  [green]✓[/green] {name}: "
        f"{result['total_inserted']} new in {result['duration_seconds']:.1f}s"
    )
    for kind, counts in result["kinds"].items():
        line = (
            f"      {kind:<13} fetched={counts['fetched']:<5} "
            f"new={counts['new']:<5} inserted={counts['inserted']}"
        )
        if counts["updated"]:
            line += f" updated={counts['updated']}"
        if counts["failed"]:
            line += f" [red]failed={counts['failed']}[/red]"
        console.print(line)

    pruned = sum(result["pruned"].values())
    collapsed = sum(result["collapsed"].values())
    if pruned or collapsed:
        console.print(f"      [dim]pruned={pruned} duplicates removed={collapsed}[/dim]")


@app.command("all")
def sync_all_repositories(
    repos: ReposListOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Run one sync cycle over every tracked repository.

    Examples:
        ghtracker sync all
        ghtracker sync all --repos prebid/prebid-server,prebid/Prebid.js
        ghtracker sync all --format json
    """
    repo_list = validate_repo_list(repos)
    settings = get_settings()
    require_token(settings)
    tracked = TrackedRepositories(settings.repos_file)
    display_repos = repo_list if repo_list is not None else tracked.load()

    if not display_repos:
        console.print(f"[yellow]No repositories tracked in {tracked.path}[/yellow]")
        return

    async def _sync() -> dict[str, Any]:
        async with open_database(settings) as database, GitHubClient() as client:
            orchestrator = MultiRepoOrchestrator(database, client, settings, tracked)
            result = await orchestrator.sync_all(repo_list)
            return result.to_dict()

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Syncing {len(display_repos)} repositories...[/dim]")
        for r in display_repos:
            console.print(f"[dim]  - {r}[/dim]")
        console.print()

    result = run_async_command(_sync(), error_prefix="Sync failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result))
        return

    summary = result["summary"]
    console.print("[bold]Sync Complete[/bold]")
    console.print()
    for repo_result in result["repositories"]:
        _print_repo_result(repo_result)
    console.print()
    console.print(f"  [bold]Repositories:[/bold] {summary['total_repos']}")
    console.print(f"    [green]Succeeded:[/green] {summary['repos_succeeded']}")
    if summary["repos_failed"]:
        console.print(f"    [red]Failed:[/red]    {summary['repos_failed']}")
    console.print(f"  Inserted: {summary['total_inserted']}")
    console.print(f"  Duration: {summary['duration_seconds']:.1f}s")


@app.command("repo")
def sync_repository(
    repo: RepoArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Sync a single repository.

    The repository does not need to be tracked.

    Examples:
        ghtracker sync repo prebid/prebid-server
        ghtracker sync repo prebid/prebid-server --format json
    """
    validate_repo(repo)
    settings = get_settings()
    require_token(settings)

    async def _sync() -> dict[str, Any]:
        async with open_database(settings) as database, GitHubClient() as client:
            orchestrator = MultiRepoOrchestrator(database, client, settings)
            result = await orchestrator.sync_repository(repo)
            return result.to_dict()

    if output_format == OutputFormat.TEXT:
        console.print(f"[dim]Syncing {repo}...[/dim]")

    result = run_async_command(_sync(), error_prefix="Sync failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result))
    else:
        _print_repo_result(result)

    if not result["success"]:
        raise typer.Exit(1)
