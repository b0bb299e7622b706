"""GitHub API inspection commands."""

import typer
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from github_activity_tracker.cli.common import console, require_token, run_async_command
from github_activity_tracker.github import (
    GitHubAuthenticationError,
    GitHubClient,
    RateLimitMonitor,
    RateLimitPool,
    RateLimitStatus,
)

app = typer.Typer(help="GitHub API commands")


def _get_status_style(status: RateLimitStatus) -> str:
    """Get rich style for status."""
    match status:
        case RateLimitStatus.HEALTHY:
            return "[green]HEALTHY[/green]"
        case RateLimitStatus.WARNING:
            return "[yellow]WARNING[/yellow]"
        case RateLimitStatus.CRITICAL:
            return "[red]CRITICAL[/red]"
        case RateLimitStatus.EXHAUSTED:
            return "[bold red]EXHAUSTED[/bold red]"
        case _:
            return str(status)


def _format_time_remaining(seconds: int) -> str:
    """Format seconds as human-readable time."""
    if seconds <= 0:
        return "Now"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def _render(monitor: RateLimitMonitor, all_pools: bool) -> None:
    token = monitor.token_info
    if token is not None and token.is_pat:
        console.print("[green]✓[/green] Authenticated with PAT (5,000 requests/hour)")
    else:
        console.print("[yellow]⚠[/yellow] Unauthenticated or limited token (60 requests/hour)")

    pools: list[RateLimitPool] = list(RateLimitPool) if all_pools else [RateLimitPool.CORE]

    table = Table(title="GitHub API Rate Limits")
    table.add_column("Pool", style="bold")
    table.add_column("Status")
    table.add_column("Remaining", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Resets In", justify="right")

    for pool in pools:
        limit = monitor.get_pool_limit(pool)
        if limit is None:
            continue
        table.add_row(
            pool.value,
            _get_status_style(monitor.get_status(pool)),
            str(limit.remaining),
            str(limit.limit),
            _format_time_remaining(limit.seconds_until_reset()),
        )

    console.print()
    console.print(table)

    core = monitor.get_pool_limit(RateLimitPool.CORE)
    if core is None:
        return

    console.print()
    remaining_pct = core.remaining_percent
    with Progress(
        TextColumn("[bold]Core quota:[/bold]"),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TextColumn(f"{remaining_pct:.1f}% remaining"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("", total=100)
        progress.update(task, completed=remaining_pct)
        progress.refresh()

    wait = monitor.required_wait()
    if wait > 0:
        console.print(
            f"\n[yellow]Below the low-water mark:[/yellow] a sync would pause "
            f"{_format_time_remaining(wait)} before its next request."
        )


@app.command("rate-limit")
def show_rate_limit(
    all_pools: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show all rate limit pools (not just core)",
    ),
) -> None:
    """Show current GitHub API rate limit status.

    Examples:
        ghtracker github rate-limit
        ghtracker github rate-limit --all
    """
    require_token()

    async def _check() -> RateLimitMonitor:
        try:
            async with GitHubClient() as client:
                await client.get_rate_limit()
                return client.rate_monitor
        except GitHubAuthenticationError:
            console.print("[red]Error:[/red] Invalid GitHub token")
            raise typer.Exit(1) from None

    monitor = run_async_command(_check(), error_prefix="Rate limit check failed")
    _render(monitor, all_pools)
