"""Multi-Repository Sync Orchestrator - Sync all tracked repositories.

Runs RepositorySyncService over every tracked repository in list order.
A failure in one repository is logged and recorded in its result; the
remaining repositories still sync.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from github_activity_tracker.config import Settings, get_settings
from github_activity_tracker.db.engine import Database
from github_activity_tracker.logging import LogContext, get_logger
from github_activity_tracker.timeutils import utc_now
from github_activity_tracker.tracked_repos import TrackedRepositories

from .repository_sync import RepositorySyncService
from .results import MultiRepoSyncResult, RepoSyncResult

if TYPE_CHECKING:
    from github_activity_tracker.github.client import GitHubClient

logger = get_logger(__name__)


class MultiRepoOrchestrator:
    """Orchestrates syncing of multiple GitHub repositories.

    Usage:
        async with GitHubClient() as client:
            orchestrator = MultiRepoOrchestrator(database, client)
            result = await orchestrator.sync_all()

    Only one cycle runs at a time; a second ``sync_all`` call waits for
    the first to finish.
    """

    def __init__(
        self,
        database: Database,
        client: GitHubClient,
        settings: Settings | None = None,
        tracked: TrackedRepositories | None = None,
    ) -> None:
        """Initialize the multi-repo orchestrator.

        Args:
            database: Database handle shared by every stage
            client: GitHub API client
            settings: Application settings (defaults to get_settings())
            tracked: Tracked repository list (defaults to settings.repos_file)
        """
        self._settings = settings or get_settings()
        self._tracked = tracked or TrackedRepositories(self._settings.repos_file)
        self._service = RepositorySyncService(database, client, self._settings)
        self._lock = asyncio.Lock()

    @property
    def tracked(self) -> TrackedRepositories:
        return self._tracked

    async def sync_repository(self, name: str) -> RepoSyncResult:
        """Sync one repository, converting any failure into a failed result.

        Counts from the stages that finished before the failure are kept.
        """
        result = RepoSyncResult(repository=name, started_at=utc_now())
        with LogContext(repo=name):
            try:
                return await self._service.sync_repository(name, result=result)
            except Exception as e:
                # Isolate the failure so the cycle moves on
                logger.exception("Failed to sync {}: {}", name, e)
                result.completed_at = utc_now()
                result.error = str(e) or e.__class__.__name__
                return result

    async def sync_all(self, repos: list[str] | None = None) -> MultiRepoSyncResult:
        """Sync all tracked repositories.

        Args:
            repos: Repositories to sync (owner/repo format).
                   If None, reads the tracked repository list.

        Returns:
            MultiRepoSyncResult with one entry per repository.
        """
        async with self._lock:
            start_time = time.monotonic()
            result = MultiRepoSyncResult()
            repo_list = repos if repos is not None else self._tracked.load()

            logger.info("Starting sync cycle for {} repositories", len(repo_list))
            for name in repo_list:
                logger.info("Starting sync for {}", name)
                result.repo_results.append(await self.sync_repository(name))

            result.duration_seconds = time.monotonic() - start_time
            logger.info(
                "Sync cycle complete: repos={}, succeeded={}, failed={}, inserted={} ({:.1f}s)",
                len(result.repo_results),
                result.repos_succeeded,
                result.repos_failed,
                result.total_inserted,
                result.duration_seconds,
            )
            return result
