"""Repository Sync Service - one full ingestion run for one repository.

Stages run strictly in order, each finishing before the next starts:

    prune -> dedup maintenance -> commits -> pull requests -> issues -> reviews

Within a stage the network calls fan out (branches, review batches) but
every database write happens after the fan-out has been awaited.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError

from github_activity_tracker.config import Settings, get_settings
from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import ActivityKind, PRState
from github_activity_tracker.db.repositories import PullRequestRepository, RepositoryRepository
from github_activity_tracker.logging import bind_repo
from github_activity_tracker.schemas.activity import ActivityCreate, PullRequestCreate
from github_activity_tracker.schemas.github_api import GitHubBranch, GitHubIssue, GitHubPullRequest
from github_activity_tracker.timeutils import to_storage, utc_now

from ..batching import gather_bounded, run_in_batches
from .dedup import Deduplicator
from .enums import SyncStage
from .persistence import BatchWriter
from .results import KindSyncResult, RepoSyncResult
from .retention import RetentionPruner
from .watermark import WatermarkTracker

if TYPE_CHECKING:
    from loguru import Logger

    from github_activity_tracker.github.client import GitHubClient

T = TypeVar("T")


def _in_window(records: Sequence[ActivityCreate], since: datetime) -> list[ActivityCreate]:
    """Drop records older than ``since``; upstream ``since`` filters are not exact."""
    bound = to_storage(since)
    return [r for r in records if r.timestamp >= bound]


def _convert_each(
    kind: ActivityKind,
    items: Iterable[T],
    convert: Callable[[T], ActivityCreate],
    result: KindSyncResult,
    log: Logger,
) -> list[ActivityCreate]:
    """Convert fetched items one by one, counting rejects in ``result.failed``."""
    records: list[ActivityCreate] = []
    for item in items:
        try:
            records.append(convert(item))
        except ValidationError as e:
            log.warning("Skipping invalid {} record: {}", kind.value, e)
            result.failed += 1
    return records


class RepositorySyncService:
    """Runs the sync stages for a single repository.

    Usage:
        async with GitHubClient() as client:
            service = RepositorySyncService(database, client)
            result = await service.sync_repository("prebid/prebid-server")

    Exceptions from any stage propagate; the orchestrator decides whether
    a failed repository stops the cycle.
    """

    def __init__(
        self,
        database: Database,
        client: GitHubClient,
        settings: Settings | None = None,
    ) -> None:
        self._database = database
        self._client = client
        self._settings = settings or get_settings()

        sync_config = self._settings.sync
        self._config = sync_config
        self._watermarks = WatermarkTracker(database, sync_config.retention)
        self._dedup = Deduplicator(database)
        self._pruner = RetentionPruner(database, sync_config.retention)
        self._writer = BatchWriter(database, sync_config.insert_batch_size)

    async def sync_repository(
        self,
        name: str,
        now: datetime | None = None,
        result: RepoSyncResult | None = None,
    ) -> RepoSyncResult:
        """Run every stage for ``name`` and record the completion time.

        Args:
            name: Repository in owner/repo format
            now: Reference time for the retention horizon (defaults to now)
            result: Result to fill in as stages finish. A caller that passes
                its own keeps the counts of completed stages if a later
                stage raises.

        Returns:
            RepoSyncResult with per-kind counts
        """
        now = now or utc_now()
        log = bind_repo(name)
        if result is None:
            result = RepoSyncResult(repository=name, started_at=now)

        async with self._database.session() as session:
            repo, created = await RepositoryRepository(session).get_or_create(name)
            repository_id = repo.id
        if created:
            log.info("Created repository record")

        log.debug("Stage {}", SyncStage.PRUNE.value)
        result.pruned = await self._pruner.prune(repository_id, now)

        log.debug("Stage {}", SyncStage.DEDUP_MAINTENANCE.value)
        result.collapsed = await self._dedup.collapse_all(repository_id)

        log.debug("Stage {}", SyncStage.COMMITS.value)
        result.kinds[ActivityKind.COMMIT] = await self._sync_commits(name, repository_id, now)

        log.debug("Stage {}", SyncStage.PULL_REQUESTS.value)
        pr_result, pull_requests = await self._sync_pull_requests(name, repository_id, now)
        result.kinds[ActivityKind.PULL_REQUEST] = pr_result

        log.debug("Stage {}", SyncStage.ISSUES.value)
        result.kinds[ActivityKind.ISSUE] = await self._sync_issues(name, repository_id, now)

        log.debug("Stage {}", SyncStage.REVIEWS.value)
        result.kinds[ActivityKind.REVIEW] = await self._sync_reviews(
            name, repository_id, pull_requests, now
        )

        async with self._database.session() as session:
            await RepositoryRepository(session).update_last_synced(repository_id, utc_now())

        result.completed_at = utc_now()
        log.info(
            "Sync complete: inserted={}, failed={} ({:.1f}s)",
            result.total_inserted,
            result.total_failed,
            result.duration_seconds,
        )
        return result

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    async def _persist(
        self,
        kind: ActivityKind,
        repository_id: int,
        records: Sequence[ActivityCreate],
        result: KindSyncResult,
    ) -> None:
        """Deduplicate against stored rows, then write what is new."""
        result.fetched += len(records)
        existing = await self._dedup.existing_keys(repository_id, kind)
        new_records = self._dedup.filter_new(records, existing)
        result.new += len(new_records)

        written = await self._writer.write(kind, repository_id, new_records)
        result.inserted += written.inserted
        result.failed += written.failed

    async def _sync_commits(self, name: str, repository_id: int, now: datetime) -> KindSyncResult:
        result = KindSyncResult()
        since = await self._watermarks.effective_since(repository_id, ActivityKind.COMMIT, now)
        branches = await self._client.list_branches(name)

        async def fetch_branch(branch: GitHubBranch) -> list[ActivityCreate]:
            commits = await self._client.list_commits(name, branch.name, since=since)
            return _convert_each(
                ActivityKind.COMMIT,
                commits,
                lambda c: c.to_commit_create(branch.name),
                result,
                bind_repo(name),
            )

        fetched = await gather_bounded(
            branches, fetch_branch, limit=self._config.branch_concurrency
        )
        for branch, error in fetched.failed:
            bind_repo(name).warning("Commit fetch for branch {} failed: {}", branch.name, error)
        result.failed += fetched.failure_count

        records = [c for batch in fetched.results for c in batch]
        await self._persist(ActivityKind.COMMIT, repository_id, _in_window(records, since), result)
        return result

    async def _sync_pull_requests(
        self,
        name: str,
        repository_id: int,
        now: datetime,
    ) -> tuple[KindSyncResult, list[GitHubPullRequest]]:
        """Fetch open then closed PRs; return the raw list for the review stage."""
        result = KindSyncResult()
        since = await self._watermarks.effective_since(
            repository_id, ActivityKind.PULL_REQUEST, now
        )

        pull_requests: list[GitHubPullRequest] = []
        for state in (PRState.OPEN, PRState.CLOSED):
            pull_requests.extend(await self._client.list_pull_requests(name, state=state.value))

        records = _convert_each(
            ActivityKind.PULL_REQUEST,
            pull_requests,
            GitHubPullRequest.to_pull_request_create,
            result,
            bind_repo(name),
        )
        records = _in_window(records, since)

        if self._config.update_pull_request_state:
            result.updated = await self._update_states(repository_id, records)

        await self._persist(ActivityKind.PULL_REQUEST, repository_id, records, result)
        return result, pull_requests

    async def _update_states(
        self,
        repository_id: int,
        records: Sequence[ActivityCreate],
    ) -> int:
        """Bring stored PR state and title in line with what GitHub reports now."""
        updated = 0
        async with self._database.session() as session:
            repo = PullRequestRepository(session)
            stored = await repo.stored_states(repository_id)
            for record in records:
                if not isinstance(record, PullRequestCreate) or record.number not in stored:
                    continue
                current = (record.state.value, record.title)
                if stored[record.number] != current:
                    updated += await repo.update_state(
                        repository_id,
                        record.number,
                        state=record.state.value,
                        title=record.title,
                    )
                    stored[record.number] = current
        return updated

    async def _sync_issues(self, name: str, repository_id: int, now: datetime) -> KindSyncResult:
        result = KindSyncResult()
        since = await self._watermarks.effective_since(repository_id, ActivityKind.ISSUE, now)
        issues = await self._client.list_issues(name, since=since)

        records = _convert_each(
            ActivityKind.ISSUE,
            (i for i in issues if not i.is_pull_request),
            GitHubIssue.to_issue_create,
            result,
            bind_repo(name),
        )
        await self._persist(ActivityKind.ISSUE, repository_id, _in_window(records, since), result)
        return result

    async def _sync_reviews(
        self,
        name: str,
        repository_id: int,
        pull_requests: Sequence[GitHubPullRequest],
        now: datetime,
    ) -> KindSyncResult:
        result = KindSyncResult()
        since = await self._watermarks.effective_since(repository_id, ActivityKind.REVIEW, now)

        recent = [
            pr
            for pr in pull_requests
            if pr.state == PRState.OPEN or pr.updated_at >= since
        ]

        async def fetch_reviews(pr: GitHubPullRequest) -> list[ActivityCreate]:
            reviews = await self._client.list_reviews(name, pr.number)
            return _convert_each(
                ActivityKind.REVIEW,
                reviews,
                lambda r: r.to_review_create(pr.number, now),
                result,
                bind_repo(name),
            )

        fetched = await run_in_batches(
            recent,
            fetch_reviews,
            batch_size=self._config.review_batch_size,
            before_batch=self._client.wait_for_rate_limit,
        )
        for pr, error in fetched.failed:
            bind_repo(name).warning("Review fetch for PR #{} failed: {}", pr.number, error)
        result.failed += fetched.failure_count

        records = [r for batch in fetched.results for r in batch]
        await self._persist(ActivityKind.REVIEW, repository_id, _in_window(records, since), result)
        return result
