"""Per-repository, per-kind sync cursors."""

from __future__ import annotations

from datetime import datetime, timedelta

from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import activity_repository
from github_activity_tracker.timeutils import from_storage, retention_cutoff, utc_now


class WatermarkTracker:
    """Reads how far back each ingestion flow has to look.

    The watermark of a (repository, kind) pair is the newest stored
    timestamp of that kind. The window actually fetched is clamped so it
    always reaches back to the retention horizon:

        effective_since = min(latest, now - retention)

    Every run therefore re-scans the whole retention window and relies on
    deduplication to discard what is already stored.
    """

    def __init__(self, database: Database, retention: timedelta) -> None:
        self._database = database
        self._retention = retention

    async def latest_timestamp(
        self,
        repository_id: int,
        kind: ActivityKind,
        now: datetime | None = None,
    ) -> datetime:
        """Newest stored timestamp, or the retention horizon if none exists."""
        async with self._database.session() as session:
            latest = await activity_repository(session, kind).latest_timestamp(repository_id)
        if latest is None:
            return retention_cutoff(self._retention, now)
        return from_storage(latest)

    async def effective_since(
        self,
        repository_id: int,
        kind: ActivityKind,
        now: datetime | None = None,
    ) -> datetime:
        """Lower bound for this run's fetch of ``kind``."""
        now = now or utc_now()
        latest = await self.latest_timestamp(repository_id, kind, now)
        return min(latest, retention_cutoff(self._retention, now))
