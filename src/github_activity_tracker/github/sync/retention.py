"""Retention pruning of old activity."""

from __future__ import annotations

from datetime import datetime, timedelta

from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import activity_repository
from github_activity_tracker.logging import get_logger
from github_activity_tracker.timeutils import retention_cutoff

logger = get_logger(__name__)


class RetentionPruner:
    """Deletes activity older than the retention horizon.

    The boundary is exclusive: a record stamped exactly at
    ``now - retention`` survives, anything earlier is removed.
    """

    def __init__(self, database: Database, retention: timedelta) -> None:
        self._database = database
        self._retention = retention

    async def prune(
        self,
        repository_id: int,
        now: datetime | None = None,
    ) -> dict[ActivityKind, int]:
        """Prune every activity kind for one repository in a single transaction.

        Returns:
            Rows deleted per kind
        """
        cutoff = retention_cutoff(self._retention, now)
        deleted: dict[ActivityKind, int] = {}

        async with self._database.session() as session:
            for kind in ActivityKind:
                repo = activity_repository(session, kind)
                deleted[kind] = await repo.delete_older_than(repository_id, cutoff)

        total = sum(deleted.values())
        if total:
            logger.info("Pruned {} records older than {}", total, cutoff.isoformat())
        return deleted
