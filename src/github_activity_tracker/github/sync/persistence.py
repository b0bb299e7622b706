"""Batched writes with a row-by-row fallback."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.db.repositories import activity_repository
from github_activity_tracker.logging import get_logger
from github_activity_tracker.schemas.activity import ActivityCreate

logger = get_logger(__name__)


@dataclass
class WriteResult:
    """Rows written and rows rejected by one BatchWriter call."""

    inserted: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


class BatchWriter:
    """Inserts activity in chunks, degrading to single inserts on failure.

    Each chunk is first written with one bulk statement in its own
    transaction. If that fails (for example a unique constraint hit by a
    single row) the chunk is retried one row per transaction; rows that
    still fail are logged and counted, the rest are kept.
    """

    def __init__(self, database: Database, batch_size: int = 20) -> None:
        self._database = database
        self._batch_size = batch_size

    async def write(
        self,
        kind: ActivityKind,
        repository_id: int,
        records: Sequence[ActivityCreate],
    ) -> WriteResult:
        result = WriteResult()
        rows = [record.to_row(repository_id) for record in records]

        for start in range(0, len(rows), self._batch_size):
            chunk = rows[start : start + self._batch_size]
            try:
                async with self._database.session() as session:
                    result.inserted += await activity_repository(session, kind).bulk_insert(chunk)
                continue
            except SQLAlchemyError as e:
                logger.warning(
                    "Bulk insert of {} {} rows failed, inserting one by one: {}",
                    len(chunk),
                    kind.value,
                    e.__class__.__name__,
                )

            for row in chunk:
                try:
                    async with self._database.session() as session:
                        await activity_repository(session, kind).insert_one(row)
                    result.inserted += 1
                except SQLAlchemyError as e:
                    result.failed += 1
                    result.errors.append(str(e.__cause__ or e))
                    logger.warning("Skipping {} row: {}", kind.value, e.__class__.__name__)

        return result
