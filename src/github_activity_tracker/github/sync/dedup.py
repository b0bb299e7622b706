"""Duplicate detection for fetched activity.

A record's identities are derived from its kind's natural key, plus an
alternate key where the upstream API supplies a stable identifier (the
commit SHA). A candidate is new only if none of its identities is
already stored or already accepted earlier in the same batch.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from github_activity_tracker.db.engine import Database
from github_activity_tracker.db.models import ACTIVITY_MODELS, ActivityKind
from github_activity_tracker.db.repositories import activity_repository
from github_activity_tracker.logging import get_logger
from github_activity_tracker.schemas.activity import ActivityCreate

logger = get_logger(__name__)

CreateT = TypeVar("CreateT", bound=ActivityCreate)

NaturalKey = tuple[Hashable, ...]

MAINTENANCE_KINDS: tuple[ActivityKind, ...] = (
    ActivityKind.COMMIT,
    ActivityKind.REVIEW,
    ActivityKind.PULL_REQUEST,
    ActivityKind.ISSUE,
)


def natural_keys(kind: ActivityKind, values: Mapping[str, Any]) -> list[NaturalKey]:
    """Every identity of a record, as hashable tuples.

    Args:
        kind: Activity kind (selects the key columns)
        values: Column values of a stored row or a candidate

    Returns:
        The natural key, followed by the alternate key when all of its
        columns are present
    """
    model = ACTIVITY_MODELS[kind]
    keys: list[NaturalKey] = [("key", *(values[name] for name in model.key_fields))]
    alternate = model.alternate_key_fields
    if alternate and all(values.get(name) is not None for name in alternate):
        keys.append(("alt", *(values[name] for name in alternate)))
    return keys


class Deduplicator:
    """Filters out already-stored records and repairs stored duplicates.

    Usage:
        dedup = Deduplicator(database)
        existing = await dedup.existing_keys(repository_id, ActivityKind.COMMIT)
        new_commits = dedup.filter_new(candidates, existing)
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    async def existing_keys(self, repository_id: int, kind: ActivityKind) -> set[NaturalKey]:
        """Identities of every row of ``kind`` stored for the repository."""
        async with self._database.session() as session:
            rows = await activity_repository(session, kind).existing_key_rows(repository_id)

        keys: set[NaturalKey] = set()
        for row in rows:
            keys.update(natural_keys(kind, row))
        return keys

    @staticmethod
    def filter_new(
        candidates: Iterable[CreateT],
        existing_keys: set[NaturalKey],
    ) -> list[CreateT]:
        """Candidates whose identities are all unseen, in input order.

        ``existing_keys`` is updated in place with every accepted
        candidate, so repeats inside the batch are dropped too.
        """
        accepted: list[CreateT] = []
        for candidate in candidates:
            keys = natural_keys(candidate.kind, candidate.model_dump())
            if any(key in existing_keys for key in keys):
                continue
            existing_keys.update(keys)
            accepted.append(candidate)
        return accepted

    async def collapse_duplicates(self, repository_id: int, kind: ActivityKind) -> int:
        """Delete all but the lowest-id row of each natural-key group.

        Returns:
            Rows deleted
        """
        async with self._database.session() as session:
            removed = await activity_repository(session, kind).collapse_duplicates(repository_id)
        if removed:
            logger.info("Removed {} duplicate {} rows", removed, kind.value)
        return removed

    async def collapse_all(
        self,
        repository_id: int,
        kinds: Sequence[ActivityKind] = MAINTENANCE_KINDS,
    ) -> dict[ActivityKind, int]:
        """Maintenance pass over several kinds.

        A failure on one kind is logged and does not stop the others.
        """
        removed: dict[ActivityKind, int] = {}
        for kind in kinds:
            try:
                removed[kind] = await self.collapse_duplicates(repository_id, kind)
            except SQLAlchemyError as e:
                logger.warning("Duplicate cleanup for {} failed: {}", kind.value, e)
        return removed
