"""Repositories for the four activity tables.

All operations are scoped to a single tracked repository. The write
paths issue set-based statements (bulk insert, grouped delete) rather
than loading ORM objects, since a sync touches many rows at once.
"""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from github_activity_tracker.db.models import (
    ActivityKind,
    ActivityRecord,
    Commit,
    Issue,
    PullRequest,
    Review,
)
from github_activity_tracker.timeutils import to_storage

from .base import BaseRepository

ActivityT = TypeVar("ActivityT", bound=ActivityRecord)


class ActivityRepository(BaseRepository[ActivityT]):
    """Per-repository reads and writes for one activity table."""

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    async def latest_timestamp(self, repository_id: int) -> datetime | None:
        """Most recent defining timestamp stored for the repository."""
        stmt = select(func.max(self._model_class.timestamp_column())).where(
            self._model_class.repository_id == repository_id
        )
        result = await self._session.execute(stmt)
        return result.scalar()

    async def existing_key_rows(self, repository_id: int) -> list[dict[str, Any]]:
        """Identity columns of every stored row, as plain mappings.

        Returns only the columns the deduplicator needs, not full rows.
        """
        columns = [
            getattr(self._model_class, name)
            for name in self._model_class.identity_fields()
        ]
        stmt = select(*columns).where(self._model_class.repository_id == repository_id)
        result = await self._session.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def count_for(self, repository_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(self._model_class)
            .where(self._model_class.repository_id == repository_id)
        )
        result = await self._session.execute(stmt)
        return result.scalar() or 0

    async def list_for(self, repository_id: int) -> list[ActivityT]:
        stmt = (
            select(self._model_class)
            .where(self._model_class.repository_id == repository_id)
            .order_by(self._model_class.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    # -------------------------------------------------------------------------
    # Write Methods
    # -------------------------------------------------------------------------

    async def bulk_insert(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert many rows in one executemany statement.

        Either every row is written or the statement fails as a whole.
        """
        if not rows:
            return 0
        await self._session.execute(insert(self._model_class), [dict(r) for r in rows])
        return len(rows)

    async def insert_one(self, row: Mapping[str, Any]) -> ActivityT:
        entity = self.add(self._model_class(**row))
        await self.flush()
        return entity

    async def delete_older_than(self, repository_id: int, cutoff: datetime) -> int:
        """Delete rows whose timestamp is strictly earlier than ``cutoff``.

        Rows stamped exactly at the cutoff are kept.
        """
        stmt = delete(self._model_class).where(
            self._model_class.repository_id == repository_id,
            self._model_class.timestamp_column() < to_storage(cutoff),
        )
        result: CursorResult[Any] = await self._session.execute(stmt)  # type: ignore[assignment]
        return result.rowcount or 0

    async def collapse_duplicates(self, repository_id: int) -> int:
        """Keep the lowest id of every natural-key group; delete the rest.

        Returns:
            Number of rows deleted
        """
        key_columns = [getattr(self._model_class, name) for name in self._model_class.key_fields]
        survivors = (
            select(func.min(self._model_class.id))
            .where(self._model_class.repository_id == repository_id)
            .group_by(*key_columns)
        )
        stmt = delete(self._model_class).where(
            self._model_class.repository_id == repository_id,
            self._model_class.id.not_in(survivors),
        )
        result: CursorResult[Any] = await self._session.execute(stmt)  # type: ignore[assignment]
        return result.rowcount or 0


class CommitRepository(ActivityRepository[Commit]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Commit)


class PullRequestRepository(ActivityRepository[PullRequest]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PullRequest)

    async def stored_states(self, repository_id: int) -> dict[int, tuple[str, str]]:
        """Map of PR number to its stored (state, title)."""
        stmt = select(PullRequest.number, PullRequest.state, PullRequest.title).where(
            PullRequest.repository_id == repository_id
        )
        result = await self._session.execute(stmt)
        return {number: (state, title) for number, state, title in result}

    async def update_state(
        self,
        repository_id: int,
        number: int,
        *,
        state: str,
        title: str,
    ) -> int:
        """Overwrite state and title of every row for this PR number.

        Returns:
            Number of rows updated
        """
        stmt = (
            update(PullRequest)
            .where(
                PullRequest.repository_id == repository_id,
                PullRequest.number == number,
            )
            .values(state=state, title=title)
        )
        result: CursorResult[Any] = await self._session.execute(stmt)  # type: ignore[assignment]
        return result.rowcount or 0


class IssueRepository(ActivityRepository[Issue]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Issue)


class ReviewRepository(ActivityRepository[Review]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Review)


_REPOSITORIES: dict[ActivityKind, Callable[[AsyncSession], ActivityRepository[Any]]] = {
    ActivityKind.COMMIT: CommitRepository,
    ActivityKind.PULL_REQUEST: PullRequestRepository,
    ActivityKind.ISSUE: IssueRepository,
    ActivityKind.REVIEW: ReviewRepository,
}


def activity_repository(session: AsyncSession, kind: ActivityKind) -> ActivityRepository[Any]:
    """Repository for the table that stores ``kind``."""
    return _REPOSITORIES[kind](session)
