"""Read-side queries backing the activity API."""

from datetime import datetime
from typing import Any

from sqlalchemy import String, cast, literal, null, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from github_activity_tracker.db.models import (
    ActivityKind,
    ActivityRecord,
    Commit,
    Issue,
    PullRequest,
    Repository,
    Review,
)
from github_activity_tracker.timeutils import to_storage

from .activity import activity_repository

USER_LIMIT = 500


class ActivityQueryRepository:
    """Union queries across all activity tables.

    Every kind is projected onto the same columns:
    id, type, repository, author, created_at, text, branch, state.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _project(self, model: type[ActivityRecord], text: Any, branch: Any, state: Any) -> Select[Any]:
        return select(
            model.id.label("id"),
            literal(model.kind.value).label("type"),
            Repository.name.label("repository"),
            model.author.label("author"),
            model.timestamp_column().label("created_at"),
            text.label("text"),
            branch.label("branch"),
            state.label("state"),
        ).join(Repository, Repository.id == model.repository_id)

    def _kind_select(
        self,
        kind: ActivityKind,
        *,
        repos: list[str] | None,
        users: list[str] | None,
        start: datetime | None,
        end: datetime | None,
    ) -> Select[Any]:
        empty = cast(null(), String)
        if kind is ActivityKind.COMMIT:
            stmt = self._project(Commit, Commit.message, Commit.branch, empty)
            model: type[ActivityRecord] = Commit
        elif kind is ActivityKind.PULL_REQUEST:
            stmt = self._project(PullRequest, PullRequest.title, empty, PullRequest.state)
            model = PullRequest
        elif kind is ActivityKind.ISSUE:
            stmt = self._project(Issue, Issue.title, empty, empty)
            model = Issue
        else:
            stmt = self._project(Review, Review.comment, empty, empty)
            model = Review

        timestamp = model.timestamp_column()
        if repos:
            stmt = stmt.where(Repository.name.in_(repos))
        if users:
            stmt = stmt.where(model.author.in_(users))
        if start is not None:
            stmt = stmt.where(timestamp >= to_storage(start))
        if end is not None:
            stmt = stmt.where(timestamp <= to_storage(end))
        return stmt

    async def list_activity(
        self,
        *,
        repos: list[str] | None = None,
        users: list[str] | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """All matching activity, newest first.

        Args:
            repos: Restrict to these owner/repo names
            users: Restrict to these authors
            start: Inclusive lower bound on the activity timestamp
            end: Inclusive upper bound on the activity timestamp
            limit: Maximum rows returned
        """
        selects = [
            self._kind_select(kind, repos=repos, users=users, start=start, end=end)
            for kind in ActivityKind
        ]
        combined = union_all(*selects).subquery()
        stmt = select(combined).order_by(combined.c.created_at.desc(), combined.c.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def list_users(self, limit: int = USER_LIMIT) -> list[str]:
        """Distinct commit authors."""
        stmt = select(Commit.author).distinct().order_by(Commit.author).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def stats(self, repository_id: int) -> dict[ActivityKind, int]:
        """Row counts per activity kind for one repository."""
        return {
            kind: await activity_repository(self._session, kind).count_for(repository_id)
            for kind in ActivityKind
        }

    async def total_rows(self) -> int:
        """Total activity rows across all repositories."""
        total = 0
        for kind in ActivityKind:
            repo = activity_repository(self._session, kind)
            total += await repo.count()
        return total

