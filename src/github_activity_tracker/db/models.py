"""SQLAlchemy ORM models for GitHub Activity Tracker."""

from datetime import datetime
from enum import Enum
from typing import ClassVar

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    InstrumentedAttribute,
    Mapped,
    mapped_column,
)

from github_activity_tracker.timeutils import to_storage, utc_now


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class ActivityKind(str, Enum):
    """The four kinds of repository activity that are ingested."""

    COMMIT = "commit"
    PULL_REQUEST = "pull_request"
    ISSUE = "issue"
    REVIEW = "review"


class PRState(str, Enum):
    """Pull request state as reported by the pulls endpoint."""

    OPEN = "open"
    CLOSED = "closed"


def _ingested_now() -> datetime:
    return to_storage(utc_now())


# ------------------------------------------------------------------------------
# Repository model
# ------------------------------------------------------------------------------
class Repository(Base):
    """Tracked GitHub repository, identified by its owner/repo name."""

    __tablename__ = "repositories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), unique=True)  # "owner/repo"
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Repository(id={self.id}, name='{self.name}')>"


# ------------------------------------------------------------------------------
# Activity records
# ------------------------------------------------------------------------------
class ActivityRecord(Base):
    """Columns and identity metadata shared by every activity table.

    Subclasses declare:
        kind: which ActivityKind the table stores
        key_fields: columns forming the natural key within a repository
        alternate_key_fields: optional second identity (e.g. commit SHA)
        timestamp_field: the column that drives watermarks and retention
    """

    __abstract__ = True

    kind: ClassVar[ActivityKind]
    key_fields: ClassVar[tuple[str, ...]]
    alternate_key_fields: ClassVar[tuple[str, ...] | None] = None
    timestamp_field: ClassVar[str]

    id: Mapped[int] = mapped_column(primary_key=True)
    repository_id: Mapped[int] = mapped_column(
        ForeignKey("repositories.id", ondelete="CASCADE"), index=True
    )
    author: Mapped[str] = mapped_column(Text)
    ingested_at: Mapped[datetime] = mapped_column(DateTime, default=_ingested_now)

    @classmethod
    def timestamp_column(cls) -> InstrumentedAttribute[datetime]:
        return getattr(cls, cls.timestamp_field)

    @classmethod
    def identity_fields(cls) -> tuple[str, ...]:
        """All columns needed to compute every identity of a row."""
        fields = list(cls.key_fields)
        for name in cls.alternate_key_fields or ():
            if name not in fields:
                fields.append(name)
        return tuple(fields)

    @property
    def timestamp(self) -> datetime:
        return getattr(self, self.timestamp_field)


class Commit(ActivityRecord):
    """A commit seen on one branch.

    The same commit reachable from several branches is stored once per branch.
    """

    __tablename__ = "commits"
    __table_args__ = (
        Index("ix_commits_repo_committed_at", "repository_id", "committed_at"),
    )

    kind = ActivityKind.COMMIT
    key_fields = ("message", "author", "committed_at", "branch")
    alternate_key_fields = ("sha", "branch")
    timestamp_field = "committed_at"

    sha: Mapped[str | None] = mapped_column(String(40), nullable=True)
    message: Mapped[str] = mapped_column(Text)
    committed_at: Mapped[datetime] = mapped_column(DateTime)
    branch: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Commit(id={self.id}, branch='{self.branch}', sha='{self.sha}')>"


class PullRequest(ActivityRecord):
    """A pull request, keyed by its number within the repository."""

    __tablename__ = "pull_requests"
    __table_args__ = (
        Index("ix_pull_requests_repo_number", "repository_id", "number"),
    )

    kind = ActivityKind.PULL_REQUEST
    key_fields = ("number",)
    timestamp_field = "created_at"

    number: Mapped[int] = mapped_column()
    title: Mapped[str] = mapped_column(Text)
    state: Mapped[str] = mapped_column(String(20), default=PRState.OPEN.value)
    created_at: Mapped[datetime] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return f"<PullRequest(id={self.id}, number={self.number}, state='{self.state}')>"


class Issue(ActivityRecord):
    """An issue (pull requests reported by the issues endpoint are excluded)."""

    __tablename__ = "issues"
    __table_args__ = (
        Index("ix_issues_repo_number", "repository_id", "number"),
    )

    kind = ActivityKind.ISSUE
    key_fields = ("number",)
    timestamp_field = "created_at"

    number: Mapped[int] = mapped_column()
    title: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return f"<Issue(id={self.id}, number={self.number})>"


class Review(ActivityRecord):
    """A pull request review. The only table with a storage-level unique key."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("repository_id", "review_id", name="uq_repo_review_id"),
    )

    kind = ActivityKind.REVIEW
    key_fields = ("review_id",)
    timestamp_field = "submitted_at"

    review_id: Mapped[str] = mapped_column(String(64))
    pr_number: Mapped[int] = mapped_column()
    comment: Mapped[str] = mapped_column(Text)
    submitted_at: Mapped[datetime] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, review_id='{self.review_id}', pr={self.pr_number})>"


ACTIVITY_MODELS: dict[ActivityKind, type[ActivityRecord]] = {
    ActivityKind.COMMIT: Commit,
    ActivityKind.PULL_REQUEST: PullRequest,
    ActivityKind.ISSUE: Issue,
    ActivityKind.REVIEW: Review,
}
