"""Pydantic schemas for activity rows about to be written.

Each schema mirrors one activity table and knows the natural key of
its kind, so the deduplicator can compare fetched records with rows
already in the database without touching ORM objects.
"""

from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from github_activity_tracker.db.models import ActivityKind, PRState
from github_activity_tracker.timeutils import to_storage

StorageDatetime = Annotated[datetime, AfterValidator(to_storage)]
"""Datetime normalized to naive UTC at second precision on validation."""

DEFAULT_REVIEW_COMMENT = "No comment"
UNKNOWN_AUTHOR = "unknown"


class ActivityCreate(BaseModel):
    """Common behaviour of the four create schemas.

    Whitespace is preserved: commit messages are part of the commit key.
    """

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[ActivityKind]
    timestamp_field: ClassVar[str]

    author: str = UNKNOWN_AUTHOR

    @property
    def timestamp(self) -> datetime:
        return getattr(self, self.timestamp_field)

    def to_row(self, repository_id: int) -> dict[str, Any]:
        """Column values for an insert into the kind's table."""
        return {"repository_id": repository_id, **self.model_dump()}


class CommitCreate(ActivityCreate):
    kind = ActivityKind.COMMIT
    timestamp_field = "committed_at"

    sha: str | None = Field(default=None, max_length=40)
    message: str
    committed_at: StorageDatetime
    branch: str


class PullRequestCreate(ActivityCreate):
    kind = ActivityKind.PULL_REQUEST
    timestamp_field = "created_at"

    number: int
    title: str
    state: PRState
    created_at: StorageDatetime

    def to_row(self, repository_id: int) -> dict[str, Any]:
        row = super().to_row(repository_id)
        row["state"] = self.state.value
        return row


class IssueCreate(ActivityCreate):
    kind = ActivityKind.ISSUE
    timestamp_field = "created_at"

    number: int
    title: str
    created_at: StorageDatetime


class ReviewCreate(ActivityCreate):
    kind = ActivityKind.REVIEW
    timestamp_field = "submitted_at"

    review_id: str = Field(max_length=64)
    pr_number: int
    comment: str = DEFAULT_REVIEW_COMMENT
    submitted_at: StorageDatetime
