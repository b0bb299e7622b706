"""Schemas for the activity query API."""

from datetime import UTC, date, datetime, time, timedelta
from enum import StrEnum

from pydantic import BaseModel, Field

from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.timeutils import utc_now


class DateRange(StrEnum):
    """Named windows accepted by the activity endpoint."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL = "all"
    CUSTOM = "custom"


_WINDOW_DAYS = {
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
    DateRange.LAST_90_DAYS: 90,
}


class ActivityItem(BaseModel):
    """One row of the activity feed, whatever its kind."""

    id: int
    type: ActivityKind
    repository: str
    author: str
    created_at: datetime
    text: str | None = None
    branch: str | None = None
    state: str | None = None


class RepositoryStats(BaseModel):
    """Per-kind row counts for one repository."""

    commits: int = 0
    issues: int = 0
    pull_requests: int = Field(default=0, serialization_alias="pullRequests")
    reviews: int = 0

    @classmethod
    def from_counts(cls, counts: dict[ActivityKind, int]) -> "RepositoryStats":
        return cls(
            commits=counts.get(ActivityKind.COMMIT, 0),
            issues=counts.get(ActivityKind.ISSUE, 0),
            pull_requests=counts.get(ActivityKind.PULL_REQUEST, 0),
            reviews=counts.get(ActivityKind.REVIEW, 0),
        )


class ActivityFilter(BaseModel):
    """Resolved filters for an activity query."""

    repos: list[str] = Field(default_factory=list)
    users: list[str] = Field(default_factory=list)
    start: datetime | None = None
    end: datetime | None = None
    limit: int | None = Field(default=None, ge=1)


def _split(single: str | None, many: str | None) -> list[str]:
    if single and single.strip():
        return [single.strip()]
    if many:
        return [v.strip() for v in many.split(",") if v.strip()]
    return []


def _parse_bound(value: str, *, end_of_day: bool) -> datetime:
    """Parse a date or datetime query value as UTC.

    A bare date as an upper bound covers the whole day.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}'") from e
    if len(value) == 10:
        day = date.fromisoformat(value)
        parsed = datetime.combine(day, time.max if end_of_day else time.min)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def build_activity_filter(
    *,
    repo: str | None = None,
    repos: str | None = None,
    username: str | None = None,
    users: str | None = None,
    date_range: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    limit: int | None = None,
    now: datetime | None = None,
) -> ActivityFilter:
    """Turn raw query parameters into an ActivityFilter.

    ``repos``/``users`` are comma separated and only consulted when the
    single-value ``repo``/``username`` is absent; ``repo=all`` counts as
    absent. Without ``dateRange`` the last 30 days are returned.

    Raises:
        ValueError: On an unknown range, unparsable dates, or a custom
            range missing either bound
    """
    try:
        window = DateRange(date_range) if date_range else DateRange.LAST_30_DAYS
    except ValueError as e:
        raise ValueError(f"Invalid dateRange '{date_range}'") from e

    start: datetime | None = None
    end: datetime | None = None
    if window is DateRange.CUSTOM:
        if not start_date or not end_date:
            raise ValueError("Custom date range requires startDate and endDate")
        start = _parse_bound(start_date, end_of_day=False)
        end = _parse_bound(end_date, end_of_day=True)
        if start > end:
            raise ValueError("startDate must not be after endDate")
    elif window is not DateRange.ALL:
        start = (now or utc_now()) - timedelta(days=_WINDOW_DAYS[window])

    return ActivityFilter(
        repos=_split(None if repo == "all" else repo, repos),
        users=_split(username, users),
        start=start,
        end=end,
        limit=limit,
    )
