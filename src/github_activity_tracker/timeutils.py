"""UTC timestamp helpers.

All activity timestamps are stored as naive UTC datetimes truncated to
whole seconds. These helpers are the single place that conversion happens.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Current time as an aware UTC datetime, second precision."""
    return datetime.now(UTC).replace(microsecond=0)


def to_storage(value: datetime) -> datetime:
    """Normalize a datetime for storage (naive UTC, second precision).

    Naive input is assumed to already be UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.replace(microsecond=0)


def from_storage(value: datetime) -> datetime:
    """Attach UTC to a datetime read back from the database."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def retention_cutoff(retention: timedelta, now: datetime | None = None) -> datetime:
    """Oldest timestamp still inside the retention horizon."""
    return (now or utc_now()) - retention


def isoformat_z(value: datetime) -> str:
    """ISO-8601 with a trailing Z, the format GitHub uses for ``since``."""
    return from_storage(value).strftime("%Y-%m-%dT%H:%M:%SZ")
