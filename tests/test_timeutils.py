"""Tests for UTC timestamp helpers."""

from datetime import UTC, datetime, timedelta, timezone

from github_activity_tracker.timeutils import (
    from_storage,
    isoformat_z,
    retention_cutoff,
    to_storage,
    utc_now,
)


class TestStorageConversion:
    def test_to_storage_converts_offset_to_naive_utc(self):
        eastern = timezone(timedelta(hours=-5))
        value = datetime(2024, 1, 15, 5, 0, 0, 123456, tzinfo=eastern)

        assert to_storage(value) == datetime(2024, 1, 15, 10, 0, 0)

    def test_to_storage_keeps_naive_values(self):
        assert to_storage(datetime(2024, 1, 15, 10, 0, 0, 999)) == datetime(2024, 1, 15, 10, 0, 0)

    def test_from_storage_attaches_utc(self):
        assert from_storage(datetime(2024, 1, 15, 10)) == datetime(2024, 1, 15, 10, tzinfo=UTC)

    def test_utc_now_is_aware_and_whole_seconds(self):
        now = utc_now()
        assert now.tzinfo is not None
        assert now.microsecond == 0


class TestRetentionCutoff:
    def test_cutoff_is_now_minus_retention(self):
        now = datetime(2024, 3, 1, 12, tzinfo=UTC)
        assert retention_cutoff(timedelta(days=30), now) == datetime(2024, 1, 31, 12, tzinfo=UTC)

    def test_isoformat_z(self):
        assert isoformat_z(datetime(2024, 1, 31, 12, tzinfo=UTC)) == "2024-01-31T12:00:00Z"
        assert isoformat_z(datetime(2024, 1, 31, 12)) == "2024-01-31T12:00:00Z"
