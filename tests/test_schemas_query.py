"""Tests for activity query filters and response schemas."""

from datetime import UTC, datetime, timedelta

import pytest

from github_activity_tracker.db.models import ActivityKind
from github_activity_tracker.schemas import (
    AddRepositoryRequest,
    RepositoryStats,
    build_activity_filter,
    parse_repo_string,
)
from tests.conftest import NOW


class TestBuildActivityFilter:
    def test_default_is_last_30_days(self):
        filters = build_activity_filter(now=NOW)
        assert filters.start == NOW - timedelta(days=30)
        assert filters.end is None

    @pytest.mark.parametrize(("window", "days"), [("7d", 7), ("30d", 30), ("90d", 90)])
    def test_named_windows(self, window, days):
        filters = build_activity_filter(date_range=window, now=NOW)
        assert filters.start == NOW - timedelta(days=days)

    def test_all_has_no_bounds(self):
        filters = build_activity_filter(date_range="all", now=NOW)
        assert filters.start is None
        assert filters.end is None

    def test_custom_range_covers_whole_end_day(self):
        filters = build_activity_filter(
            date_range="custom", start_date="2024-02-01", end_date="2024-02-10"
        )
        assert filters.start == datetime(2024, 2, 1, tzinfo=UTC)
        assert filters.end.date() == datetime(2024, 2, 10).date()
        assert filters.end.hour == 23

    def test_custom_requires_both_dates(self):
        with pytest.raises(ValueError, match="startDate and endDate"):
            build_activity_filter(date_range="custom", start_date="2024-02-01")

    def test_unknown_range_rejected(self):
        with pytest.raises(ValueError, match="dateRange"):
            build_activity_filter(date_range="1y")

    def test_invalid_date_rejected(self):
        with pytest.raises(ValueError, match="Invalid date"):
            build_activity_filter(date_range="custom", start_date="yesterday", end_date="today")

    def test_single_value_takes_precedence(self):
        filters = build_activity_filter(
            repo="a/one", repos="b/two, c/three", username="alice", users="bob,carol"
        )
        assert filters.repos == ["a/one"]
        assert filters.users == ["alice"]

    def test_lists_used_without_single_value(self):
        filters = build_activity_filter(repo="all", repos="b/two, c/three", users="bob,,carol")
        assert filters.repos == ["b/two", "c/three"]
        assert filters.users == ["bob", "carol"]

    def test_repo_all_means_no_filter(self):
        assert build_activity_filter(repo="all").repos == []


class TestRepositorySchemas:
    def test_parse_repo_string(self):
        assert parse_repo_string("prebid/Prebid.js") == ("prebid", "Prebid.js")

    @pytest.mark.parametrize("value", ["prebid", "/repo", "owner/", "a/b/c", "own er/repo"])
    def test_parse_repo_string_rejects(self, value):
        with pytest.raises(ValueError):
            parse_repo_string(value)

    def test_add_repository_request_alias(self):
        request = AddRepositoryRequest.model_validate({"repoName": "prebid/prebid-server"})
        assert request.repo_name == "prebid/prebid-server"

    def test_add_repository_request_strips_whitespace(self):
        request = AddRepositoryRequest.model_validate({"repoName": " prebid/prebid-server \n"})
        assert request.repo_name == "prebid/prebid-server"

    def test_stats_serialize_camel_case(self):
        stats = RepositoryStats.from_counts({ActivityKind.PULL_REQUEST: 3, ActivityKind.COMMIT: 1})
        assert stats.model_dump(by_alias=True) == {
            "commits": 1,
            "issues": 0,
            "pullRequests": 3,
            "reviews": 0,
        }
