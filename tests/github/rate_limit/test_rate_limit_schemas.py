"""Tests for rate limit schemas."""

from datetime import UTC, datetime, timedelta

from github_activity_tracker.github.rate_limit.schemas import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
)

RESET_TS = 1709294400  # 2024-03-01T12:00:00Z


class TestPoolRateLimit:
    def test_seconds_until_reset_never_negative(self) -> None:
        reset = datetime.fromtimestamp(RESET_TS, tz=UTC)
        limit = PoolRateLimit(
            pool=RateLimitPool.CORE, limit=5000, remaining=10, used=4990, reset_at=reset
        )

        assert limit.seconds_until_reset(reset - timedelta(seconds=30)) == 30
        assert limit.seconds_until_reset(reset + timedelta(seconds=30)) == 0
        assert limit.is_below(20)
        assert limit.remaining_percent == 0.2


class TestSnapshotParsing:
    def test_from_api_response_skips_missing_pools(self) -> None:
        snapshot = RateLimitSnapshot.from_api_response(
            {"resources": {"core": {"limit": 5000, "remaining": 100, "reset": RESET_TS}}}
        )

        core = snapshot.get_core()
        assert core is not None
        assert core.used == 4900
        assert snapshot.get_pool(RateLimitPool.GRAPHQL) is None

    def test_from_headers_is_case_insensitive(self) -> None:
        snapshot = RateLimitSnapshot.from_response_headers(
            {
                "X-RateLimit-Remaining": "42",
                "X-RateLimit-Limit": "5000",
                "X-RateLimit-Reset": str(RESET_TS),
            }
        )

        assert snapshot is not None
        core = snapshot.get_core()
        assert core is not None
        assert core.remaining == 42
        assert core.reset_at == datetime.fromtimestamp(RESET_TS, tz=UTC)

    def test_from_headers_unknown_resource(self) -> None:
        assert (
            RateLimitSnapshot.from_response_headers(
                {"x-ratelimit-remaining": "1", "x-ratelimit-resource": "code_scanning_upload"}
            )
            is None
        )

    def test_merge_layers_newer_pools(self) -> None:
        old = RateLimitSnapshot.from_api_response(
            {
                "resources": {
                    "core": {"limit": 5000, "remaining": 100, "reset": RESET_TS},
                    "search": {"limit": 30, "remaining": 30, "reset": RESET_TS},
                }
            }
        )
        new = RateLimitSnapshot.from_response_headers(
            {"x-ratelimit-remaining": "99", "x-ratelimit-reset": str(RESET_TS)}
        )
        assert new is not None

        merged = old.merge(new)

        assert merged.get_core().remaining == 99
        assert merged.get_pool(RateLimitPool.SEARCH) is not None
