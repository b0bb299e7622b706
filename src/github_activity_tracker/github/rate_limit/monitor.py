"""Rate limit monitoring for GitHub API.

Quota is tracked passively from the x-ratelimit-* headers on every
response, and actively through GET /rate_limit (which does not count
against the quota) when the sync wants an authoritative reading.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from github_activity_tracker.config import RateLimitConfig, get_settings
from github_activity_tracker.logging import get_logger

from .schemas import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
    TokenInfo,
)

logger = get_logger(__name__)


class RateLimitMonitor:
    """Holds the latest known quota and decides when to pause.

    Usage:
        monitor = RateLimitMonitor()
        monitor.attach(github)            # githubkit GitHub instance
        await monitor.refresh()           # authoritative reading
        monitor.update_from_headers(resp.headers)
        wait = monitor.required_wait()    # seconds to sleep, 0 if fine
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        github: Any | None = None,
    ) -> None:
        self._config = config or get_settings().rate_limit
        self._github = github
        self._snapshot: RateLimitSnapshot | None = None
        self._lock = asyncio.Lock()

    def attach(self, github: Any) -> None:
        """Use this githubkit client for /rate_limit requests."""
        self._github = github

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def snapshot(self) -> RateLimitSnapshot | None:
        """Latest snapshot (None if never fetched or tracked)."""
        return self._snapshot

    @property
    def token_info(self) -> TokenInfo | None:
        core = self.get_pool_limit()
        return TokenInfo(rate_limit=core.limit) if core else None

    # -------------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------------
    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """Merge quota headers from any API response."""
        if not self._config.track_from_headers:
            return

        partial = RateLimitSnapshot.from_response_headers(headers)
        if partial is None:
            return
        self._snapshot = partial if self._snapshot is None else self._snapshot.merge(partial)

    async def refresh(self) -> RateLimitSnapshot:
        """Fetch current limits from GET /rate_limit.

        Raises:
            RuntimeError: If no GitHub client is attached
        """
        if self._github is None:
            raise RuntimeError("Cannot refresh rate limits without a GitHub client")

        async with self._lock:
            resp = await self._github.rest.rate_limit.async_get()
            snapshot = RateLimitSnapshot.from_api_response(resp.parsed_data.model_dump())
            self._snapshot = snapshot if self._snapshot is None else self._snapshot.merge(snapshot)

        core = snapshot.get_core()
        if core is not None:
            logger.debug(
                "Rate limit: {}/{} remaining, resets {}",
                core.remaining,
                core.limit,
                core.reset_at.isoformat(),
            )
        return snapshot

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def get_pool_limit(
        self,
        pool: RateLimitPool = RateLimitPool.CORE,
    ) -> PoolRateLimit | None:
        if self._snapshot is None:
            return None
        return self._snapshot.get_pool(pool)

    def get_status(self, pool: RateLimitPool = RateLimitPool.CORE) -> RateLimitStatus:
        """Health of a pool (HEALTHY if unknown)."""
        limit = self.get_pool_limit(pool)
        if limit is None:
            return RateLimitStatus.HEALTHY
        return limit.get_status(
            self._config.healthy_threshold_pct,
            self._config.warning_threshold_pct,
        )

    def required_wait(
        self,
        pool: RateLimitPool = RateLimitPool.CORE,
        now: datetime | None = None,
    ) -> int:
        """Seconds to pause before the next burst of requests.

        Non-zero only when remaining quota is below the low-water mark;
        the wait runs to the reset time plus the safety margin.
        """
        limit = self.get_pool_limit(pool)
        if limit is None or not limit.is_below(self._config.low_water_mark):
            return 0
        if limit.reset_at <= (now or datetime.now(UTC)):
            # Window already rolled over; the stale reading no longer applies
            return 0
        return limit.seconds_until_reset(now) + self._config.safety_margin_seconds

    def to_dict(self) -> dict[str, Any]:
        """Export current state as a dictionary (for logging/CLI output)."""
        if self._snapshot is None:
            return {"pools": {}}

        pools_data: dict[str, Any] = {}
        for pool, limit in self._snapshot.pools.items():
            pools_data[pool.value] = {
                "limit": limit.limit,
                "remaining": limit.remaining,
                "used": limit.used,
                "reset_at": limit.reset_at.astimezone(UTC).isoformat(),
                "seconds_until_reset": limit.seconds_until_reset(),
                "status": self.get_status(pool).value,
            }

        token = self.token_info
        return {
            "timestamp": self._snapshot.timestamp.isoformat(),
            "token_type": token.token_type if token else None,
            "pools": pools_data,
        }
