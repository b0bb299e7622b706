"""Pydantic schemas for GitHub API rate limit data.

These schemas represent rate limit information from:
- GET /rate_limit API endpoint
- x-ratelimit-* response headers
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field


class RateLimitPool(StrEnum):
    """GitHub rate limit resource pools the tracker touches.

    Every REST endpoint used for ingestion draws from 'core'.
    """

    CORE = "core"
    SEARCH = "search"
    GRAPHQL = "graphql"


class RateLimitStatus(StrEnum):
    """Rate limit health status.

    Defaults: HEALTHY > 50% remaining, WARNING 20-50%,
    CRITICAL below 20%, EXHAUSTED at 0.
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    EXHAUSTED = "exhausted"


class PoolRateLimit(BaseModel):
    """Quota state of one resource pool."""

    pool: RateLimitPool = Field(description="Resource pool name")
    limit: int = Field(ge=0, description="Maximum requests allowed per hour")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    used: int = Field(ge=0, description="Requests used in current window")
    reset_at: datetime = Field(description="UTC datetime when limit resets")

    @property
    def remaining_percent(self) -> float:
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    def seconds_until_reset(self, now: datetime | None = None) -> int:
        """Seconds until the window resets (0 if already past)."""
        delta = self.reset_at - (now or datetime.now(UTC))
        return max(0, int(delta.total_seconds()))

    def is_below(self, low_water_mark: int) -> bool:
        return self.remaining < low_water_mark

    def get_status(
        self,
        healthy_threshold: float = 50.0,
        warning_threshold: float = 20.0,
    ) -> RateLimitStatus:
        if self.remaining == 0:
            return RateLimitStatus.EXHAUSTED
        if self.remaining_percent >= healthy_threshold:
            return RateLimitStatus.HEALTHY
        if self.remaining_percent >= warning_threshold:
            return RateLimitStatus.WARNING
        return RateLimitStatus.CRITICAL


class RateLimitSnapshot(BaseModel):
    """Point-in-time view of the pools, from the API or from headers."""

    timestamp: datetime = Field(description="When this snapshot was taken")
    pools: dict[RateLimitPool, PoolRateLimit] = Field(
        default_factory=dict, description="Rate limits by pool"
    )

    @classmethod
    def from_api_response(cls, data: Mapping[str, Any]) -> Self:
        """Parse the body of GET /rate_limit."""
        pools: dict[RateLimitPool, PoolRateLimit] = {}
        resources = data.get("resources") or {}

        for pool in RateLimitPool:
            r = resources.get(pool.value)
            if not r:
                continue
            pools[pool] = PoolRateLimit(
                pool=pool,
                limit=r["limit"],
                remaining=r["remaining"],
                used=r.get("used", r["limit"] - r["remaining"]),
                reset_at=datetime.fromtimestamp(r["reset"], tz=UTC),
            )

        return cls(timestamp=datetime.now(UTC), pools=pools)

    @classmethod
    def from_response_headers(cls, headers: Mapping[str, str]) -> Self | None:
        """Parse x-ratelimit-* headers.

        Returns:
            A single-pool snapshot, or None when the headers are absent
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        if "x-ratelimit-remaining" not in lowered:
            return None

        try:
            pool = RateLimitPool(lowered.get("x-ratelimit-resource", RateLimitPool.CORE.value))
        except ValueError:
            return None

        remaining = int(lowered["x-ratelimit-remaining"])
        limit = int(lowered.get("x-ratelimit-limit", remaining))
        used = int(lowered.get("x-ratelimit-used", max(limit - remaining, 0)))
        reset_ts = int(lowered.get("x-ratelimit-reset", "0"))
        reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else datetime.now(UTC)

        return cls(
            timestamp=datetime.now(UTC),
            pools={
                pool: PoolRateLimit(
                    pool=pool, limit=limit, remaining=remaining, used=used, reset_at=reset_at
                )
            },
        )

    def get_pool(self, pool: RateLimitPool) -> PoolRateLimit | None:
        return self.pools.get(pool)

    def get_core(self) -> PoolRateLimit | None:
        """Convenience accessor for core pool (most common)."""
        return self.pools.get(RateLimitPool.CORE)

    def merge(self, other: "RateLimitSnapshot") -> "RateLimitSnapshot":
        """New snapshot with ``other``'s pools layered over this one."""
        merged_pools = dict(self.pools)
        merged_pools.update(other.pools)
        return RateLimitSnapshot(
            timestamp=max(self.timestamp, other.timestamp),
            pools=merged_pools,
        )


class TokenInfo(BaseModel):
    """What kind of token the quota implies (PAT = 5000/hour)."""

    rate_limit: int = Field(description="Hourly limit reported for the core pool")

    @property
    def is_pat(self) -> bool:
        return self.rate_limit >= 5000

    @property
    def token_type(self) -> str:
        return "PAT" if self.is_pat else "unauthenticated"
