"""Rate limit monitoring for GitHub API.

Tracks remaining quota so the sync can pause before it runs dry.
"""

from .monitor import RateLimitMonitor
from .schemas import (
    PoolRateLimit,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
    TokenInfo,
)

__all__ = [
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    "RateLimitSnapshot",
    "RateLimitStatus",
    "TokenInfo",
]
