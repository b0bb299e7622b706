"""GitHub API client module.

This module provides:
- GitHubClient: Async GitHub API client with retry and rate limit handling
- Paginator: Page-number pagination over collection endpoints
- Rate limit monitoring: RateLimitMonitor, RateLimitStatus, etc.
- Batching helpers for concurrent fan-out
- Sync: RepositorySyncService, MultiRepoOrchestrator
"""

from .batching import BatchResult, gather_bounded, run_in_batches
from .client import GitHubClient
from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubFetchError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubRetryableError,
)
from .pagination import Paginator
from .rate_limit import (
    PoolRateLimit,
    RateLimitMonitor,
    RateLimitPool,
    RateLimitSnapshot,
    RateLimitStatus,
)
from .sync import (
    MultiRepoOrchestrator,
    MultiRepoSyncResult,
    OutputFormat,
    RepositorySyncService,
    RepoSyncResult,
)

__all__ = [
    # Client
    "GitHubClient",
    "Paginator",
    # Exceptions
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubFetchError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubRetryableError",
    # Rate limit monitoring
    "PoolRateLimit",
    "RateLimitMonitor",
    "RateLimitPool",
    "RateLimitSnapshot",
    "RateLimitStatus",
    # Batching
    "BatchResult",
    "gather_bounded",
    "run_in_batches",
    # Sync
    "MultiRepoOrchestrator",
    "MultiRepoSyncResult",
    "OutputFormat",
    "RepoSyncResult",
    "RepositorySyncService",
]
