"""GitHub client exceptions."""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when the token is missing or rejected (401)."""

    pass


class GitHubRetryableError(GitHubClientError):
    """Base class for errors the fetcher waits out or retries."""

    pass


class GitHubRateLimitError(GitHubRetryableError):
    """Raised when the quota is exhausted (403/429 with remaining 0)."""

    def __init__(
        self,
        message: str,
        reset_at: datetime | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message)
        self.reset_at = reset_at
        self.retry_after = retry_after


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class GitHubFetchError(GitHubClientError):
    """Raised when a page still fails after the retry budget is spent."""

    def __init__(self, path: str, attempts: int, cause: Exception | None = None) -> None:
        super().__init__(f"GET {path} failed after {attempts} attempts: {cause}")
        self.path = path
        self.attempts = attempts
        self.cause = cause
