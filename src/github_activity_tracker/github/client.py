"""Async GitHub API client wrapper using githubkit.

This module provides the rate-limited fetcher used by every ingestion
flow: one page per call, transient failures retried with exponential
backoff, and rate-limit responses waited out without spending retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Literal, TypeVar

from githubkit import GitHub
from githubkit.exception import GitHubException, RequestFailed
from pydantic import BaseModel, ValidationError

from github_activity_tracker.config import FetchConfig, get_settings
from github_activity_tracker.logging import get_logger
from github_activity_tracker.schemas.github_api import (
    GitHubBranch,
    GitHubCommit,
    GitHubIssue,
    GitHubPullRequest,
    GitHubRepository,
    GitHubReview,
)
from github_activity_tracker.timeutils import isoformat_z

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubFetchError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from .pagination import Paginator
from .rate_limit.monitor import RateLimitMonitor
from .rate_limit.schemas import RateLimitSnapshot

logger = get_logger(__name__)

PRState = Literal["open", "closed", "all"]
ModelT = TypeVar("ModelT", bound=BaseModel)

# Used when GitHub signals a rate limit without a reset time
DEFAULT_RATE_LIMIT_WAIT = 60


class GitHubClient:
    """Async GitHub API client for activity ingestion.

    Usage:
        async with GitHubClient() as client:
            branches = await client.list_branches("prebid/prebid-server")
            for branch in branches:
                commits = await client.list_commits(
                    "prebid/prebid-server", branch.name, since=since
                )
    """

    def __init__(
        self,
        token: str | None = None,
        rate_monitor: RateLimitMonitor | None = None,
        fetch_config: FetchConfig | None = None,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT. If not provided, uses GITHUB_TOKEN from settings.
            rate_monitor: Quota tracker. A fresh one is created if omitted.
            fetch_config: Page size and retry policy (defaults from settings).

        Raises:
            GitHubAuthenticationError: If no token is available.
        """
        settings = get_settings()
        self._token = token or settings.github_token
        if not self._token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._client: GitHub[Any] | None = None
        self._rate_monitor = rate_monitor or RateLimitMonitor(settings.rate_limit)
        self._fetch_config = fetch_config or settings.fetch
        self._paginator = Paginator(self, page_size=self._fetch_config.page_size)

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            # Retries and rate-limit waits are handled in fetch_page
            self._client = GitHub(self._token, auto_retry=False)
        return self._client

    @property
    def rate_monitor(self) -> RateLimitMonitor:
        return self._rate_monitor

    @property
    def paginator(self) -> Paginator:
        return self._paginator

    def _update_rate_limit_from_response(self, response: Any) -> None:
        headers = getattr(response, "headers", None)
        if headers is not None:
            self._rate_monitor.update_from_headers(dict(headers.items()))

    async def close(self) -> None:
        """Drop the underlying HTTP client."""
        self._client = None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    async def _sleep(self, seconds: float, reason: str) -> None:
        logger.info("{}: waiting {:.0f}s", reason, seconds)
        await asyncio.sleep(seconds)

    # -------------------------------------------------------------------------
    # Rate-Limited Fetch
    # -------------------------------------------------------------------------
    async def fetch_page(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """GET one page and return its decoded JSON body.

        - Pauses first if known quota is under the low-water mark.
        - Rate-limit responses are waited out (reset + margin) and the same
          request is re-issued; these do not count as retries.
        - Other failures are retried with exponential backoff.

        Args:
            path: API path, e.g. "/repos/owner/repo/branches"
            params: Query parameters

        Returns:
            Decoded JSON (a list for collection endpoints)

        Raises:
            GitHubAuthenticationError: Token rejected (never retried)
            GitHubNotFoundError: Resource does not exist (never retried)
            GitHubFetchError: Retry budget exhausted
        """
        max_retries = self._fetch_config.max_retries
        delay = self._fetch_config.initial_backoff_seconds
        retries = 0
        just_reset = False

        while True:
            wait = 0 if just_reset else self._rate_monitor.required_wait()
            if wait > 0:
                await self._sleep(wait, "Rate limit low")
            just_reset = False

            try:
                resp = await self._github.arequest("GET", path, params=dict(params or {}))
            except RequestFailed as e:
                error = self._handle_error(e)
                if isinstance(error, GitHubRateLimitError):
                    await self._sleep(self._rate_limit_wait(error), "Rate limit exceeded")
                    just_reset = True
                    continue
                if isinstance(error, (GitHubAuthenticationError, GitHubNotFoundError)):
                    raise error from e
                failure: Exception = error
            except GitHubException as e:
                failure = e
            else:
                self._update_rate_limit_from_response(resp)
                return resp.json()

            if retries >= max_retries:
                logger.error("GET {} failed after {} attempts: {}", path, retries + 1, failure)
                raise GitHubFetchError(path, attempts=retries + 1, cause=failure) from failure

            retries += 1
            logger.warning(
                "GET {} failed ({}), retry {}/{} in {:.0f}s",
                path,
                failure,
                retries,
                max_retries,
                delay,
            )
            await asyncio.sleep(delay)
            delay *= 2

    def _rate_limit_wait(self, error: GitHubRateLimitError) -> float:
        """Seconds until the quota window resets, plus the safety margin."""
        margin = self._rate_monitor.config.safety_margin_seconds
        if error.reset_at is not None:
            remaining = (error.reset_at - datetime.now(UTC)).total_seconds()
            return max(remaining, 0) + margin
        if error.retry_after is not None:
            return error.retry_after + margin
        return DEFAULT_RATE_LIMIT_WAIT + margin

    # -------------------------------------------------------------------------
    # Rate Limit Info
    # -------------------------------------------------------------------------
    async def get_rate_limit(self) -> RateLimitSnapshot:
        """Authoritative quota reading from GET /rate_limit.

        Raises:
            GitHubAuthenticationError: Token rejected
            GitHubClientError: Any other error response
        """
        self._rate_monitor.attach(self._github)
        try:
            return await self._rate_monitor.refresh()
        except RequestFailed as e:
            raise self._handle_error(e) from e

    async def wait_for_rate_limit(self) -> bool:
        """Check quota and sleep through the reset if it is running low.

        Failures to read the quota are logged and treated as "no wait".

        Returns:
            True if the call slept
        """
        try:
            await self.get_rate_limit()
        except (GitHubClientError, GitHubException) as e:
            logger.warning("Could not check rate limit: {}", e)
            return False

        wait = self._rate_monitor.required_wait()
        if wait <= 0:
            return False
        await self._sleep(wait, "Rate limit below low-water mark")
        return True

    # -------------------------------------------------------------------------
    # Repository
    # -------------------------------------------------------------------------
    async def get_repository(self, repo: str) -> GitHubRepository:
        """Fetch repository metadata.

        Raises:
            GitHubNotFoundError: If the repository does not exist
        """
        data = await self.fetch_page(f"/repos/{repo}")
        return GitHubRepository.model_validate(data)

    async def repository_exists(self, repo: str) -> bool:
        try:
            await self.get_repository(repo)
        except GitHubNotFoundError:
            return False
        return True

    # -------------------------------------------------------------------------
    # Activity Collections
    # -------------------------------------------------------------------------
    async def list_branches(self, repo: str) -> list[GitHubBranch]:
        items = await self._paginator.fetch_all(f"/repos/{repo}/branches")
        return _validate_items(GitHubBranch, items)

    async def list_commits(
        self,
        repo: str,
        branch: str,
        *,
        since: datetime,
    ) -> list[GitHubCommit]:
        """Commits reachable from a branch, committed at or after ``since``."""
        items = await self._paginator.fetch_all(
            f"/repos/{repo}/commits",
            {"sha": branch, "since": isoformat_z(since)},
        )
        return _validate_items(GitHubCommit, items)

    async def list_pull_requests(
        self,
        repo: str,
        *,
        state: PRState = "open",
        sort: Literal["created", "updated", "popularity", "long-running"] = "updated",
        direction: Literal["asc", "desc"] = "desc",
    ) -> list[GitHubPullRequest]:
        items = await self._paginator.fetch_all(
            f"/repos/{repo}/pulls",
            {"state": state, "sort": sort, "direction": direction},
        )
        return _validate_items(GitHubPullRequest, items)

    async def list_issues(
        self,
        repo: str,
        *,
        since: datetime,
        state: PRState = "all",
    ) -> list[GitHubIssue]:
        """Issues updated since ``since`` (pull requests included, flagged)."""
        items = await self._paginator.fetch_all(
            f"/repos/{repo}/issues",
            {
                "state": state,
                "since": isoformat_z(since),
                "sort": "updated",
                "direction": "desc",
            },
        )
        return _validate_items(GitHubIssue, items)

    async def list_reviews(self, repo: str, number: int) -> list[GitHubReview]:
        items = await self._paginator.fetch_all(f"/repos/{repo}/pulls/{number}/reviews")
        return _validate_items(GitHubReview, items)

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, error: RequestFailed) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions."""
        # Error responses still carry quota headers
        self._update_rate_limit_from_response(error.response)

        status = error.response.status_code
        headers = error.response.headers

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        if status in (403, 429):
            if headers.get("x-ratelimit-remaining") == "0":
                reset_ts = int(headers.get("x-ratelimit-reset", "0"))
                reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
                return GitHubRateLimitError("GitHub rate limit exceeded", reset_at=reset_at)
            if "retry-after" in headers:
                return GitHubRateLimitError(
                    "GitHub secondary rate limit exceeded",
                    retry_after=int(headers["retry-after"]),
                )
            return GitHubClientError(f"Access forbidden ({status}): {error}")
        if status == 404:
            return GitHubNotFoundError(str(error))
        return GitHubClientError(f"GitHub API error ({status}): {error}")


def _validate_items(model: type[ModelT], items: list[Any]) -> list[ModelT]:
    """Validate payload items, skipping any that do not match the schema."""
    valid: list[ModelT] = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.debug("Skipping invalid {} payload: {}", model.__name__, e.error_count())
    return valid
