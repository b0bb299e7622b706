"""Page-number pagination over GitHub collection endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from github_activity_tracker.logging import get_logger

from .exceptions import GitHubFetchError

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100


class PageFetcher(Protocol):
    async def fetch_page(self, path: str, params: Mapping[str, Any] | None = None) -> Any: ...


class Paginator:
    """Walks ``page=1, 2, ...`` until the collection is exhausted.

    Stops on an empty page, a short page (fewer items than the page
    size), or a page whose retries ran out. In the last case the items
    gathered so far are returned rather than raising, so a caller may
    receive an incomplete list.
    """

    def __init__(self, fetcher: PageFetcher, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._fetcher = fetcher
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch_all(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Fetch every page of ``path`` and concatenate the items in order."""
        items: list[Any] = []
        page = 1

        while True:
            query = {**(params or {}), "per_page": self._page_size, "page": page}
            try:
                payload = await self._fetcher.fetch_page(path, query)
            except GitHubFetchError as e:
                logger.warning(
                    "Stopping pagination of {} at page {} ({} items kept): {}",
                    path,
                    page,
                    len(items),
                    e,
                )
                break

            if not isinstance(payload, list):
                logger.warning("Unexpected payload for {} page {}: {}", path, page, type(payload).__name__)
                break

            items.extend(payload)
            if len(payload) < self._page_size:
                break
            page += 1

        logger.debug("Fetched {} items from {} in {} page(s)", len(items), path, page)
        return items
