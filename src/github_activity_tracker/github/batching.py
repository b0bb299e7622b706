"""Concurrency helpers for fan-out API calls.

Two shapes are used by the sync:
- ``run_in_batches``: fixed-size groups run concurrently, one group after
  another, with a hook (e.g. a rate-limit check) before each group.
- ``gather_bounded``: every item in flight at once, capped by a semaphore.

Both collect per-item failures instead of cancelling siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from github_activity_tracker.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchResult(Generic[T, R]):
    """Outcome of running a worker over many items."""

    succeeded: list[tuple[T, R]] = field(default_factory=list)
    failed: list[tuple[T, Exception]] = field(default_factory=list)

    @property
    def results(self) -> list[R]:
        return [result for _item, result in self.succeeded]

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def _collect(self, items: Sequence[T], outcomes: Sequence[R | BaseException]) -> None:
        for item, outcome in zip(items, outcomes, strict=True):
            if isinstance(outcome, Exception):
                self.failed.append((item, outcome))
            elif isinstance(outcome, BaseException):
                # Cancellation and interpreter exits must not be collected
                raise outcome
            else:
                self.succeeded.append((item, outcome))


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    batch_size: int,
    before_batch: Callable[[], Awaitable[object]] | None = None,
) -> BatchResult[T, R]:
    """Process items in consecutive concurrent batches.

    Args:
        items: Items to process, in order
        worker: Coroutine function applied to each item
        batch_size: Items in flight per batch
        before_batch: Awaited before each batch starts

    Returns:
        BatchResult with successes and failures in item order
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    result: BatchResult[T, R] = BatchResult()
    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        if before_batch is not None:
            await before_batch()
        outcomes = await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)
        result._collect(batch, outcomes)
        logger.debug(
            "Batch {}-{} done ({} failed so far)",
            start,
            start + len(batch) - 1,
            result.failure_count,
        )
    return result


async def gather_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int,
) -> BatchResult[T, R]:
    """Run the worker on every item with at most ``limit`` in flight."""
    if limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit)

    async def _run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    result: BatchResult[T, R] = BatchResult()
    outcomes = await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)
    result._collect(items, outcomes)
    return result
