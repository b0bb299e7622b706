"""Tests for batched and bounded fan-out helpers."""

import asyncio

import pytest

from github_activity_tracker.github.batching import gather_bounded, run_in_batches


async def double(n: int) -> int:
    if n < 0:
        raise ValueError(f"negative: {n}")
    return n * 2


class TestRunInBatches:
    async def test_collects_results_in_order(self):
        result = await run_in_batches([1, 2, 3, 4, 5], double, batch_size=2)

        assert result.results == [2, 4, 6, 8, 10]
        assert result.all_succeeded

    async def test_hook_runs_before_each_batch(self):
        calls: list[int] = []

        async def hook() -> None:
            calls.append(len(calls))

        await run_in_batches([1, 2, 3, 4, 5], double, batch_size=2, before_batch=hook)

        assert len(calls) == 3

    async def test_failures_do_not_cancel_siblings(self):
        result = await run_in_batches([1, -1, 2], double, batch_size=3)

        assert result.results == [2, 4]
        assert result.failure_count == 1
        item, error = result.failed[0]
        assert item == -1
        assert isinstance(error, ValueError)

    async def test_rejects_zero_batch_size(self):
        with pytest.raises(ValueError):
            await run_in_batches([1], double, batch_size=0)


class TestGatherBounded:
    async def test_respects_limit(self):
        in_flight = 0
        peak = 0

        async def worker(n: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return n

        result = await gather_bounded(list(range(10)), worker, limit=3)

        assert result.success_count == 10
        assert peak <= 3

    async def test_collects_failures(self):
        result = await gather_bounded([1, -2], double, limit=2)

        assert result.results == [2]
        assert [item for item, _ in result.failed] == [-2]
