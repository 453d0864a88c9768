from __future__ import annotations

import asyncio

import pytest

from batchrun.runtime.limiter import BatchLimiter, partition_batches
from batchrun.utils.cancel import StopSignal


def test_partition_batches_preserves_order() -> None:
    assert partition_batches(list(range(7)), 3) == [[0, 1, 2], [3, 4, 5], [6]]
    assert partition_batches(list(range(4)), 1) == [[0], [1], [2], [3]]
    assert partition_batches(list(range(4)), 10) == [[0, 1, 2, 3]]
    assert partition_batches([], 2) == []


def test_partition_batches_rejects_zero() -> None:
    with pytest.raises(ValueError):
        partition_batches([1], 0)


def test_limiter_rejects_zero_concurrency() -> None:
    with pytest.raises(ValueError):
        BatchLimiter(0)


@pytest.mark.asyncio
async def test_slot_is_refilled_as_soon_as_one_frees() -> None:
    events = {i: asyncio.Event() for i in range(4)}
    started: list[int] = []

    async def worker(index: int, batch: list[int]) -> None:
        started.append(index)
        await events[index].wait()

    limiter: BatchLimiter[int] = BatchLimiter(2)
    task = asyncio.create_task(limiter.process([[0], [1], [2], [3]], worker))
    await asyncio.sleep(0.01)
    assert started == [0, 1]

    # batch 1 finishing first frees a slot for batch 2 while batch 0 still runs
    events[1].set()
    await asyncio.sleep(0.01)
    assert started == [0, 1, 2]

    for e in events.values():
        e.set()
    await task
    assert started == [0, 1, 2, 3]
    assert (limiter.dispatched, limiter.completed, limiter.skipped, limiter.max_in_flight) == (4, 4, 0, 2)


@pytest.mark.asyncio
async def test_stop_signal_blocks_new_dispatch_but_awaits_running() -> None:
    stop = StopSignal()
    finished: list[int] = []

    async def worker(index: int, batch: list[int]) -> None:
        if index == 0:
            stop.request_stop()
        await asyncio.sleep(0.01)
        finished.append(index)

    limiter: BatchLimiter[int] = BatchLimiter(2, stop_signal=stop)
    await limiter.process([[0], [1], [2], [3], [4]], worker)

    assert sorted(finished) == [0, 1]
    assert limiter.skipped == 3
    assert limiter.stop_signal is stop


@pytest.mark.asyncio
async def test_worker_crash_does_not_stop_siblings() -> None:
    finished: list[int] = []

    async def worker(index: int, batch: list[int]) -> None:
        await asyncio.sleep(0)
        if index == 1:
            raise RuntimeError("worker bug")
        finished.append(index)

    limiter: BatchLimiter[int] = BatchLimiter(2)
    with pytest.raises(RuntimeError, match="worker bug"):
        await limiter.process([[0], [1], [2], [3]], worker)
    assert sorted(finished) == [0, 2, 3]
