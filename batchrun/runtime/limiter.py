from __future__ import annotations

import asyncio
from collections import deque
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

from batchrun.utils.cancel import StopSignal
from batchrun.utils.logging import get_logger


T = TypeVar("T")

BatchWorker = Callable[[int, list[T]], Awaitable[object]]

logger = get_logger(__name__)


def partition_batches(items: Sequence[T], batch_size: int) -> list[list[T]]:
    """Split items into contiguous batches of at most batch_size, preserving order."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchLimiter(Generic[T]):
    """Runs batches with at most ``concurrency`` of them in flight.

    A freed slot is refilled immediately from the pending queue. Once the stop
    signal is set no new batch is started; batches already running are awaited.
    """

    def __init__(self, concurrency: int, *, stop_signal: StopSignal | None = None) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.concurrency = concurrency
        self._stop = stop_signal or StopSignal()

        self.dispatched = 0
        self.completed = 0
        self.skipped = 0
        self.max_in_flight = 0

    @property
    def stop_signal(self) -> StopSignal:
        return self._stop

    async def process(self, batches: Sequence[list[T]], worker: BatchWorker[T]) -> None:
        pending: deque[tuple[int, list[T]]] = deque(enumerate(batches))
        in_flight: set[asyncio.Task[object]] = set()
        first_error: BaseException | None = None

        while pending or in_flight:
            while pending and len(in_flight) < self.concurrency and not self._stop.requested:
                index, batch = pending.popleft()
                task = asyncio.create_task(worker(index, batch), name=f"batchrun-batch-{index}")
                in_flight.add(task)
                self.dispatched += 1
                self.max_in_flight = max(self.max_in_flight, len(in_flight))
                logger.debug("dispatched batch %d (%d jobs, %d in flight)", index, len(batch), len(in_flight))

            if self._stop.requested and pending:
                self.skipped += len(pending)
                logger.info("stop requested; skipping %d pending batches", len(pending))
                pending.clear()

            if not in_flight:
                break

            done, in_flight = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                self.completed += 1
                if task.cancelled():
                    continue
                exc = task.exception()
                if exc is not None:
                    logger.error("batch task %s crashed", task.get_name(), exc_info=exc)
                    if first_error is None:
                        first_error = exc

        if first_error is not None:
            raise first_error
