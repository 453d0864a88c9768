from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Literal, TypeVar

from batchrun.config.load_config import RunnerConfig
from batchrun.errors import (
    BatchRunError,
    InvalidStateError,
    UnsupportedOperationError,
    ValidationError,
    not_idle_error,
)
from batchrun.options import required_error, validate_runner_options
from batchrun.runtime.job import FailureJobResult, Job, JobResult, SuccessJobResult
from batchrun.runtime.limiter import BatchLimiter, partition_batches
from batchrun.utils.cancel import StopSignal
from batchrun.utils.logging import get_logger
from batchrun.utils.result import Err, Ok, Result


T = TypeVar("T")

RunnerStatus = Literal["idle", "running", "stopped"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class BatchRunnerState(Generic[T]):
    status: RunnerStatus
    processed_jobs: list[SuccessJobResult[T]] = field(default_factory=list)
    failed_jobs: list[FailureJobResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "processed_jobs": [j.to_dict() for j in self.processed_jobs],
            "failed_jobs": [j.to_dict() for j in self.failed_jobs],
        }


StoppedCallback = Callable[[BatchRunnerState[T]], Any]


class BatchRunner(Generic[T]):
    """Single-use runner that executes queued jobs in batches under a concurrency cap.

    Lifecycle: ``idle --start--> running --(all jobs settled | stop())--> stopped``.
    Configuration and the job queue can only change while idle. Every fallible
    method returns ``Ok``/``Err`` instead of raising.

    All state is mutated from the event loop thread; calls from other threads
    are not supported.
    """

    def __init__(self, *, batch_size: int = 1, concurrency: int = 1) -> None:
        self._batch_size = batch_size
        self._concurrency = concurrency
        self._status: RunnerStatus = "idle"
        self._job_queue: list[Job[T]] = []
        self._queued_ids: set[str] = set()
        self._success_jobs: list[SuccessJobResult[T]] = []
        self._failed_jobs: list[FailureJobResult] = []
        self._expected = 0
        self._on_stopped: StoppedCallback[T] | None = None
        self._stop_signal = StopSignal()
        self._limiter: BatchLimiter[Job[T]] | None = None
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def create(
        cls, *, batch_size: int | None = None, concurrency: int | None = None
    ) -> Result["BatchRunner[T]", ValidationError]:
        checked = validate_runner_options(batch_size=batch_size, concurrency=concurrency)
        if not checked.ok:
            return checked
        opts = checked.value
        return Ok(cls(batch_size=opts.batch_size or 1, concurrency=opts.concurrency or 1))

    @classmethod
    def from_config(cls, config: RunnerConfig) -> Result["BatchRunner[T]", ValidationError]:
        return cls.create(batch_size=config.batch_size, concurrency=config.concurrency)

    # --- read accessors ---

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def status(self) -> RunnerStatus:
        return self._status

    @property
    def limiter(self) -> BatchLimiter[Job[T]] | None:
        return self._limiter

    def get_batch_runner_state(self) -> BatchRunnerState[T]:
        return BatchRunnerState(
            status=self._status,
            processed_jobs=list(self._success_jobs),
            failed_jobs=list(self._failed_jobs),
        )

    def get_jobs_count(self) -> int:
        return len(self._job_queue)

    # --- idle-only mutations ---

    def update_batch_size(self, batch_size: int) -> Result[None, BatchRunError]:
        if self._status != "idle":
            return Err(not_idle_error("update 'batch_size'"))
        checked = validate_runner_options(batch_size=batch_size)
        if not checked.ok:
            return checked
        if checked.value.batch_size is None:
            return Err(required_error("batch_size"))
        self._batch_size = checked.value.batch_size
        return Ok(None)

    def update_concurrency(self, concurrency: int) -> Result[None, BatchRunError]:
        if self._status != "idle":
            return Err(not_idle_error("update 'concurrency'"))
        checked = validate_runner_options(concurrency=concurrency)
        if not checked.ok:
            return checked
        if checked.value.concurrency is None:
            return Err(required_error("concurrency"))
        self._concurrency = checked.value.concurrency
        return Ok(None)

    def add_job(self, job: Job[T]) -> Result[JobResult[T], BatchRunError]:
        if self._status != "idle":
            return Err(not_idle_error("add job"))
        if not isinstance(job, Job):
            return Err(
                ValidationError(
                    message=f"'job' must be a Job, got {type(job).__name__}",
                    details={"errors": [{"field": "job", "input": job, "constraint": "must be a Job"}]},
                )
            )
        if job.get_status() != "idle":
            return Err(InvalidStateError(message=f"Cannot add job '{job.id}' in '{job.get_status()}' status"))
        if job.id in self._queued_ids:
            return Err(InvalidStateError(message=f"Job '{job.id}' is already queued"))
        self._job_queue.append(job)
        self._queued_ids.add(job.id)
        return Ok(job.get_result())

    def add_jobs(self, *jobs: Job[T]) -> list[Result[JobResult[T], BatchRunError]]:
        return [self.add_job(job) for job in jobs]

    def clear_jobs(self) -> Result[None, InvalidStateError]:
        if self._status != "idle":
            return Err(not_idle_error("clear job queue"))
        self._job_queue = []
        self._queued_ids.clear()
        return Ok(None)

    def on_stopped(self, callback: StoppedCallback[T]) -> None:
        """Register the stopped observer; a later registration replaces an earlier one."""
        self._on_stopped = callback

    # --- lifecycle ---

    def start(self) -> Result[dict[str, RunnerStatus], InvalidStateError]:
        if self._status != "idle":
            return Err(InvalidStateError(message="Runner is not in 'idle' status"))

        if not self._job_queue:
            logger.info("start() with an empty queue; stopping immediately")
            self._transition_to_stopped()
            return Ok({"status": self._status})

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return Err(InvalidStateError(message="start() must be called from a running event loop"))

        snapshot = list(self._job_queue)
        self._expected = len(snapshot)
        self._limiter = BatchLimiter(self._concurrency, stop_signal=self._stop_signal)
        self._status = "running"
        logger.info(
            "runner started: %d jobs, batch_size=%d, concurrency=%d",
            len(snapshot),
            self._batch_size,
            self._concurrency,
        )
        self._task = loop.create_task(self._run(snapshot, self._limiter), name="batchrun-runner")
        return Ok({"status": self._status})

    async def _run(self, jobs: list[Job[T]], limiter: BatchLimiter[Job[T]]) -> None:
        batches = partition_batches(jobs, self._batch_size)
        await limiter.process(batches, self._run_batch)

    async def _run_batch(self, index: int, batch: list[Job[T]]) -> None:
        # Jobs inside a batch run without a cap; each outcome is recorded as soon as it settles.
        await asyncio.gather(*(self._run_job(job) for job in batch))
        logger.debug("batch %d settled", index)

    async def _run_job(self, job: Job[T]) -> None:
        await job.run()
        self._record(job.get_result())

    def _record(self, result: JobResult[T]) -> None:
        if isinstance(result, SuccessJobResult):
            self._success_jobs.append(result)
        elif isinstance(result, FailureJobResult):
            logger.warning("job %s failed: %s", result.id, result.error)
            self._failed_jobs.append(result)
        else:
            return

        if len(self._success_jobs) + len(self._failed_jobs) == self._expected and self._status != "stopped":
            logger.info(
                "all %d jobs settled (%d succeeded, %d failed)",
                self._expected,
                len(self._success_jobs),
                len(self._failed_jobs),
            )
            self._transition_to_stopped()

    def _transition_to_stopped(self) -> None:
        self._status = "stopped"
        self._stop_signal.request_stop()
        callback = self._on_stopped
        if callback is None:
            return
        try:
            callback(self.get_batch_runner_state())
        except Exception:
            logger.exception("on_stopped callback raised")

    def stop(self) -> BatchRunnerState[T]:
        """Stop dispatching new batches; batches already in flight still finish and are recorded."""
        if self._status != "stopped":
            logger.info("stop requested while %s", self._status)
            self._transition_to_stopped()
        return self.get_batch_runner_state()

    def shutdown(self) -> BatchRunnerState[T]:
        return self.stop()

    def pause(self) -> Result[None, UnsupportedOperationError]:
        return Err(UnsupportedOperationError(message="Operation 'pause' is not supported yet"))

    def resume(self) -> Result[None, UnsupportedOperationError]:
        return Err(UnsupportedOperationError(message="Operation 'resume' is not supported yet"))

    async def join(self) -> None:
        """Wait until every dispatched batch has settled."""
        task = self._task
        if task is None:
            return
        await asyncio.shield(task)


def create_batch_runner(
    *, batch_size: int | None = None, concurrency: int | None = None
) -> Result[BatchRunner[Any], ValidationError]:
    return BatchRunner.create(batch_size=batch_size, concurrency=concurrency)
