from __future__ import annotations

import asyncio
import inspect
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Literal, TypeVar, Union

from batchrun.errors import InvalidStateError, JobExecutionError, ValidationError
from batchrun.options import validate_job_options
from batchrun.utils.logging import get_logger
from batchrun.utils.result import Err, Ok, Result


T = TypeVar("T")

# "cancelled" is reserved; nothing in the runtime produces it yet.
JobStatus = Literal["idle", "running", "success", "failure", "cancelled"]
JobFn = Callable[[], Union[Awaitable[T], T]]

logger = get_logger(__name__)


@dataclass(frozen=True)
class PendingJobResult:
    id: str
    status: Literal["idle", "running", "cancelled"]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status}


@dataclass(frozen=True)
class SuccessJobResult(Generic[T]):
    id: str
    result: T
    status: Literal["success"] = field(default="success", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status, "result": self.result}


@dataclass(frozen=True)
class FailureJobResult:
    id: str
    error: JobExecutionError
    status: Literal["failure"] = field(default="failure", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "status": self.status, "error": self.error}


JobResult = Union[PendingJobResult, SuccessJobResult[T], FailureJobResult]


class Job(Generic[T]):
    """One asynchronous unit of work with a single terminal outcome.

    ``run()`` may be called exactly once; the outcome is kept on the job and
    exposed through ``get_result()``.
    """

    def __init__(self, job_fn: JobFn[T], *, id: str | None = None) -> None:
        self._id = id if id is not None else str(uuid.uuid4())
        self._job_fn = job_fn
        self._status: JobStatus = "idle"
        self._outcome: Result[T, JobExecutionError] | None = None

    @classmethod
    def create(cls, job_fn: Any = None, *, id: Any = None) -> Result["Job[T]", ValidationError]:
        fields: dict[str, Any] = {"id": id}
        if job_fn is not None:
            fields["job_fn"] = job_fn
        checked = validate_job_options(**fields)
        if not checked.ok:
            return checked
        return Ok(cls(checked.value.job_fn, id=checked.value.id))

    @property
    def id(self) -> str:
        return self._id

    def get_status(self) -> JobStatus:
        return self._status

    async def run(self) -> Result[T, JobExecutionError | InvalidStateError]:
        if self._status != "idle":
            return Err(InvalidStateError(message=f"Job '{self._id}' has already been run"))

        self._status = "running"
        try:
            value = self._job_fn()
            if inspect.isawaitable(value):
                value = await value
        except asyncio.CancelledError as e:
            # Only cancellation of the task running this job propagates; a
            # CancelledError raised by the work itself is a job failure.
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return self._fail(e)
        except Exception as e:
            return self._fail(e)

        self._outcome = Ok(value)
        self._status = "success"
        logger.debug("job %s succeeded", self._id)
        return self._outcome

    def _fail(self, exc: BaseException) -> Err[JobExecutionError]:
        self._outcome = Err(JobExecutionError.from_exception(exc, job_id=self._id))
        self._status = "failure"
        logger.debug("job %s failed: %r", self._id, exc)
        return self._outcome

    def get_result(self) -> JobResult[T]:
        outcome = self._outcome
        if self._status == "success" and isinstance(outcome, Ok):
            return SuccessJobResult(id=self._id, result=outcome.value)
        if self._status == "failure" and isinstance(outcome, Err):
            return FailureJobResult(id=self._id, error=outcome.error)
        if self._status in ("idle", "running", "cancelled"):
            return PendingJobResult(id=self._id, status=self._status)
        # Unreachable while run() is the only writer of status/outcome.
        return FailureJobResult(
            id=self._id,
            error=JobExecutionError(
                message=f"Unhandled status and outcome combination: {self._status!r}, {outcome!r}",
                details={"job_id": self._id, "type": "InconsistentState"},
            ),
        )

    def __repr__(self) -> str:
        return f"Job(id={self._id!r}, status={self._status!r})"


def create_job(job_fn: Any = None, *, id: Any = None) -> Result[Job[Any], ValidationError]:
    return Job.create(job_fn, id=id)
