from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass
class BatchRunError(Exception):
    message: str
    details: dict[str, Any] | None = None

    code: ClassVar[str] = "internal"

    def __str__(self) -> str:
        return self.message


class ValidationError(BatchRunError):
    """Malformed runner or job options."""

    code = "invalid_argument"


class InvalidStateError(BatchRunError):
    """Operation is not allowed in the current runner/job status."""

    code = "failed_precondition"


class JobExecutionError(BatchRunError):
    """A job's work function raised; the original exception is chained as __cause__."""

    code = "job_failed"

    @classmethod
    def from_exception(cls, exc: BaseException, *, job_id: str) -> "JobExecutionError":
        err = cls(message=str(exc), details={"job_id": job_id, "type": type(exc).__name__})
        err.__cause__ = exc
        return err


class UnsupportedOperationError(BatchRunError):
    code = "unimplemented"


def not_idle_error(action: str) -> InvalidStateError:
    return InvalidStateError(message=f"Cannot {action} when runner is not in 'idle' status")
