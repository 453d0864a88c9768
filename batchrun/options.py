"""Option models for runners and jobs.

The pydantic models define the accepted shapes; the ``validate_*`` helpers turn
pydantic failures into a single :class:`~batchrun.errors.ValidationError` so that
callers always receive a ``Result`` instead of an exception.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from batchrun.errors import ValidationError
from batchrun.utils.result import Err, Ok, Result


MIN_LIMIT = 1
MAX_LIMIT = 1000

_RANGE_ERRORS = {"greater_than_equal", "less_than_equal", "greater_than", "less_than"}

Limit = Annotated[StrictInt, Field(ge=MIN_LIMIT, le=MAX_LIMIT)]


class BatchRunnerOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    batch_size: Limit | None = None
    concurrency: Limit | None = None


class JobOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    id: StrictStr | None = None
    job_fn: Callable[[], Any]


def _describe(error: dict[str, Any]) -> dict[str, Any]:
    loc = error.get("loc") or ()
    field = ".".join(str(p) for p in loc) or "<root>"
    if error.get("type") in _RANGE_ERRORS:
        constraint = f"must be between {MIN_LIMIT}-{MAX_LIMIT} inclusive"
    elif error.get("type") == "missing":
        constraint = "is required"
    else:
        constraint = str(error.get("msg") or "is invalid")
    return {"field": field, "input": error.get("input"), "constraint": constraint}


def to_validation_error(exc: pydantic.ValidationError) -> ValidationError:
    violations = [_describe(e) for e in exc.errors()]
    message = "; ".join(f"'{v['field']}' {v['constraint']}" for v in violations)
    return ValidationError(message=message, details={"errors": violations})


def validate_runner_options(**fields: Any) -> Result[BatchRunnerOptions, ValidationError]:
    try:
        return Ok(BatchRunnerOptions(**fields))
    except pydantic.ValidationError as e:
        return Err(to_validation_error(e))


def validate_job_options(**fields: Any) -> Result[JobOptions, ValidationError]:
    try:
        return Ok(JobOptions(**fields))
    except pydantic.ValidationError as e:
        return Err(to_validation_error(e))


def required_error(field: str) -> ValidationError:
    return ValidationError(
        message=f"'{field}' is required",
        details={"errors": [{"field": field, "input": None, "constraint": "is required"}]},
    )
