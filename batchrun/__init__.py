"""In-memory batch job runner with a cap on concurrently executing batches."""

from __future__ import annotations

from batchrun.config.load_config import ConfigError, RunnerConfig, configure_logging, load_runner_config
from batchrun.errors import (
    BatchRunError,
    InvalidStateError,
    JobExecutionError,
    UnsupportedOperationError,
    ValidationError,
)
from batchrun.runtime.job import FailureJobResult, Job, PendingJobResult, SuccessJobResult, create_job
from batchrun.runtime.runner import BatchRunner, BatchRunnerState, create_batch_runner
from batchrun.utils.result import Err, Ok, is_err, is_ok

__all__ = [
    "BatchRunError",
    "BatchRunner",
    "BatchRunnerState",
    "ConfigError",
    "Err",
    "FailureJobResult",
    "InvalidStateError",
    "Job",
    "JobExecutionError",
    "Ok",
    "PendingJobResult",
    "RunnerConfig",
    "SuccessJobResult",
    "UnsupportedOperationError",
    "ValidationError",
    "configure_logging",
    "create_batch_runner",
    "create_job",
    "is_err",
    "is_ok",
    "load_runner_config",
]
