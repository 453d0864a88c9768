from __future__ import annotations

import pytest

from batchrun.errors import ValidationError
from batchrun.options import BatchRunnerOptions, validate_job_options, validate_runner_options
from batchrun.utils.result import Err, Ok


@pytest.mark.parametrize("value", [1, 2, 500, 1000])
def test_runner_options_accept_range(value: int) -> None:
    r = validate_runner_options(batch_size=value, concurrency=value)
    assert r == Ok(BatchRunnerOptions(batch_size=value, concurrency=value))


def test_runner_options_all_optional() -> None:
    r = validate_runner_options()
    assert isinstance(r, Ok)
    assert r.value.batch_size is None and r.value.concurrency is None


@pytest.mark.parametrize("value", [0, -1, 1001])
def test_runner_options_reject_out_of_range(value: int) -> None:
    r = validate_runner_options(batch_size=value)
    assert isinstance(r, Err)
    assert str(r.error) == "'batch_size' must be between 1-1000 inclusive"
    assert r.error.details == {
        "errors": [{"field": "batch_size", "input": value, "constraint": "must be between 1-1000 inclusive"}]
    }


@pytest.mark.parametrize("value", [1.5, "3", True])
def test_runner_options_reject_non_integers(value: object) -> None:
    r = validate_runner_options(concurrency=value)
    assert isinstance(r, Err)
    assert isinstance(r.error, ValidationError)
    assert r.error.details["errors"][0]["field"] == "concurrency"


def test_runner_options_report_every_violation() -> None:
    r = validate_runner_options(batch_size=0, concurrency=2000)
    assert isinstance(r, Err)
    fields = [e["field"] for e in r.error.details["errors"]]
    assert fields == ["batch_size", "concurrency"]
    assert "'concurrency' must be between 1-1000 inclusive" in str(r.error)


def test_runner_options_reject_unknown_keys() -> None:
    r = validate_runner_options(batchSize=2)
    assert isinstance(r, Err)
    assert r.error.details["errors"][0]["field"] == "batchSize"


def test_job_options_valid() -> None:
    fn = lambda: None  # noqa: E731
    r = validate_job_options(id="job1", job_fn=fn)
    assert isinstance(r, Ok)
    assert r.value.id == "job1"
    assert r.value.job_fn is fn


def test_job_options_missing_fn() -> None:
    r = validate_job_options(id="job1")
    assert isinstance(r, Err)
    assert str(r.error) == "'job_fn' is required"
