from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest


# Ensure `import batchrun...` works when running `pytest` from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from batchrun.runtime.job import Job  # noqa: E402


class JobGates:
    """Jobs that stay running until the test releases them.

    Lets scheduling tests step through "time" deterministically instead of
    sleeping real wall-clock intervals.
    """

    def __init__(self) -> None:
        self._events: dict[str, asyncio.Event] = {}
        self.started: list[str] = []

    def job(self, job_id: str, *, fail: bool = False) -> Job[str]:
        event = asyncio.Event()
        self._events[job_id] = event

        async def work() -> str:
            self.started.append(job_id)
            await event.wait()
            if fail:
                raise RuntimeError(job_id)
            return job_id

        return Job(work, id=job_id)

    def release(self, *job_ids: str) -> None:
        for job_id in job_ids:
            self._events[job_id].set()

    def release_all(self) -> None:
        self.release(*self._events)


async def _settle(rounds: int = 50) -> None:
    """Let every ready task on the loop run until nothing new can progress."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def _timed_job(delay_s: float, job_id: str, *, fail: bool = False) -> Job[str]:
    async def work() -> str:
        await asyncio.sleep(delay_s)
        if fail:
            raise RuntimeError(job_id)
        return job_id

    return Job(work, id=job_id)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def timed_job():
    return _timed_job


@pytest.fixture
def gates() -> JobGates:
    return JobGates()


@pytest.fixture
def recorder() -> list[Any]:
    """A list that doubles as an on_stopped callback via ``recorder.append``."""
    return []


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("BATCHRUN_CONFIG_PATH", "BATCHRUN_BATCH_SIZE", "BATCHRUN_CONCURRENCY", "BATCHRUN_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
