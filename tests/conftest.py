"""Shared pytest fixtures for PatientFlow tests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from patientflow.runtime.logging import LOGGER_NAMESPACE
from patientflow.runtime.store import EntityStore


class TickingClock:
    """Clock that advances one second every time it is read."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture(autouse=True)
def _reset_patientflow_logging():
    """Drop handlers installed by setup_logging (CLI runs, logging tests)."""
    yield
    root = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def patient_seed() -> list[dict[str, Any]]:
    """Two patients, one billable and one not."""
    return [
        {"id": "p1", "name": "Alice", "status": "billable"},
        {"id": "p2", "name": "Bob", "status": "unbillable"},
    ]


@pytest.fixture
def patient_store(patient_seed: list[dict[str, Any]], clock: TickingClock) -> EntityStore:
    return EntityStore("Patient", patient_seed, clock=clock)


@pytest.fixture
def empty_store(clock: TickingClock) -> EntityStore:
    return EntityStore("Patient", clock=clock)
