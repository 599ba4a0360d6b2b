from __future__ import annotations

import io

import pytest

FIXED_TS = "2024-01-02T03:04:05.123456789Z"


@pytest.fixture(autouse=True)
def _fixed_clock(monkeypatch: pytest.MonkeyPatch):
    """Pin the process-wide record clock so log lines are deterministic."""
    monkeypatch.setattr("kvlog.sink.timestamp_func", lambda: FIXED_TS)
    yield


@pytest.fixture
def buf() -> io.StringIO:
    """A writer capturing encoded log lines."""
    return io.StringIO()


@pytest.fixture
def fixed_ts() -> str:
    """The timestamp every record carries while the clock is pinned."""
    return FIXED_TS
