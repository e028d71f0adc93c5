"""Shared fixtures for ULight tests."""

import io
from typing import Iterable, List, Optional

import pytest

from ulight.engine import Clock, EngineConfig, TestRegistry, reset_registry


# ==================== Fake Clocks ====================


class FakeClock(Clock):
    """Clock returning scripted microsecond readings.

    The last reading repeats once the script runs out. A reading of None
    makes that call fail like an unavailable platform clock.
    """

    def __init__(self, readings_us: Iterable[Optional[int]]):
        self._readings: List[Optional[int]] = list(readings_us)
        self.calls = 0

    def _read_ns(self) -> int:
        index = min(self.calls, len(self._readings) - 1)
        self.calls += 1
        value = self._readings[index]
        if value is None:
            raise OSError("clock_gettime failed")
        return value * 1000


class BrokenClock(Clock):
    """Clock that always fails."""

    def _read_ns(self) -> int:
        raise OSError("clock_gettime failed")


# ==================== Fixtures ====================


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def registry(output) -> TestRegistry:
    """Empty registry writing direct output to a buffer."""
    return TestRegistry(config=EngineConfig(), stream=output)


@pytest.fixture(autouse=True)
def fresh_default_registry():
    """Give every test an empty decorator registry."""
    reset_registry()
    yield
    reset_registry()
