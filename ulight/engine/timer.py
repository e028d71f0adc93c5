"""
Scoped timers.

``TestTimer`` measures elapsed microseconds from its construction.
``Benchmark`` additionally records the elapsed time on the current test
when its scope exits, whether the block returned or raised.
"""

import functools
import threading
from typing import Any, Callable, Optional, TypeVar

from loguru import logger

from ulight.engine.clock import Clock, default_clock
from ulight.engine.context import get_current_test
from ulight.engine.types import TestDescriptor

F = TypeVar("F", bound=Callable[..., Any])

# Guards the benchmark fields of every descriptor. Samples from concurrent
# task workers land whole; the last one written wins.
_record_lock = threading.Lock()


class TestTimer:
    """
    Elapsed-time reader.

    The start point is captured once, at construction. If the clock could
    not be read then, every poll returns zero.
    """

    __test__ = False

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or default_clock()
        self._start_us = self._clock.now_us()

    @property
    def available(self) -> bool:
        """Check if a start timestamp was captured."""
        return self._start_us is not None

    def poll(self) -> int:
        """Get microseconds elapsed since construction without resetting."""
        if self._start_us is None:
            return 0
        now = self._clock.now_us()
        if now is None:
            return 0
        return now - self._start_us


class Benchmark(TestTimer):
    """
    Benchmark recorder for a block of test code.

    Example:
        @test()
        def test_parse_speed():
            with Benchmark(items=10_000):
                for line in lines:
                    parse(line)

    Args:
        items: Items processed inside the block, used for items-per-second.
        descriptor: Descriptor to annotate. Defaults to the current test,
            resolved when the scope exits.
        clock: Time source.
    """

    def __init__(
        self,
        items: int = 0,
        descriptor: Optional[TestDescriptor] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        if items < 0:
            raise ValueError(f"items must not be negative, got {items}")
        super().__init__(clock)
        self.items = items
        self.descriptor = descriptor
        self._recorded = False

    def __enter__(self) -> "Benchmark":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.record()

    def record(self) -> Optional[TestDescriptor]:
        """
        Store the elapsed time on the bound test.

        Only the first call has an effect.

        Returns:
            The annotated descriptor, or None if nothing was recorded.
        """
        if self._recorded:
            return None
        self._recorded = True

        elapsed = self.poll()
        descriptor = self.descriptor or get_current_test()
        if descriptor is None:
            logger.warning(f"Benchmark of {elapsed}us discarded: no test executing")
            return None

        rate = int(1_000_000 / elapsed * self.items) if self.items > 0 and elapsed > 0 else 0
        with _record_lock:
            descriptor.benchmarked = True
            descriptor.benchmark_us = elapsed
            descriptor.items_per_second = rate
        logger.debug(f"Benchmarked {descriptor.name}: {elapsed}us")
        return descriptor


def benchmark(items: int = 0) -> Benchmark:
    """Start a benchmark bound to the current test."""
    return Benchmark(items=items)


def benchmarked(items: int = 0) -> Callable[[F], F]:
    """
    Decorator that benchmarks every call of the wrapped function.

    A fresh Benchmark is created per call.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with Benchmark(items=items):
                return func(*args, **kwargs)
        return wrapper  # type: ignore[return-value]

    return decorator
