"""Tests for TestTimer and Benchmark."""

import threading
import time

import pytest

from conftest import BrokenClock, FakeClock
from ulight.engine import (
    Benchmark,
    TestDescriptor,
    TestRegistry,
    TestStatus,
    TestTimer,
    benchmark,
    benchmarked,
)


# ==================== TestTimer ====================


class TestTestTimer:
    """Elapsed-time polling."""

    def test_poll_is_non_destructive(self):
        clock = FakeClock([1_000, 1_250, 1_900])
        timer = TestTimer(clock)

        assert timer.poll() == 250
        assert timer.poll() == 900
        assert timer.poll() == 900

    def test_real_clock_is_non_decreasing(self):
        timer = TestTimer()
        first = timer.poll()
        second = timer.poll()

        assert 0 <= first <= second

    def test_unavailable_clock_reads_zero(self):
        timer = TestTimer(BrokenClock())

        assert not timer.available
        assert timer.poll() == 0

    def test_failed_read_after_start_reads_zero(self):
        timer = TestTimer(FakeClock([500, None]))

        assert timer.available
        assert timer.poll() == 0


# ==================== Benchmark ====================


class TestBenchmark:
    """Recording benchmark samples on descriptors."""

    def test_records_on_explicit_descriptor(self):
        descriptor = TestDescriptor(name="explicit")

        with Benchmark(descriptor=descriptor, clock=FakeClock([0, 2_000])):
            pass

        assert descriptor.benchmarked is True
        assert descriptor.benchmark_us == 2_000
        assert descriptor.items_per_second == 0

    def test_items_per_second(self):
        descriptor = TestDescriptor(name="rate")

        with Benchmark(items=500, descriptor=descriptor, clock=FakeClock([0, 250_000])):
            pass

        assert descriptor.benchmark_us == 250_000
        assert descriptor.items_per_second == 2_000

    def test_zero_elapsed_leaves_rate_at_zero(self):
        descriptor = TestDescriptor(name="instant")

        with Benchmark(items=10, descriptor=descriptor, clock=FakeClock([7, 7])):
            pass

        assert descriptor.benchmarked is True
        assert descriptor.benchmark_us == 0
        assert descriptor.items_per_second == 0

    def test_records_when_block_raises(self):
        descriptor = TestDescriptor(name="raises")

        with pytest.raises(KeyError):
            with Benchmark(descriptor=descriptor, clock=FakeClock([0, 40])):
                raise KeyError("missing")

        assert descriptor.benchmarked is True
        assert descriptor.benchmark_us == 40

    def test_records_only_once(self):
        descriptor = TestDescriptor(name="once")
        bench = Benchmark(descriptor=descriptor, clock=FakeClock([0, 10, 99]))

        assert bench.record() is descriptor
        assert bench.record() is None
        assert descriptor.benchmark_us == 10

    def test_without_active_test_records_nothing(self):
        bench = Benchmark(clock=FakeClock([0, 10]))

        with bench:
            pass

        assert bench.record() is None

    def test_negative_items_rejected(self):
        with pytest.raises(ValueError):
            Benchmark(items=-1)

    def test_binds_to_current_test(self):
        registry = TestRegistry()

        def body():
            with benchmark():
                time.sleep(0.025)

        registry.register_body("sleepy", body)
        registry.execute()

        descriptor = registry.get("sleepy")
        assert descriptor.status is TestStatus.PASSED
        assert descriptor.benchmarked is True
        assert descriptor.benchmark_us >= 20_000

    def test_rate_matches_elapsed(self):
        registry = TestRegistry()

        def body():
            with benchmark(items=1_000):
                time.sleep(0.01)

        registry.register_body("rate", body)
        registry.execute()

        descriptor = registry.get("rate")
        expected = int(1_000_000 / descriptor.benchmark_us * 1_000)
        assert descriptor.items_per_second == pytest.approx(expected, abs=1)

    def test_benchmark_inside_task_worker(self):
        registry = TestRegistry()

        def work():
            with benchmark():
                pass

        registry.register_task("threaded", work, 1)
        registry.execute()

        assert registry.get("threaded").benchmarked is True

    def test_benchmarked_decorator(self):
        registry = TestRegistry()

        @benchmarked(items=5)
        def body():
            time.sleep(0.005)

        registry.register_body("decorated", body)
        registry.execute()

        descriptor = registry.get("decorated")
        assert descriptor.benchmarked is True
        assert descriptor.benchmark_us > 0
        assert descriptor.items_per_second > 0

    def test_failing_body_still_benchmarked(self):
        registry = TestRegistry()

        def body():
            with benchmark():
                raise AssertionError("nope")

        registry.register_body("bad", body)
        registry.execute()

        descriptor = registry.get("bad")
        assert descriptor.status is TestStatus.FAILED
        assert descriptor.benchmarked is True

    def test_concurrent_samples_never_mix(self):
        descriptor = TestDescriptor(name="contended")
        workers = 8
        barrier = threading.Barrier(workers, timeout=10)
        # Worker i always measures (i + 1)**2 * 100us over i + 1 items.
        expected_rate = {
            (i + 1) ** 2 * 100: int(1_000_000 / ((i + 1) ** 2 * 100) * (i + 1))
            for i in range(workers)
        }

        def sample(i):
            barrier.wait()
            for _ in range(300):
                clock = FakeClock([0, (i + 1) ** 2 * 100])
                Benchmark(items=i + 1, descriptor=descriptor, clock=clock).record()

        threads = [threading.Thread(target=sample, args=(i,)) for i in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert descriptor.benchmarked is True
        assert descriptor.items_per_second == expected_rate[descriptor.benchmark_us]
