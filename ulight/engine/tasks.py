"""
Concurrent Task Runner.

Runs every queued task copy on its own thread, waits for all of them, and
folds their outcomes into a single RunResults snapshot.
"""

import contextvars
import threading
from typing import Dict, List

from loguru import logger

from ulight.engine.outcome import capture_outcome
from ulight.engine.types import Action, Outcome, OutcomeKind, RunResults


class RunCounters:
    """
    Outcome tally shared by the workers of one run.

    Every update happens under a single lock. Error messages are counted by
    exact text, in the order they were first seen.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._passed = 0
        self._failed = 0
        self._skipped = 0
        self._incomplete = 0
        self._errors: Dict[str, int] = {}

    def record(self, outcome: Outcome) -> None:
        """Count one worker outcome."""
        with self._lock:
            if outcome.kind is OutcomeKind.SUCCESS:
                self._passed += 1
            elif outcome.kind is OutcomeKind.SKIP:
                self._skipped += 1
            elif outcome.kind is OutcomeKind.INCOMPLETE:
                self._incomplete += 1
            else:
                self._failed += 1
                self._errors[outcome.message] = self._errors.get(outcome.message, 0) + 1

    def snapshot(self) -> RunResults:
        """Copy the counters into an immutable RunResults."""
        with self._lock:
            return RunResults(
                passed=self._passed,
                failed=self._failed,
                skipped=self._skipped,
                incomplete=self._incomplete,
                errors=tuple(self._errors.items()),
            )


class TaskRunner:
    """
    Bag of task actions for one test.

    Each queued copy becomes one thread when ``run`` is called. Duplicate
    copies are intentional: ``add(fn, 4)`` runs ``fn`` on four threads at
    once.

    Example:
        runner = TaskRunner()
        runner.add(hammer_cache, 8)
        results = runner.run()
        print(results.passed, results.failed)
    """

    def __init__(self) -> None:
        self._tasks: List[Action] = []

    def add(self, action: Action, count: int = 1) -> None:
        """
        Queue ``count`` copies of an action.

        Raises:
            ValueError: If count is negative.
        """
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        self._tasks.extend([action] * count)

    def has_tasks(self) -> bool:
        """Check if any task copies are queued."""
        return len(self._tasks) > 0

    def __len__(self) -> int:
        return len(self._tasks)

    def run(self) -> RunResults:
        """
        Run all queued copies concurrently and wait for every one.

        A failing worker never stops its siblings. The queue is drained, so
        a second call runs nothing.

        Returns:
            Aggregated RunResults.

        Raises:
            RuntimeError: If a thread cannot be started. Threads already
                started are joined first.
        """
        tasks, self._tasks = self._tasks, []
        counters = RunCounters()

        threads = []
        for index, action in enumerate(tasks):
            # Each thread needs its own context copy; one Context cannot be
            # entered by two threads at once.
            context = contextvars.copy_context()
            thread = threading.Thread(
                target=context.run,
                args=(self._work, action, counters),
                name=f"ulight-task-{index}",
                daemon=True,
            )
            threads.append(thread)

        logger.debug(f"Starting {len(threads)} task threads")
        started = []
        try:
            for thread in threads:
                thread.start()
                started.append(thread)
        finally:
            if len(started) < len(threads):
                logger.warning(
                    f"Started {len(started)} of {len(threads)} task threads, "
                    f"waiting for them before giving up"
                )
            for thread in started:
                thread.join()

        results = counters.snapshot()
        logger.debug(
            f"Task threads finished: {results.passed} passed, {results.failed} failed, "
            f"{results.skipped} skipped, {results.incomplete} incomplete"
        )
        return results

    @staticmethod
    def _work(action: Action, counters: RunCounters) -> None:
        counters.record(capture_outcome(action))
