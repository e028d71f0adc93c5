"""
Test Registry and Lifecycle Engine.

Owns the registered tests and drives each one through
Setup -> Task -> Run -> Teardown, turning the outcome of every stage into
the test's status.
"""

import dataclasses
import sys
import threading
from typing import Any, Dict, Iterator, List, Optional, TextIO

from loguru import logger

from ulight.engine.clock import Clock, default_clock
from ulight.engine.context import active_test, get_current_context
from ulight.engine.errors import NoActiveTestError, RegistryLockedError, ULightError
from ulight.engine.outcome import capture_outcome
from ulight.engine.timer import TestTimer
from ulight.engine.types import (
    Action,
    EngineConfig,
    Outcome,
    OutcomeKind,
    ReportEntry,
    RunResults,
    Stage,
    TestDescriptor,
    TestStatus,
)


class TestRegistry:
    """
    Registry of named tests and the engine that executes them.

    Registration is find-or-create by name: the first call for a name
    creates its descriptor and fixes its position in execution order,
    later calls update the same descriptor.

    Example:
        registry = TestRegistry()
        registry.register_setup("cache", open_cache)
        registry.register_task("cache", hammer_cache, count=8)
        registry.register_body("cache", verify_cache)
        registry.register_teardown("cache", close_cache)

        registry.configure(verbose=True)
        registry.execute()
        print(registry.get("cache").status)
    """

    __test__ = False

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            config: Engine configuration. Uses defaults if not provided.
            clock: Time source for the whole-pass timer.
            stream: Destination of direct_output. Defaults to stdout.
        """
        self.config = config or EngineConfig()
        self.elapsed_us = 0
        self._clock = clock or default_clock()
        self._stream = stream
        self._tests: Dict[str, TestDescriptor] = {}
        self._reports: List[ReportEntry] = []
        self._reports_lock = threading.Lock()
        self._stream_lock = threading.Lock()
        self._locked = False

    # --- Registration ---

    def _find_or_create(self, name: str) -> TestDescriptor:
        if self._locked:
            raise RegistryLockedError(name)
        descriptor = self._tests.get(name)
        if descriptor is None:
            descriptor = TestDescriptor(name=name)
            self._tests[name] = descriptor
            logger.debug(f"Registered test {name}")
        return descriptor

    def register_setup(self, name: str, action: Action) -> TestDescriptor:
        """Set the setup action of a test, replacing any previous one."""
        descriptor = self._find_or_create(name)
        descriptor.setup = action
        return descriptor

    def register_teardown(self, name: str, action: Action) -> TestDescriptor:
        """Set the teardown action of a test, replacing any previous one."""
        descriptor = self._find_or_create(name)
        descriptor.teardown = action
        return descriptor

    def register_body(self, name: str, action: Action, stress_test: bool = False) -> TestDescriptor:
        """
        Set the body of a test, replacing any previous one.

        Args:
            name: Test name.
            action: Zero-argument test body.
            stress_test: Skip this test unless stress mode is enabled.
        """
        descriptor = self._find_or_create(name)
        descriptor.body = action
        descriptor.stress_test = stress_test
        return descriptor

    def register_task(self, name: str, action: Action, count: int = 1) -> TestDescriptor:
        """
        Append ``count`` concurrent copies of an action to a test.

        A count of zero still creates the test but queues nothing.
        """
        descriptor = self._find_or_create(name)
        descriptor.tasks.add(action, count)
        return descriptor

    # --- Lookup ---

    def get(self, name: str) -> Optional[TestDescriptor]:
        """Get a descriptor by name."""
        return self._tests.get(name)

    @property
    def descriptors(self) -> List[TestDescriptor]:
        """Get all descriptors in registration order."""
        return list(self._tests.values())

    @property
    def reports(self) -> List[ReportEntry]:
        """Get the report_back messages in the order they were made."""
        with self._reports_lock:
            return list(self._reports)

    @property
    def executed(self) -> bool:
        """Check if execute has been called."""
        return self._locked

    def __contains__(self, name: object) -> bool:
        return name in self._tests

    def __iter__(self) -> Iterator[TestDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self._tests)

    # --- Configuration ---

    def configure(self, config: Optional[EngineConfig] = None, **overrides: Any) -> EngineConfig:
        """
        Replace the engine configuration.

        Args:
            config: New configuration. Defaults to the current one.
            **overrides: Fields to override, e.g. ``stress=True``.

        Returns:
            The configuration now in effect.
        """
        base = config or self.config
        self.config = dataclasses.replace(base, **overrides)
        return self.config

    # --- Current test ---

    def current_test(self) -> Optional[TestDescriptor]:
        """Get the descriptor this registry is executing, if any."""
        context = get_current_context()
        if context is None or context.registry is not self:
            return None
        return context.descriptor

    def report_back(self, message: str) -> ReportEntry:
        """
        Record a message against the current test.

        Raises:
            NoActiveTestError: If no test of this registry is executing.
        """
        descriptor = self.current_test()
        if descriptor is None:
            raise NoActiveTestError("report_back")
        entry = ReportEntry(test_name=descriptor.name, message=message)
        with self._reports_lock:
            self._reports.append(entry)
        return entry

    def direct_output(self, message: str) -> None:
        """
        Write a message straight to the output stream.

        Raises:
            NoActiveTestError: If no test of this registry is executing.
        """
        if self.current_test() is None:
            raise NoActiveTestError("direct_output")
        stream = self._stream or sys.stdout
        with self._stream_lock:
            stream.write(f"{message}\n")
            stream.flush()

    # --- Execution ---

    def execute(self) -> None:
        """
        Run every registered test once, in registration order.

        Tests excluded by the selection are marked ignored and not run.
        No test outcome can stop the pass.

        Raises:
            ULightError: If the registry was already executed.
        """
        if self._locked:
            raise ULightError("Registry has already been executed")
        self._locked = True

        timer = TestTimer(self._clock)
        config = self.config
        logger.info(f"Executing {len(self._tests)} tests")

        for descriptor in self._tests.values():
            with active_test(self, descriptor):
                if config.named_only and descriptor.name not in config.selected:
                    descriptor.ignored = True
                    logger.debug(f"Ignoring unselected test {descriptor.name}")
                    continue
                self._run_test(descriptor)
            logger.info(f"{descriptor.name}: {descriptor.status.value}")

        self.elapsed_us = timer.poll()
        logger.info(f"Execution finished in {self.elapsed_us}us")

    def _run_test(self, descriptor: TestDescriptor) -> None:
        if descriptor.stress_test and not self.config.stress:
            descriptor.status = TestStatus.SKIPPED
            logger.debug(f"Skipping stress test {descriptor.name}")
            return

        had_tasks = descriptor.tasks.has_tasks()

        self._run_stage(descriptor, Stage.SETUP, descriptor.setup)
        if had_tasks:
            self._run_stage(descriptor, Stage.TASK, lambda: self._task_stage(descriptor))
        if descriptor.status is TestStatus.INCONCLUSIVE:
            self._run_stage(descriptor, Stage.RUN, lambda: self._body_stage(descriptor, had_tasks))
        self._run_stage(descriptor, Stage.TEARDOWN, descriptor.teardown)

    def _run_stage(self, descriptor: TestDescriptor, stage: Stage, action: Optional[Action]) -> None:
        if action is None:
            return
        logger.debug(f"{descriptor.name}: {stage.value}")
        outcome = capture_outcome(action)
        self._apply_outcome(descriptor, outcome)

    @staticmethod
    def _apply_outcome(descriptor: TestDescriptor, outcome: Outcome) -> None:
        if outcome.kind is OutcomeKind.FAILURE:
            descriptor.fail(outcome.message, outcome.filename, outcome.line_number)
        elif outcome.kind is OutcomeKind.SKIP:
            descriptor.status = TestStatus.SKIPPED
        elif outcome.kind is OutcomeKind.INCOMPLETE:
            descriptor.status = TestStatus.INCOMPLETE

    @staticmethod
    def _task_stage(descriptor: TestDescriptor) -> None:
        results: RunResults = descriptor.tasks.run()
        if results.failed > 0:
            descriptor.status = TestStatus.FAILED
        elif results.incomplete > 0:
            descriptor.status = TestStatus.INCOMPLETE
        elif results.skipped > 0:
            descriptor.status = TestStatus.SKIPPED
        if results.errors:
            message, count = results.errors[0]
            descriptor.fail(f"Error occurred in {count} threads: {message}")

    @staticmethod
    def _body_stage(descriptor: TestDescriptor, had_tasks: bool) -> None:
        if descriptor.body is not None:
            descriptor.body()
            descriptor.status = TestStatus.PASSED
        elif had_tasks:
            descriptor.status = TestStatus.PASSED
