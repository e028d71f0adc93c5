"""
Test Execution Engine for ULight.

This module provides test registration, the Setup/Task/Run/Teardown
lifecycle, concurrent task execution and benchmark timing.
"""

from ulight.engine.checks import (
    check,
    direct,
    expect_exception,
    fail,
    incomplete,
    report,
    skip,
)
from ulight.engine.clock import Clock, default_clock
from ulight.engine.context import (
    ExecutionContext,
    active_test,
    get_current_context,
    get_current_test,
)
from ulight.engine.decorators import (
    get_registry,
    reset_registry,
    setup,
    stress_test,
    task,
    teardown,
    test,
)
from ulight.engine.errors import (
    CheckFailure,
    NoActiveTestError,
    RegistryLockedError,
    SkipTest,
    TestIncomplete,
    ULightError,
)
from ulight.engine.outcome import UNEXPECTED_EXCEPTION, capture_outcome
from ulight.engine.registry import TestRegistry
from ulight.engine.reporting import (
    ReportBack,
    RunReport,
    TestReport,
    build_report,
    pretty_number,
    render_report,
)
from ulight.engine.tasks import RunCounters, TaskRunner
from ulight.engine.timer import Benchmark, TestTimer, benchmark, benchmarked
from ulight.engine.types import (
    EngineConfig,
    Outcome,
    OutcomeKind,
    ReportEntry,
    RunResults,
    Stage,
    TestDescriptor,
    TestStatus,
)

__all__ = [
    # Registry
    "TestRegistry",
    # Decorators
    "get_registry",
    "reset_registry",
    "setup",
    "teardown",
    "test",
    "stress_test",
    "task",
    # Checks
    "check",
    "fail",
    "skip",
    "incomplete",
    "expect_exception",
    "report",
    "direct",
    # Tasks
    "TaskRunner",
    "RunCounters",
    # Timing
    "Clock",
    "default_clock",
    "TestTimer",
    "Benchmark",
    "benchmark",
    "benchmarked",
    # Context
    "ExecutionContext",
    "active_test",
    "get_current_context",
    "get_current_test",
    # Outcomes
    "capture_outcome",
    "UNEXPECTED_EXCEPTION",
    # Reporting
    "RunReport",
    "TestReport",
    "ReportBack",
    "build_report",
    "render_report",
    "pretty_number",
    # Types
    "EngineConfig",
    "Outcome",
    "OutcomeKind",
    "ReportEntry",
    "RunResults",
    "Stage",
    "TestDescriptor",
    "TestStatus",
    # Errors
    "ULightError",
    "NoActiveTestError",
    "RegistryLockedError",
    "CheckFailure",
    "SkipTest",
    "TestIncomplete",
]
