"""
ULight - lightweight in-process test engine

Register named tests with setup, teardown, a body and concurrent tasks,
execute them through a fixed lifecycle, and report statuses and benchmark
timings.
"""

from .engine import (
    Benchmark,
    CheckFailure,
    EngineConfig,
    RunReport,
    SkipTest,
    TestDescriptor,
    TestIncomplete,
    TestRegistry,
    TestStatus,
    benchmark,
    build_report,
    check,
    direct,
    expect_exception,
    fail,
    get_registry,
    incomplete,
    render_report,
    report,
    setup,
    skip,
    stress_test,
    task,
    teardown,
    test,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "TestRegistry",
    "EngineConfig",
    "TestDescriptor",
    "TestStatus",
    "get_registry",
    # Registration
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
    "CheckFailure",
    "SkipTest",
    "TestIncomplete",
    # Timing
    "Benchmark",
    "benchmark",
    # Reporting
    "RunReport",
    "build_report",
    "render_report",
]
