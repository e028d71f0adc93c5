"""
Result aggregation and reporting.

Builds a serializable RunReport from an executed registry and renders it
as the plain-text summary printed at the end of a run.
"""

from datetime import datetime
from typing import List, Optional, TextIO

from pydantic import BaseModel, Field

from ulight.engine.registry import TestRegistry
from ulight.engine.types import EngineConfig, TestDescriptor, TestStatus


class TestReport(BaseModel):
    """Outcome of one named test."""
    __test__ = False

    name: str
    status: TestStatus
    ignored: bool = False
    error: str = ""
    filename: str = ""
    line_number: int = 0
    benchmarked: bool = False
    benchmark_us: int = 0
    items_per_second: int = 0

    @classmethod
    def from_descriptor(cls, descriptor: TestDescriptor) -> "TestReport":
        return cls(
            name=descriptor.name,
            status=descriptor.status,
            ignored=descriptor.ignored,
            error=descriptor.error,
            filename=descriptor.filename,
            line_number=descriptor.line_number,
            benchmarked=descriptor.benchmarked,
            benchmark_us=descriptor.benchmark_us,
            items_per_second=descriptor.items_per_second,
        )


class ReportBack(BaseModel):
    """Message a test reported while executing."""
    test_name: str
    message: str


class RunReport(BaseModel):
    """Aggregated results of one execution pass."""
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    incomplete: int = 0
    total: int = 0
    elapsed_us: int = 0
    benchmarking: bool = False
    finished_at: datetime = Field(default_factory=datetime.now)
    reports: List[ReportBack] = Field(default_factory=list)
    tests: List[TestReport] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if every executed test passed, skipped or was incomplete."""
        return self.failed == 0

    def executed(self) -> List[TestReport]:
        """Get the reports of tests that were not ignored."""
        return [t for t in self.tests if not t.ignored]

    def summary(self) -> str:
        """Get a one-line summary of the results."""
        return (
            f"Tests: {self.passed}/{self.total} passed, {self.failed} failed, "
            f"{self.skipped} skipped, {self.incomplete} incomplete, "
            f"Elapsed: {pretty_number(self.elapsed_us)}us"
        )


def pretty_number(value: int) -> str:
    """Format an integer with comma thousands separators."""
    return f"{value:,}"


def build_report(registry: TestRegistry) -> RunReport:
    """
    Aggregate the descriptors of an executed registry.

    Ignored tests are left out of the totals. A test that stayed
    inconclusive counts as failed.
    """
    report = RunReport(
        elapsed_us=registry.elapsed_us,
        benchmarking=registry.config.benchmark,
        reports=[ReportBack(test_name=r.test_name, message=r.message) for r in registry.reports],
        tests=[TestReport.from_descriptor(d) for d in registry],
    )

    for test in report.executed():
        report.total += 1
        if test.status is TestStatus.PASSED:
            report.passed += 1
        elif test.status is TestStatus.SKIPPED:
            report.skipped += 1
        elif test.status is TestStatus.INCOMPLETE:
            report.incomplete += 1
        else:
            report.failed += 1

    return report


def render_report(
    report: RunReport,
    stream: TextIO,
    config: Optional[EngineConfig] = None,
) -> None:
    """
    Write the text report of a run.

    Args:
        report: Aggregated results.
        stream: Destination stream.
        config: Controls which optional sections are written.
    """
    config = config or EngineConfig(benchmark=report.benchmarking)
    tests = report.executed()
    lines: List[str] = [""]

    if config.benchmark:
        for test in tests:
            if not test.benchmarked:
                continue
            timing = f"{pretty_number(test.benchmark_us):>8}us "
            if test.items_per_second > 0:
                rate = f"{pretty_number(test.items_per_second):>12}/s "
            else:
                rate = " " * 15
            lines.append(f"{timing}{rate}{test.name}")
        lines.append("")

    if config.reports and report.reports:
        for entry in report.reports:
            lines.append(f"{entry.test_name}:")
            lines.append(f" {entry.message}")
        lines.append("")

    if config.verbose:
        for test in tests:
            if test.status in (TestStatus.PASSED, TestStatus.SKIPPED, TestStatus.INCOMPLETE):
                lines.append(f"{test.name} : {test.status.value}")
        lines.append("")

    for test in tests:
        if test.status is TestStatus.FAILED:
            lines.append(f"Test Failed: {test.name}")
            lines.append(f" Location: {test.filename} ({test.line_number})")
            lines.append(f" Error: {test.error}")
            lines.append("")

    stamp = report.finished_at.strftime("%Y-%m-%d %H:%M:%S")
    lines.extend([
        f"Results ({stamp}): ",
        f" Passed       {report.passed}",
        f" Failed       {report.failed}",
        f" Skipped      {report.skipped}",
        f" Incomplete   {report.incomplete}",
        f" Total        {report.total}",
        f" Elapsed      {pretty_number(report.elapsed_us)}us",
        f" Benchmarking {'Enabled' if config.benchmark else 'Disabled'}",
        "",
    ])

    stream.write("\n".join(lines) + "\n")
