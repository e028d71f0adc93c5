"""Tests for result aggregation and the text report."""

import io

import pytest

from ulight.engine import (
    CheckFailure,
    EngineConfig,
    RunReport,
    TestRegistry,
    TestStatus,
    build_report,
    pretty_number,
    render_report,
)


def noop():
    pass


def failing():
    raise CheckFailure("wrong answer", "/src/test_answers.py", 33)


@pytest.fixture
def executed_registry() -> TestRegistry:
    registry = TestRegistry()
    registry.register_body("passes", noop)
    registry.register_body("fails", failing)
    registry.register_body("skips", noop, stress_test=True)
    registry.register_setup("inconclusive", noop)
    registry.register_body("reports", lambda: registry.report_back("42 widgets"))
    registry.register_body("ignored", noop)
    registry.configure(selected={"passes", "fails", "skips", "inconclusive", "reports"})
    registry.execute()

    registry.get("passes").benchmarked = True
    registry.get("passes").benchmark_us = 1_234_567
    registry.get("passes").items_per_second = 81
    return registry


class TestBuildReport:

    def test_totals_exclude_ignored(self, executed_registry):
        report = build_report(executed_registry)

        assert report.total == 5
        assert report.passed == 2
        assert report.skipped == 1
        assert report.incomplete == 0

    def test_inconclusive_counts_as_failed(self, executed_registry):
        report = build_report(executed_registry)

        assert report.failed == 2
        assert not report.success

    def test_per_test_fields(self, executed_registry):
        report = build_report(executed_registry)
        tests = {t.name: t for t in report.tests}

        assert tests["fails"].status is TestStatus.FAILED
        assert tests["fails"].error == "wrong answer"
        assert tests["fails"].filename == "test_answers.py"
        assert tests["fails"].line_number == 33
        assert tests["ignored"].ignored is True
        assert tests["ignored"].status is TestStatus.INCONCLUSIVE
        assert tests["passes"].benchmark_us == 1_234_567
        assert [(r.test_name, r.message) for r in report.reports] == [("reports", "42 widgets")]

    def test_json_round_trip(self, executed_registry):
        report = build_report(executed_registry)

        restored = RunReport.model_validate_json(report.model_dump_json())

        assert restored == report

    def test_all_passing_is_success(self):
        registry = TestRegistry()
        registry.register_body("a", noop)
        registry.execute()

        report = build_report(registry)
        assert report.success
        assert "1/1 passed" in report.summary()


class TestRenderReport:

    def test_failure_block_and_totals(self, executed_registry):
        stream = io.StringIO()
        render_report(build_report(executed_registry), stream, EngineConfig())
        text = stream.getvalue()

        assert "Test Failed: fails\n Location: test_answers.py (33)\n Error: wrong answer\n" in text
        assert " Passed       2\n" in text
        assert " Failed       2\n" in text
        assert " Total        5\n" in text
        assert " Benchmarking Disabled\n" in text
        assert "ignored" not in text

    def test_optional_sections(self, executed_registry):
        stream = io.StringIO()
        config = EngineConfig(benchmark=True, verbose=True, reports=True)
        render_report(build_report(executed_registry), stream, config)
        text = stream.getvalue()

        assert "1,234,567us" in text
        assert "81/s passes" in text
        assert "reports:\n 42 widgets\n" in text
        assert "passes : passed\n" in text
        assert "skips : skipped\n" in text
        assert " Benchmarking Enabled\n" in text

    def test_sections_hidden_by_default(self, executed_registry):
        stream = io.StringIO()
        render_report(build_report(executed_registry), stream, EngineConfig())
        text = stream.getvalue()

        assert "42 widgets" not in text
        assert "passes : passed" not in text
        assert "1,234,567us" not in text


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (999, "999"), (1000, "1,000"), (1234567, "1,234,567"), (-4500, "-4,500")],
)
def test_pretty_number(value, expected):
    assert pretty_number(value) == expected
