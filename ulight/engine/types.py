"""
Type definitions for the test engine.

Contains enums, dataclasses, and type definitions used throughout the engine module.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ulight.engine.tasks import TaskRunner


Action = Callable[[], object]


class TestStatus(str, Enum):
    """Terminal status of a named test."""
    __test__ = False

    INCONCLUSIVE = "inconclusive"   # Nothing decided the outcome
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    INCOMPLETE = "incomplete"


class Stage(str, Enum):
    """Lifecycle stage, in execution order."""
    SETUP = "setup"
    TASK = "task"
    RUN = "run"
    TEARDOWN = "teardown"


class OutcomeKind(str, Enum):
    """Outcome of invoking a single action."""
    SUCCESS = "success"
    FAILURE = "failure"
    SKIP = "skip"
    INCOMPLETE = "incomplete"


@dataclass(frozen=True)
class Outcome:
    """Tagged result of one action; location is only set for failures."""
    kind: OutcomeKind
    message: str = ""
    filename: str = ""
    line_number: int = 0

    @classmethod
    def success(cls) -> "Outcome":
        return cls(OutcomeKind.SUCCESS)

    @classmethod
    def failure(cls, message: str, filename: str = "", line_number: int = 0) -> "Outcome":
        return cls(OutcomeKind.FAILURE, message, filename, line_number)

    @classmethod
    def skip(cls) -> "Outcome":
        return cls(OutcomeKind.SKIP)

    @classmethod
    def incomplete(cls) -> "Outcome":
        return cls(OutcomeKind.INCOMPLETE)


def _new_task_runner() -> "TaskRunner":
    from ulight.engine.tasks import TaskRunner
    return TaskRunner()


@dataclass(eq=False)
class TestDescriptor:
    """Registered record for one named test."""
    __test__ = False

    name: str
    setup: Optional[Action] = None
    teardown: Optional[Action] = None
    body: Optional[Action] = None
    tasks: "TaskRunner" = field(default_factory=_new_task_runner)
    stress_test: bool = False

    status: TestStatus = TestStatus.INCONCLUSIVE
    error: str = ""
    filename: str = ""
    line_number: int = 0
    ignored: bool = False

    benchmarked: bool = False
    benchmark_us: int = 0
    items_per_second: int = 0

    def fail(self, message: str, filename: str = "", line_number: int = 0) -> None:
        """Mark the test failed with the given message and location."""
        self.status = TestStatus.FAILED
        self.error = message
        self.filename = filename
        self.line_number = line_number


@dataclass(frozen=True)
class RunResults:
    """Snapshot of one task-stage run."""
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    incomplete: int = 0
    errors: Tuple[Tuple[str, int], ...] = ()

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped + self.incomplete


@dataclass(frozen=True)
class ReportEntry:
    """Message reported back by a test while it executed."""
    test_name: str
    message: str


@dataclass
class EngineConfig:
    """Engine configuration."""
    benchmark: bool = False          # Capture and report timing
    verbose: bool = False            # Report pass/skip/incomplete detail
    stress: bool = False             # Run stress tests instead of skipping them
    reports: bool = False            # Emit report_back messages
    selected: FrozenSet[str] = frozenset()  # Empty runs everything

    def __post_init__(self) -> None:
        """Validate engine configuration."""
        if isinstance(self.selected, str):
            raise ValueError(
                f"selected must be a collection of names, got string {self.selected!r}"
            )
        self.selected = frozenset(self.selected)
        for name in self.selected:
            if not isinstance(name, str):
                raise ValueError(f"selected names must be strings, got {name!r}")

    @property
    def named_only(self) -> bool:
        """Check if execution is restricted to selected names."""
        return len(self.selected) > 0
