"""
Helpers for use inside test actions.

``check`` and ``fail`` raise CheckFailure located at the caller's line;
``skip`` and ``incomplete`` raise the matching signals; ``report`` and
``direct`` talk to the registry that is executing the current test.
"""

import inspect
from typing import Callable, NoReturn, Tuple, Type, Union

from ulight.engine.context import get_current_context
from ulight.engine.errors import CheckFailure, NoActiveTestError, SkipTest, TestIncomplete
from ulight.engine.types import ReportEntry


def _caller_location(depth: int = 2) -> Tuple[str, int]:
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "", 0
        return frame.f_code.co_filename, frame.f_lineno
    finally:
        del frame


def check(predicate: object, message: str) -> None:
    """
    Fail the current test unless ``predicate`` is truthy.

    Example:
        check(len(items) == 3, f"expected 3 items, got {len(items)}")
    """
    if not predicate:
        filename, line_number = _caller_location()
        raise CheckFailure(message, filename, line_number)


def fail(message: str) -> NoReturn:
    """Fail the current test unconditionally."""
    filename, line_number = _caller_location()
    raise CheckFailure(message, filename, line_number)


def skip(reason: str = "") -> NoReturn:
    """Mark the current stage or worker as skipped."""
    raise SkipTest(reason)


def incomplete(reason: str = "") -> NoReturn:
    """Mark the current stage or worker as incomplete."""
    raise TestIncomplete(reason)


def expect_exception(
    exc_type: Union[Type[BaseException], Tuple[Type[BaseException], ...]],
    action: Callable[[], object],
    message: str,
) -> None:
    """
    Fail the current test unless ``action`` raises ``exc_type``.

    Any other exception, or none at all, counts as a failure.
    """
    raised = False
    try:
        action()
    except exc_type:
        raised = True
    except Exception:
        raised = False
    if not raised:
        filename, line_number = _caller_location()
        raise CheckFailure(message, filename, line_number)


def report(message: str) -> ReportEntry:
    """Record a message against the current test."""
    context = get_current_context()
    if context is None:
        raise NoActiveTestError("report")
    return context.registry.report_back(message)


def direct(message: str) -> None:
    """Write a message straight to the current registry's output stream."""
    context = get_current_context()
    if context is None:
        raise NoActiveTestError("direct")
    context.registry.direct_output(message)
