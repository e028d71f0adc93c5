"""
Exception to outcome mapping.

Every stage of the lifecycle and every task-stage worker invokes its action
through ``capture_outcome``, so they all classify failures the same way.
"""

import traceback
from typing import Tuple

from loguru import logger

from ulight.engine.errors import CheckFailure, SkipTest, TestIncomplete, strip_directory
from ulight.engine.types import Action, Outcome

UNEXPECTED_EXCEPTION = "Unexpected exception"


def _assertion_location(exc: AssertionError) -> Tuple[str, int]:
    if isinstance(exc, CheckFailure):
        return exc.filename, exc.line_number
    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return "", 0
    innermost = frames[-1]
    return strip_directory(innermost.filename), innermost.lineno or 0


def _assertion_message(exc: AssertionError) -> str:
    if isinstance(exc, CheckFailure):
        return exc.message
    return str(exc) or "Assertion failed"


def capture_outcome(action: Action) -> Outcome:
    """
    Invoke an action and classify how it ended.

    Args:
        action: Zero-argument callable.

    Returns:
        SUCCESS on normal return; FAILURE with message and location for
        assertion errors; SKIP or INCOMPLETE for the matching signals;
        FAILURE with a generic message for anything else.
    """
    try:
        action()
    except AssertionError as e:
        filename, line_number = _assertion_location(e)
        return Outcome.failure(_assertion_message(e), filename, line_number)
    except SkipTest:
        return Outcome.skip()
    except TestIncomplete:
        return Outcome.incomplete()
    except Exception as e:
        logger.opt(exception=e).debug(f"Unexpected exception: {e!r}")
        return Outcome.failure(UNEXPECTED_EXCEPTION)
    return Outcome.success()
