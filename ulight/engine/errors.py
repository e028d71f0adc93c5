"""
Error definitions for the test engine.

Contains the control signals raised from inside test actions and the
exceptions raised when the engine itself is misused.
"""

import inspect
from typing import Optional


def strip_directory(filename: str) -> str:
    """Keep only the part of a path after the last separator."""
    if not filename:
        return filename
    pos = max(filename.rfind("/"), filename.rfind("\\"))
    if pos == -1 or pos == len(filename) - 1:
        return filename
    return filename[pos + 1:]


class CheckFailure(AssertionError):
    """
    Raised when an explicit check inside a test action fails.

    Carries the message plus the basename and line of the code that made
    the check. When no location is given it is taken from the caller.
    """

    def __init__(
        self,
        message: str,
        filename: Optional[str] = None,
        line_number: Optional[int] = None,
    ):
        if filename is None:
            frame = inspect.currentframe()
            caller = frame.f_back if frame is not None else None
            if caller is not None:
                filename = caller.f_code.co_filename
                line_number = caller.f_lineno
            del frame, caller
        self.message = message
        self.filename = strip_directory(filename or "")
        self.line_number = line_number or 0
        super().__init__(message)


class SkipTest(Exception):
    """Raised to mark the current stage or worker as skipped."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason or "Test skipped")


class TestIncomplete(Exception):
    """Raised to mark the current stage or worker as incomplete."""

    __test__ = False

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason or "Test incomplete")


class ULightError(Exception):
    """Base exception for engine misuse."""
    pass


class NoActiveTestError(ULightError):
    """Raised when an operation needs a current test and none is executing."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} called with no test executing")


class RegistryLockedError(ULightError):
    """Raised when registering into a registry that is already executing."""

    def __init__(self, test_name: str):
        self.test_name = test_name
        super().__init__(
            f"Cannot register '{test_name}': registry is executing"
        )
