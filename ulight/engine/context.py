"""
Current-test tracking.

The lifecycle engine publishes the descriptor it is executing through a
context variable, so timers and report helpers can find the active test
without it being passed through every call site. Task-stage workers run
inside a copy of the engine's context and therefore see the same test.
"""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, TYPE_CHECKING

from loguru import logger

from ulight.engine.types import TestDescriptor

if TYPE_CHECKING:
    from ulight.engine.registry import TestRegistry


@dataclass(frozen=True)
class ExecutionContext:
    """The registry and descriptor currently being executed."""
    registry: "TestRegistry"
    descriptor: TestDescriptor


_current_context: contextvars.ContextVar[Optional[ExecutionContext]] = \
    contextvars.ContextVar("ulight_current_test", default=None)


def get_current_context() -> Optional[ExecutionContext]:
    """Get the current execution context, or None outside a test."""
    return _current_context.get()


def get_current_test() -> Optional[TestDescriptor]:
    """Get the descriptor of the test currently executing."""
    context = _current_context.get()
    return context.descriptor if context else None


@contextmanager
def active_test(registry: "TestRegistry", descriptor: TestDescriptor) -> Iterator[ExecutionContext]:
    """
    Publish a descriptor as the current test for the duration of the block.

    Args:
        registry: Registry that owns the descriptor.
        descriptor: Descriptor being executed.

    Yields:
        The ExecutionContext that was published.
    """
    context = ExecutionContext(registry=registry, descriptor=descriptor)
    token = _current_context.set(context)
    try:
        logger.debug(f"Entered test {descriptor.name}")
        yield context
    finally:
        _current_context.reset(token)
        logger.debug(f"Left test {descriptor.name}")
