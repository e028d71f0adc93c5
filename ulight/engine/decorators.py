"""
Decorator-based test definition.

Decorators register the decorated function on the default registry and
return it unchanged, so a test module only needs to be imported to be
registered.

Example:
    @setup("queue")
    def open_queue():
        state["queue"] = Queue()

    @task("queue", count=8)
    def push_items():
        for i in range(1000):
            state["queue"].put(i)

    @test("queue")
    def all_items_arrived():
        check(state["queue"].qsize() == 8000, "items lost")
"""

from typing import Callable, Optional, TypeVar

from ulight.engine.registry import TestRegistry

F = TypeVar("F", bound=Callable[[], object])

_default_registry: Optional[TestRegistry] = None


def get_registry() -> TestRegistry:
    """Get the default registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TestRegistry()
    return _default_registry


def reset_registry() -> TestRegistry:
    """Replace the default registry with an empty one."""
    global _default_registry
    _default_registry = TestRegistry()
    return _default_registry


def setup(name: str) -> Callable[[F], F]:
    """Register the decorated function as the setup of ``name``."""
    def decorator(func: F) -> F:
        get_registry().register_setup(name, func)
        return func
    return decorator


def teardown(name: str) -> Callable[[F], F]:
    """Register the decorated function as the teardown of ``name``."""
    def decorator(func: F) -> F:
        get_registry().register_teardown(name, func)
        return func
    return decorator


def test(name: Optional[str] = None) -> Callable[[F], F]:
    """
    Register the decorated function as a test body.

    Args:
        name: Test name (uses function name if not specified).
    """
    def decorator(func: F) -> F:
        get_registry().register_body(name or func.__name__, func)
        return func
    return decorator


# Keep pytest from collecting the decorator when it is imported into test modules.
test.__test__ = False  # type: ignore[attr-defined]


def stress_test(name: Optional[str] = None) -> Callable[[F], F]:
    """Register a test body that only runs when stress mode is enabled."""
    def decorator(func: F) -> F:
        get_registry().register_body(name or func.__name__, func, stress_test=True)
        return func
    return decorator


def task(name: str, count: int = 1) -> Callable[[F], F]:
    """
    Register the decorated function as a concurrent task of ``name``.

    Args:
        name: Test name the task belongs to.
        count: Number of copies to run at the same time.
    """
    def decorator(func: F) -> F:
        get_registry().register_task(name, func, count)
        return func
    return decorator
