"""
Microsecond time source.
"""

import time
from typing import Optional

from loguru import logger


class Clock:
    """
    Monotonic microsecond clock.

    ``now_us`` returns None instead of raising when the platform clock is
    unavailable, so callers can degrade to zero-length readings.
    """

    def now_us(self) -> Optional[int]:
        try:
            return self._read_ns() // 1000
        except OSError as e:
            logger.warning(f"Clock unavailable, timings will read as zero: {e}")
            return None

    def _read_ns(self) -> int:
        return time.monotonic_ns()


_default_clock = Clock()


def default_clock() -> Clock:
    """Get the process-wide clock."""
    return _default_clock
