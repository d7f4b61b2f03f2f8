"""Order number generation: ``ORD-`` + upper-case base-36 millisecond timestamp."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

ORDER_NUMBER_PREFIX = "ORD-"
_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base-36 encoding needs a non-negative integer")
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class OrderNumberGenerator:
    """Issues order numbers from the clock.

    Two calls landing in the same millisecond (or a clock that steps back)
    would collide, so each number is issued from at least one millisecond
    past the previous one.  Storage still rejects duplicates across
    processes.
    """

    def __init__(self, clock_ms: Callable[[], int] = _now_ms) -> None:
        self._clock_ms = clock_ms
        self._last = -1
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            stamp = max(self._clock_ms(), self._last + 1)
            self._last = stamp
        return f"{ORDER_NUMBER_PREFIX}{to_base36(stamp)}"
