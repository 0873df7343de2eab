# timebound/core/clock.py
"""Wall-clock abstraction so boundary checks can run against a fake time source."""

from __future__ import annotations

import threading
import time
from typing import Protocol


class Clock(Protocol):
    """Anything that can report the current instant in epoch milliseconds."""

    def now_ms(self) -> int: ...


class SystemClock:
    """Default clock backed by the system wall clock."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class ManualClock:
    """Clock that only moves when told to. Safe to share across threads."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now = start_ms
        self._lock = threading.Lock()

    def now_ms(self) -> int:
        with self._lock:
            return self._now

    def set(self, instant_ms: int) -> None:
        with self._lock:
            self._now = instant_ms

    def advance(self, delta_ms: int) -> int:
        """Move forward by delta_ms and return the new instant."""
        with self._lock:
            self._now += delta_ms
            return self._now


_system_clock = SystemClock()


def system_clock() -> SystemClock:
    """Return the shared SystemClock instance."""
    return _system_clock
