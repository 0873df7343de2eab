# timebound/core/scheduler/triggers.py
"""Repeating interval triggers that drive scheduler ticks."""

from __future__ import annotations

import threading
from typing import Callable, Protocol

from timebound.core.logging import get_logger

logger = get_logger('trigger')


class TriggerHandle(Protocol):
    def cancel(self) -> None: ...


class IntervalTrigger(Protocol):
    """Calls a callback every interval_ms until the returned handle is cancelled."""

    def start(self, interval_ms: int, callback: Callable[[], None]) -> TriggerHandle: ...


class _ThreadHandle:
    def __init__(self, interval_ms: int, callback: Callable[[], None], name: str):
        self._interval_s = interval_ms / 1000
        self._callback = callback
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        # Like setInterval: the first call happens one interval after start.
        while not self._stop.wait(self._interval_s):
            try:
                self._callback()
            except Exception as e:
                logger.error(f'Interval callback failed: {e}', exc_info=True)

    def cancel(self) -> None:
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=2)
            if self._thread.is_alive():
                logger.warning('Interval thread did not stop within timeout')


class ThreadingIntervalTrigger:
    """Runs the callback on a dedicated daemon thread."""

    def __init__(self, thread_name: str = 'timebound-interval'):
        self.thread_name = thread_name

    def start(self, interval_ms: int, callback: Callable[[], None]) -> TriggerHandle:
        handle = _ThreadHandle(interval_ms, callback, self.thread_name)
        handle.start()
        return handle


class _ManualHandle:
    def __init__(self, callback: Callable[[], None]):
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualIntervalTrigger:
    """Trigger that only fires when fire() is called. For tests and simulations."""

    def __init__(self) -> None:
        self.interval_ms: int | None = None
        self.handles: list[_ManualHandle] = []

    def start(self, interval_ms: int, callback: Callable[[], None]) -> TriggerHandle:
        self.interval_ms = interval_ms
        handle = _ManualHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> bool:
        return any(not h.cancelled for h in self.handles)

    def fire(self, times: int = 1) -> None:
        """Invoke every live callback, `times` rounds in a row."""
        for _ in range(times):
            for handle in list(self.handles):
                if not handle.cancelled:
                    handle.callback()
