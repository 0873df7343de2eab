# timebound/core/scheduler/poller.py
from __future__ import annotations
import asyncio
import numbers
import threading
from typing import Any, Optional
from timebound.core.codec.military import MilitaryTimestamp
from timebound.core.errors import (
    ErrorCode,
    InvalidInputError,
    PollCancelledError,
    PollTimeoutError,
)
from timebound.core.logging import get_logger
from timebound.core.models.settings import BoundaryKind
from timebound.core.scheduler.rolling import FireCallback, RollingScheduler
from timebound.core.scheduler.triggers import (
    IntervalTrigger,
    ThreadingIntervalTrigger,
    TriggerHandle,
)

logger = get_logger('poller')


class PollHandle:
    """
    Cancellation token and result holder for one poll_until_fire() call.

    Exactly one of two outcomes happens: the boundary fires (fired=True,
    timestamp set) or the poll is cancelled first (cancelled=True).
    """

    def __init__(self, kind: BoundaryKind):
        self.kind = kind
        self.timestamp: Optional[MilitaryTimestamp] = None
        self.exception: Optional[BaseException] = None
        self._trigger_handle: Optional[TriggerHandle] = None
        self._fired = False
        self._cancelled = False
        self._done = threading.Event()
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def cancel(self) -> bool:
        """
        Stop polling before the boundary fires.

        Waits for a tick already in progress. A boundary is never popped
        from the scheduler without being delivered: it either fires here
        or stays queued.

        Returns:
            True if this call cancelled the poll, False if it had already
            fired or been cancelled
        """
        with self._lock:
            if self._fired or self._cancelled:
                return False
            self._cancelled = True
        self._stop_trigger()
        self._done.set()
        logger.debug(f'{self.kind.value} poll cancelled before firing')
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until fired or cancelled. False means the timeout expired."""
        return self._done.wait(timeout)

    def result(self, timeout: Optional[float] = None) -> MilitaryTimestamp:
        """
        Block for the fired timestamp.

        Raises:
            PollTimeoutError: Nothing happened within timeout seconds
            PollCancelledError: cancel() won before the boundary fired
            Exception: Whatever on_fire raised
        """
        if not self._done.wait(timeout):
            raise PollTimeoutError(
                message=f'{self.kind.value} boundary did not fire within {timeout}s',
                code=ErrorCode.POLL_TIMEOUT,
            )
        if self._cancelled:
            raise PollCancelledError(
                message=f'{self.kind.value} poll was cancelled before firing',
                code=ErrorCode.POLL_CANCELLED,
            )
        if self.exception is not None:
            raise self.exception
        assert self.timestamp is not None
        return self.timestamp

    def _attach(self, trigger_handle: TriggerHandle) -> None:
        with self._lock:
            self._trigger_handle = trigger_handle
            finished = self._fired or self._cancelled
        # Fired or cancelled before start() returned
        if finished:
            trigger_handle.cancel()

    def _tick_once(self, sched: RollingScheduler) -> Optional[MilitaryTimestamp]:
        # The tick runs under the handle lock, so cancel() either lands
        # before the boundary is popped or sees the poll as fired.
        popped: list[MilitaryTimestamp] = []
        with self._lock:
            if self._fired or self._cancelled:
                return None
            sched.tick(popped.append)
            if not popped:
                return None
            self._fired = True
            self.timestamp = popped[0]
            return self.timestamp

    def _stop_trigger(self) -> None:
        with self._lock:
            trigger_handle = self._trigger_handle
        if trigger_handle is not None:
            trigger_handle.cancel()


def poll_until_fire(
    scheduler: RollingScheduler | BoundaryKind | str,
    interval_ms: Optional[int] = None,
    on_fire: Optional[FireCallback] = None,
    *,
    trigger: Optional[IntervalTrigger] = None,
) -> PollHandle:
    """
    Tick a scheduler every interval_ms until its next boundary fires once.

    A boundary kind instead of a scheduler gets a fresh RollingScheduler with
    default settings. interval_ms=None uses the scheduler settings.

    on_fire runs once, after the trigger is stopped. If it raises, the error
    is logged and stored on the handle (re-raised by result()).

    Returns:
        PollHandle: cancel it to stop polling early
    """
    sched = _as_scheduler(scheduler)
    interval = _resolve_interval(sched, interval_ms)
    handle = PollHandle(sched.kind)

    def _poll_once() -> None:
        timestamp = handle._tick_once(sched)
        if timestamp is None:
            return
        handle._stop_trigger()
        try:
            if on_fire is not None:
                on_fire(timestamp)
        except Exception as e:
            logger.error(f'on_fire callback failed for {timestamp}: {e}', exc_info=True)
            handle.exception = e
        finally:
            handle._done.set()

    logger.debug(f'Polling {sched.kind.value} boundary every {interval}ms')
    handle._attach((trigger or ThreadingIntervalTrigger()).start(interval, _poll_once))
    return handle


async def wait_for_boundary(
    scheduler: RollingScheduler | BoundaryKind | str,
    interval_ms: Optional[int] = None,
    *,
    stop: Optional[asyncio.Event] = None,
) -> Optional[MilitaryTimestamp]:
    """
    Async form of poll_until_fire: tick, then sleep interval_ms, until a fire.

    Returns:
        The fired military timestamp, or None if stop was set first
    """
    sched = _as_scheduler(scheduler)
    interval = _resolve_interval(sched, interval_ms)
    stop_event = stop or asyncio.Event()
    fired: list[MilitaryTimestamp] = []

    while not stop_event.is_set():
        sched.tick(fired.append)
        if fired:
            return fired[0]

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval / 1000)
            break  # Stop signal received
        except asyncio.TimeoutError:
            continue

    logger.debug(f'{sched.kind.value} wait stopped before firing')
    return None


def _as_scheduler(scheduler: RollingScheduler | BoundaryKind | str) -> RollingScheduler:
    if isinstance(scheduler, RollingScheduler):
        return scheduler
    return RollingScheduler(scheduler)


def _resolve_interval(sched: RollingScheduler, interval_ms: Any) -> int:
    if interval_ms is None:
        return sched.settings.poll_interval_for(sched.kind)

    if (
        isinstance(interval_ms, bool)
        or not isinstance(interval_ms, numbers.Integral)
        or interval_ms <= 0
    ):
        raise InvalidInputError(
            message=f'interval_ms must be a positive integer, got {interval_ms!r}',
            code=ErrorCode.INVALID_INTERVAL,
        )

    interval = int(interval_ms)
    if interval > sched.kind.period_ms:
        logger.warning(
            f'Poll interval {interval}ms exceeds one {sched.kind.value} '
            f'({sched.kind.period_ms}ms); elapsed boundaries will be coalesced'
        )
    return interval
