# timebound/core/scheduler/rolling.py
from __future__ import annotations
import threading
from collections import deque
from typing import Callable, Optional
from timebound.core.clock import Clock, system_clock
from timebound.core.codec.military import MilitaryTimestamp, encode
from timebound.core.logging import get_logger
from timebound.core.models.settings import BoundaryKind, SchedulerSettings, coerce_kind
from timebound.core.scheduler.calculator import calculator_for, is_elapsed
from timebound.core.types.instant import Instant

logger = get_logger('scheduler')

FireCallback = Callable[[MilitaryTimestamp], None]


class RollingScheduler:
    """
    Rolling queue of upcoming boundaries for one fixed BoundaryKind.

    Each tick():
    1. Pads the queue to the configured depth, extending from its tail
       (or from now when empty)
    2. Pops the front entry if it is already in the past and fires
       on_fire with its military timestamp

    At most one boundary fires per tick. When polling falls behind and
    several queued boundaries have elapsed, they are coalesced: the rest
    stay queued and fire one per later tick, and a warning is logged.

    One instance serves one kind. Use separate instances for separate
    kinds. tick() is serialized with a lock and may be called from timer
    threads.
    """

    def __init__(
        self,
        kind: BoundaryKind | str,
        *,
        settings: Optional[SchedulerSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self.kind = coerce_kind(kind)
        self.settings = settings or SchedulerSettings()
        self.settings.validate_for(self.kind)

        self.clock: Clock = clock or system_clock()
        self.depth = self.settings.depths.for_kind(self.kind)
        self._next = calculator_for(self.kind, self.settings.hour_strategy)
        self._queue: deque[Instant] = deque()
        self._last_fired: Optional[Instant] = None
        self._lock = threading.Lock()

        logger.debug(
            f'RollingScheduler created: kind={self.kind.value}, depth={self.depth}, '
            f'hour_strategy={self.settings.hour_strategy.value}'
        )

    @property
    def upcoming(self) -> tuple[Instant, ...]:
        """Snapshot of the queued boundaries, earliest first."""
        with self._lock:
            return tuple(self._queue)

    @property
    def last_fired(self) -> Optional[Instant]:
        return self._last_fired

    def tick(self, on_fire: FireCallback) -> Optional[Instant]:
        """
        Refill the queue and fire the front boundary if it has elapsed.

        Returns:
            The fired boundary, or None when nothing was due
        """
        with self._lock:
            now = self.clock.now_ms()
            self._refill(now)

            if not is_elapsed(self._queue[0], now):
                return None

            fired = self._queue.popleft()
            self._last_fired = fired
            backlog = sum(1 for b in self._queue if is_elapsed(b, now))

        if backlog:
            logger.warning(
                f'{backlog} more elapsed {self.kind.value} boundaries queued; '
                f'they fire one per tick'
            )

        timestamp = encode(fired)
        logger.info(f'{self.kind.value} boundary reached: {timestamp}')
        on_fire(timestamp)
        return fired

    def elapsed_count(self, now: Optional[Instant] = None) -> int:
        """Number of queued boundaries already in the past."""
        check_time = self.clock.now_ms() if now is None else now
        with self._lock:
            return sum(1 for b in self._queue if is_elapsed(b, check_time))

    def reset(self) -> None:
        """Drop every queued boundary and forget the last fired one."""
        with self._lock:
            self._queue.clear()
            self._last_fired = None
        logger.debug(f'{self.kind.value} scheduler reset')

    def _refill(self, now: Instant) -> None:
        added = 0
        while len(self._queue) < self.depth:
            tail = self._queue[-1] if self._queue else now
            self._queue.append(self._next(tail))
            added += 1
        if added:
            logger.debug(
                f'Queued {added} {self.kind.value} boundaries, '
                f'tail={encode(self._queue[-1])}'
            )
