# timebound/core/scheduler/calculator.py
from __future__ import annotations
from contextlib import contextmanager
from datetime import date, datetime, time as datetime_time, timedelta
from typing import Any, Callable, Iterator, Optional
from timebound.core.clock import Clock
from timebound.core.defaults import MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND
from timebound.core.errors import ErrorCode, InvalidInputError
from timebound.core.models.settings import BoundaryKind, HourStrategy
from timebound.core.types.instant import Instant, as_instant, out_of_range

# Day and hour boundaries follow the process local zone (TZ). Minute and
# second boundaries are computed on the epoch value directly.

HALF_HOUR_CHECKPOINT_MINUTE = 31


def next_day_start(ref: Any = None, *, clock: Optional[Clock] = None) -> Instant:
    """Local midnight (00:00:00.000) of the calendar day after ref's day."""
    instant = as_instant(ref, clock=clock)
    with _calendar_range(instant):
        wall = _local_wall(instant)
        return _from_local_wall(_midnight(wall.date() + timedelta(days=1)))


def next_hour_boundary(ref: Any = None, *, clock: Optional[Clock] = None) -> Instant:
    """
    Hour start nearest to ref, rounding half up at minute 30.

    Minutes 0-29 land on the start of ref's own hour (not after ref);
    minutes 30-59 land on the next hour. 23:30 and later roll over to
    00:00 of the next day. Seconds are ignored for rounding.
    """
    instant = as_instant(ref, clock=clock)
    with _calendar_range(instant):
        wall = _local_wall(instant)
        hour = wall.hour + (1 if wall.minute >= 30 else 0)
        day = wall.date()
        if hour > 23:
            hour = 0
            day += timedelta(days=1)
        return _from_local_wall(datetime.combine(day, datetime_time(hour)))


def hourly_boundary(ref: Any = None, *, clock: Optional[Clock] = None) -> Instant:
    """Start of the next local hour, strictly after ref."""
    instant = as_instant(ref, clock=clock)
    with _calendar_range(instant):
        return _next_hour_start(instant)


def half_hourly_boundary(ref: Any = None, *, clock: Optional[Clock] = None) -> Instant:
    """
    Two checkpoints per hour: :31 and :00.

    Before minute 31 the result is HH:31:00.000 of the same hour, otherwise
    the start of the next hour (with day rollover after 23:31).
    """
    instant = as_instant(ref, clock=clock)
    with _calendar_range(instant):
        wall = _local_wall(instant)
        if wall.minute < HALF_HOUR_CHECKPOINT_MINUTE:
            checkpoint = wall.replace(minute=HALF_HOUR_CHECKPOINT_MINUTE, second=0)
            return _from_local_wall(checkpoint)
        return _next_hour_start(instant)


def next_minute_start(ref: Any = None, *, clock: Optional[Clock] = None) -> Instant:
    """ref plus one minute, with seconds and milliseconds zeroed."""
    instant = as_instant(ref, clock=clock)
    return _checked((instant // MS_PER_MINUTE + 1) * MS_PER_MINUTE)


def next_second_start(ref: Any = None, *, clock: Optional[Clock] = None) -> Instant:
    """ref plus one second, with milliseconds zeroed."""
    instant = as_instant(ref, clock=clock)
    return _checked((instant // MS_PER_SECOND + 1) * MS_PER_SECOND)


HOUR_CALCULATORS: dict[HourStrategy, Callable[..., Instant]] = {
    HourStrategy.ROUNDED: next_hour_boundary,
    HourStrategy.HOURLY: hourly_boundary,
    HourStrategy.HALF_HOURLY: half_hourly_boundary,
}


def calculator_for(
    kind: BoundaryKind | str, hour_strategy: HourStrategy | str = HourStrategy.HOURLY
) -> Callable[..., Instant]:
    """
    Return the calculator function for a boundary kind.

    Raises:
        InvalidInputError: If kind or hour_strategy is not a known value
    """
    try:
        kind = BoundaryKind(kind)
        hour_strategy = HourStrategy(hour_strategy)
    except ValueError as e:
        raise InvalidInputError(
            message=str(e),
            code=ErrorCode.UNKNOWN_BOUNDARY_KIND,
            notes=[
                f'kinds: {[k.value for k in BoundaryKind]}',
                f'hour strategies: {[s.value for s in HourStrategy]}',
            ],
        ) from e

    match kind:
        case BoundaryKind.DAY:
            return next_day_start
        case BoundaryKind.HOUR:
            return HOUR_CALCULATORS[hour_strategy]
        case BoundaryKind.MINUTE:
            return next_minute_start
        case BoundaryKind.SECOND:
            return next_second_start


def next_boundary(
    kind: BoundaryKind | str,
    ref: Any = None,
    *,
    hour_strategy: HourStrategy | str = HourStrategy.HOURLY,
    clock: Optional[Clock] = None,
) -> Instant:
    """Next boundary of the given kind after ref (or after now)."""
    return calculator_for(kind, hour_strategy)(ref, clock=clock)


def floor_to_minute(instant: Any) -> Instant:
    """Truncate an instant down to the start of its minute."""
    return as_instant(instant) // MS_PER_MINUTE * MS_PER_MINUTE


def is_elapsed(boundary: Instant, now: Instant) -> bool:
    """True once now has moved strictly past the boundary."""
    return boundary < now


def _local_wall(instant: Instant) -> datetime:
    # Naive local wall time; second resolution is all the calendar math needs.
    return datetime.fromtimestamp(instant // MS_PER_SECOND)


def _from_local_wall(wall: datetime) -> Instant:
    return _checked(round(wall.timestamp()) * MS_PER_SECOND)


def _midnight(day: date) -> datetime:
    return datetime.combine(day, datetime_time.min)


def _next_hour_start(instant: Instant) -> Instant:
    # Step one real hour from the start of the current local hour, so the
    # hour repeated when clocks fall back still gets its own boundary.
    wall = _local_wall(instant)
    into_hour = (wall.minute * 60 + wall.second) * MS_PER_SECOND + instant % MS_PER_SECOND
    candidate = instant - into_hour + MS_PER_HOUR
    landed = _local_wall(candidate)
    if landed.minute == 0 and landed.second == 0:
        return _checked(candidate)
    # Offset moved by a fraction of an hour (e.g. Lord Howe); go by the wall clock
    return _from_local_wall(wall.replace(minute=0, second=0) + timedelta(hours=1))


def _checked(instant: Instant) -> Instant:
    return as_instant(instant)


@contextmanager
def _calendar_range(instant: Instant) -> Iterator[None]:
    """Report calendar overflow near year 1 / 9999 as invalid input."""
    try:
        yield
    except (OverflowError, OSError, ValueError) as e:
        raise out_of_range(instant) from e
