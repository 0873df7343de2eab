# timebound/core/models/settings.py
from __future__ import annotations
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator
from timebound.core.defaults import (
    DEFAULT_DAY_DEPTH,
    DEFAULT_HOUR_DEPTH,
    DEFAULT_MINUTE_DEPTH,
    DEFAULT_POLLS_PER_PERIOD,
    DEFAULT_SECOND_DEPTH,
    MAX_POLL_INTERVAL_MS,
    MAX_QUEUE_DEPTH,
    MS_PER_DAY,
    MS_PER_HOUR,
    MS_PER_MINUTE,
    MS_PER_SECOND,
)
from timebound.core.errors import (
    ConfigurationError,
    ErrorCode,
    InvalidInputError,
    ValidationReport,
    raise_collected,
)


class BoundaryKind(str, Enum):
    """Which boundary a calculator or scheduler targets."""

    DAY = 'day'
    HOUR = 'hour'
    MINUTE = 'minute'
    SECOND = 'second'

    @property
    def period_ms(self) -> int:
        """Nominal spacing between consecutive boundaries of this kind."""
        return _PERIODS_MS[self]


_PERIODS_MS = {
    BoundaryKind.DAY: MS_PER_DAY,
    BoundaryKind.HOUR: MS_PER_HOUR,
    BoundaryKind.MINUTE: MS_PER_MINUTE,
    BoundaryKind.SECOND: MS_PER_SECOND,
}


def coerce_kind(value: BoundaryKind | str) -> BoundaryKind:
    """
    BoundaryKind from an enum member or its string value.

    Raises:
        InvalidInputError: If value names no boundary kind
    """
    try:
        return BoundaryKind(value)
    except ValueError as e:
        raise InvalidInputError(
            message=f'unknown boundary kind {value!r}',
            code=ErrorCode.UNKNOWN_BOUNDARY_KIND,
            notes=[f'kinds: {[k.value for k in BoundaryKind]}'],
        ) from e


class HourStrategy(str, Enum):
    """
    How the hour boundary is chosen.

    - ROUNDED: nearest hour start, rounding half up at :30 (may be before ref)
    - HOURLY: start of the next hour, strictly after ref
    - HALF_HOURLY: :31 of the current hour before :31, else the next hour start
    """

    ROUNDED = 'rounded'
    HOURLY = 'hourly'
    HALF_HOURLY = 'half_hourly'


class QueueDepths(BaseModel):
    """
    How many future boundaries a RollingScheduler keeps queued, per kind.

    Every depth must be in [1, MAX_QUEUE_DEPTH]. Out-of-range depths are
    reported together as ConfigurationError (E300).

    Examples:
        - Defaults (a week of days, a day of hours): QueueDepths()
        - Short minute lookahead: QueueDepths(minute=3)
    """

    day: int = DEFAULT_DAY_DEPTH
    hour: int = DEFAULT_HOUR_DEPTH
    minute: int = DEFAULT_MINUTE_DEPTH
    second: int = DEFAULT_SECOND_DEPTH

    @model_validator(mode='after')
    def validate_depth_range(self) -> QueueDepths:
        report = ValidationReport('queue depths')
        for kind in BoundaryKind:
            depth = getattr(self, kind.value)
            if not 1 <= depth <= MAX_QUEUE_DEPTH:
                report.add(
                    ConfigurationError(
                        message=f'{kind.value} queue depth {depth} is out of range',
                        code=ErrorCode.CONFIG_INVALID_DEPTH,
                        notes=[f'allowed: 1 to {MAX_QUEUE_DEPTH}'],
                        help_text='a depth of 1 keeps only the next boundary queued',
                    )
                )
        raise_collected(report)
        return self

    def for_kind(self, kind: BoundaryKind) -> int:
        return int(getattr(self, coerce_kind(kind).value))


class SchedulerSettings(BaseModel):
    """
    Configuration for a RollingScheduler and its polling wrapper.

    Fields:
        - depths: queue depth per boundary kind
        - hour_strategy: calculator used for BoundaryKind.HOUR
        - poll_interval_ms: tick interval for poll_until_fire (1ms-1day);
          None derives it from the boundary period, see poll_interval_for()
    """

    depths: QueueDepths = Field(default_factory=QueueDepths)
    hour_strategy: HourStrategy = Field(default=HourStrategy.HOURLY)
    poll_interval_ms: Optional[int] = Field(
        default=None,
        ge=1,
        le=MAX_POLL_INTERVAL_MS,
        description='Polling interval in milliseconds',
    )

    def poll_interval_for(self, kind: BoundaryKind) -> int:
        """Configured interval, or a sixth of the boundary period."""
        if self.poll_interval_ms is not None:
            return self.poll_interval_ms
        return min(kind.period_ms // DEFAULT_POLLS_PER_PERIOD, MAX_POLL_INTERVAL_MS)

    def validate_for(self, kind: BoundaryKind) -> None:
        """Check these settings can drive a scheduler of the given kind."""
        report = ValidationReport('scheduler settings')
        if kind == BoundaryKind.HOUR and self.hour_strategy == HourStrategy.ROUNDED:
            report.add(
                ConfigurationError(
                    message='rounded hour strategy cannot drive a rolling scheduler',
                    code=ErrorCode.CONFIG_INVALID_HOUR_STRATEGY,
                    notes=[
                        'rounding returns the start of the current hour for minutes < 30,\n'
                        'so the queue tail never advances past an hour it already holds',
                    ],
                    help_text="use hour_strategy='hourly' or 'half_hourly'",
                )
            )
        if self.poll_interval_ms is not None and self.poll_interval_ms > kind.period_ms:
            report.add(
                ConfigurationError(
                    message=(
                        f'poll interval {self.poll_interval_ms}ms is longer than '
                        f'one {kind.value} ({kind.period_ms}ms)'
                    ),
                    code=ErrorCode.CONFIG_INVALID_POLL_INTERVAL,
                    notes=['each tick fires at most one boundary, so elapsed ones pile up'],
                    help_text=f'set poll_interval_ms <= {kind.period_ms}',
                )
            )
        raise_collected(report)
