"""timebound - next time-boundary arithmetic and a rolling boundary scheduler"""

# Install Rust-style error handler on import
from .core.errors import install_error_handler as _install_error_handler

_install_error_handler()

from .core.clock import Clock, ManualClock, SystemClock
from .core.codec.military import MilitaryTimestamp, decode, encode
from .core.errors import (
    ConfigurationError,
    ErrorCode,
    InvalidInputError,
    MultipleValidationErrors,
    ParseError,
    PollCancelledError,
    PollTimeoutError,
    TimeboundError,
    ValidationReport,
)
from .core.models.settings import (
    BoundaryKind,
    HourStrategy,
    QueueDepths,
    SchedulerSettings,
)
from .core.scheduler import (
    IntervalTrigger,
    ManualIntervalTrigger,
    PollHandle,
    RollingScheduler,
    ThreadingIntervalTrigger,
    floor_to_minute,
    half_hourly_boundary,
    hourly_boundary,
    next_boundary,
    next_day_start,
    next_hour_boundary,
    next_minute_start,
    next_second_start,
    poll_until_fire,
    wait_for_boundary,
)
from .core.types.instant import Instant

__all__ = [
    # Calculator
    'Instant',
    'next_day_start',
    'next_hour_boundary',
    'hourly_boundary',
    'half_hourly_boundary',
    'next_minute_start',
    'next_second_start',
    'next_boundary',
    'floor_to_minute',
    # Military codec
    'MilitaryTimestamp',
    'encode',
    'decode',
    # Scheduling
    'BoundaryKind',
    'HourStrategy',
    'QueueDepths',
    'SchedulerSettings',
    'RollingScheduler',
    'PollHandle',
    'poll_until_fire',
    'wait_for_boundary',
    # Collaborators
    'Clock',
    'SystemClock',
    'ManualClock',
    'IntervalTrigger',
    'ThreadingIntervalTrigger',
    'ManualIntervalTrigger',
    # Errors
    'TimeboundError',
    'InvalidInputError',
    'ParseError',
    'ConfigurationError',
    'PollCancelledError',
    'PollTimeoutError',
    'ErrorCode',
    'ValidationReport',
    'MultipleValidationErrors',
]
