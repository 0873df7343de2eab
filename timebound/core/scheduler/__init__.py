# timebound/core/scheduler/__init__.py
"""
Boundary calculation and rolling-queue scheduling.

Main components:
- calculator: next day/hour/minute/second boundary after an instant
- RollingScheduler: queue of upcoming boundaries for one kind, fired by tick()
- poll_until_fire / wait_for_boundary: wait for the next boundary once

Example usage:
    from timebound.core.scheduler import RollingScheduler, poll_until_fire

    handle = poll_until_fire(RollingScheduler('minute'), 10_000, print)
    handle.wait()
"""

from timebound.core.scheduler.calculator import (
    calculator_for,
    floor_to_minute,
    half_hourly_boundary,
    hourly_boundary,
    is_elapsed,
    next_boundary,
    next_day_start,
    next_hour_boundary,
    next_minute_start,
    next_second_start,
)
from timebound.core.scheduler.rolling import RollingScheduler
from timebound.core.scheduler.poller import PollHandle, poll_until_fire, wait_for_boundary
from timebound.core.scheduler.triggers import (
    IntervalTrigger,
    ManualIntervalTrigger,
    ThreadingIntervalTrigger,
)

__all__ = [
    'calculator_for',
    'floor_to_minute',
    'half_hourly_boundary',
    'hourly_boundary',
    'is_elapsed',
    'next_boundary',
    'next_day_start',
    'next_hour_boundary',
    'next_minute_start',
    'next_second_start',
    'RollingScheduler',
    'PollHandle',
    'poll_until_fire',
    'wait_for_boundary',
    'IntervalTrigger',
    'ManualIntervalTrigger',
    'ThreadingIntervalTrigger',
]
