# timebound/core/types/instant.py
"""Instant: integer milliseconds since the Unix epoch, plus input validation."""

from __future__ import annotations

import math
import numbers
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from timebound.core.clock import Clock, system_clock
from timebound.core.errors import ErrorCode, InvalidInputError

Instant = int

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

# 0001-01-01T00:00:00.000Z .. 9999-12-31T23:59:59.999Z
MIN_INSTANT: Instant = -62_135_596_800_000
MAX_INSTANT: Instant = 253_402_300_799_999


def as_instant(value: Any, *, clock: Optional[Clock] = None) -> Instant:
    """
    Validate and normalize a reference instant.

    None means "now" according to ``clock`` (system clock by default).
    Integers pass through; finite reals are floored to whole milliseconds.

    Raises:
        InvalidInputError: bool, non-numeric, NaN/inf, or outside year 1..9999
    """
    if value is None:
        return (clock or system_clock()).now_ms()

    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(
            message=f'instant must be epoch milliseconds, got {type(value).__name__}',
            code=ErrorCode.INSTANT_NOT_NUMERIC,
            notes=[f'value: {value!r}'],
            help_text='pass an int (milliseconds since 1970-01-01T00:00Z) or None for now',
        )

    if not isinstance(value, numbers.Integral):
        if not math.isfinite(value):
            raise InvalidInputError(
                message=f'instant must be finite, got {value!r}',
                code=ErrorCode.INSTANT_NOT_FINITE,
            )
        value = math.floor(value)

    instant = int(value)
    if not MIN_INSTANT <= instant <= MAX_INSTANT:
        raise out_of_range(instant)
    return instant


def out_of_range(instant: Instant) -> InvalidInputError:
    return InvalidInputError(
        message=f'instant {instant} is outside the supported calendar range',
        code=ErrorCode.INSTANT_OUT_OF_RANGE,
        notes=[f'supported range: {MIN_INSTANT} .. {MAX_INSTANT} (years 1-9999)'],
    )


def to_utc_datetime(instant: Instant) -> datetime:
    """UTC-aware datetime for an already validated instant."""
    return _EPOCH + timedelta(milliseconds=instant)


def from_utc_datetime(dt: datetime) -> Instant:
    """Epoch milliseconds for a timezone-aware datetime."""
    if dt.tzinfo is None:
        raise ValueError('dt must be timezone-aware')
    return (dt - _EPOCH) // _ONE_MS
