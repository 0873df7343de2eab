# timebound/core/codec/military.py
"""
Military timestamps: 'YYYY/MM/DD/HH/mm' in UTC, minute granularity.

    encode(1686872700000)        -> '2023/06/15/23/45'
    decode('2023/06/15/23/45')   -> 1686872700000

Encoding drops seconds and milliseconds, so
decode(encode(x)) == floor_to_minute(x).
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from timebound.core.errors import ErrorCode, InvalidInputError, ParseError
from timebound.core.types.instant import Instant, as_instant, from_utc_datetime, to_utc_datetime

MilitaryTimestamp = str

FIELD_NAMES = ('year', 'month', 'day', 'hour', 'minute')
FIELD_WIDTHS = (4, 2, 2, 2, 2)
SEPARATOR = '/'

_DIGITS = re.compile(r'[0-9]+')


def encode(instant: Any) -> MilitaryTimestamp:
    """
    Format an instant as a UTC military timestamp.

    Raises:
        InvalidInputError: If instant is None, non-numeric, non-finite or out of range
    """
    if instant is None:
        raise InvalidInputError(
            message='cannot encode a missing instant',
            code=ErrorCode.INSTANT_NOT_NUMERIC,
            help_text='pass epoch milliseconds explicitly',
        )
    dt = to_utc_datetime(as_instant(instant))
    return f'{dt.year}/{dt.month:02d}/{dt.day:02d}/{dt.hour:02d}/{dt.minute:02d}'


def decode(text: Any) -> Instant:
    """
    Parse a UTC military timestamp back into epoch milliseconds.

    Raises:
        InvalidInputError: If text is not a string
        ParseError: Wrong field count, non-numeric or oversized field, or impossible date
    """
    if not isinstance(text, str):
        raise InvalidInputError(
            message=f'military timestamp must be a string, got {type(text).__name__}',
            code=ErrorCode.INSTANT_NOT_NUMERIC,
        )

    fields = text.split(SEPARATOR)
    if len(fields) != len(FIELD_NAMES):
        raise ParseError(
            message=f"expected {len(FIELD_NAMES)} '/'-separated fields, got {len(fields)}",
            code=ErrorCode.MILITARY_FIELD_COUNT,
            notes=[f'input: {text!r}'],
            help_text='format is YYYY/MM/DD/HH/mm, e.g. 2023/06/15/23/45',
        )

    bad = [
        f'{name}: {raw!r}'
        for name, raw in zip(FIELD_NAMES, fields)
        if not _DIGITS.fullmatch(raw)
    ]
    if bad:
        raise ParseError(
            message='military timestamp has non-numeric fields',
            code=ErrorCode.MILITARY_NOT_NUMERIC,
            notes=bad,
            help_text='every field must be ASCII digits only',
        )

    too_long = [
        f'{name}: {len(raw)} digits, at most {width}'
        for name, raw, width in zip(FIELD_NAMES, fields, FIELD_WIDTHS)
        if len(raw) > width
    ]
    if too_long:
        raise ParseError(
            message='military timestamp has oversized fields',
            code=ErrorCode.MILITARY_INVALID_DATE,
            notes=too_long,
            help_text='format is YYYY/MM/DD/HH/mm, e.g. 2023/06/15/23/45',
        )

    try:
        year, month, day, hour, minute = (int(raw) for raw in fields)
        dt = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    except (ValueError, OverflowError) as e:
        raise ParseError(
            message=f'military timestamp is not a valid UTC minute: {e}',
            code=ErrorCode.MILITARY_INVALID_DATE,
            notes=[f'input: {text!r}'],
        ) from e
    return from_utc_datetime(dt)
