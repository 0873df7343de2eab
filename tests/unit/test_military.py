"""Tests for the military timestamp codec."""

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from timebound.core.codec.military import decode, encode
from timebound.core.errors import ErrorCode, InvalidInputError, ParseError
from timebound.core.scheduler.calculator import floor_to_minute

pytestmark = pytest.mark.unit

# 2023-06-15T23:45:00Z
JUNE_15_2345 = 1_686_872_700_000


class TestEncode:
    """Tests for encode()."""

    def test_formats_utc_fields(self) -> None:
        assert encode(JUNE_15_2345) == '2023/06/15/23/45'

    def test_pads_month_day_hour_minute(self) -> None:
        dt = datetime(2024, 1, 2, 3, 4, 59, tzinfo=timezone.utc)

        assert encode(int(dt.timestamp() * 1000)) == '2024/01/02/03/04'

    def test_epoch(self) -> None:
        assert encode(0) == '1970/01/01/00/00'

    def test_negative_instant(self) -> None:
        assert encode(-1) == '1969/12/31/23/59'

    def test_year_is_not_padded(self) -> None:
        dt = datetime(999, 5, 6, 7, 8, tzinfo=timezone.utc)
        instant = int((dt - datetime(1970, 1, 1, tzinfo=timezone.utc)).total_seconds()) * 1000

        assert encode(instant) == '999/05/06/07/08'

    @pytest.mark.parametrize('value', [math.nan, math.inf, None, 'now', 10**20])
    def test_rejects_unusable_input(self, value: object) -> None:
        with pytest.raises(InvalidInputError):
            encode(value)


class TestDecode:
    """Tests for decode()."""

    def test_parses_utc_minute(self) -> None:
        assert decode('2023/06/15/23/45') == JUNE_15_2345

    def test_accepts_unpadded_fields(self) -> None:
        assert decode('2023/6/15/23/45') == JUNE_15_2345

    @pytest.mark.parametrize(
        'text',
        ['2023/06/15/23', '2023/06/15/23/45/00', '', '2023-06-15T23:45'],
    )
    def test_wrong_field_count(self, text: str) -> None:
        with pytest.raises(ParseError) as exc_info:
            decode(text)

        assert exc_info.value.code == ErrorCode.MILITARY_FIELD_COUNT

    @pytest.mark.parametrize(
        'text',
        ['2023/06/xx/23/45', '2023/06/15/23/', '2023/-6/15/23/45', '2023/06/15/23/45 '],
    )
    def test_non_numeric_field(self, text: str) -> None:
        with pytest.raises(ParseError) as exc_info:
            decode(text)

        assert exc_info.value.code == ErrorCode.MILITARY_NOT_NUMERIC

    def test_non_numeric_fields_are_all_listed(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            decode('yyyy/06/dd/23/45')

        assert len(exc_info.value.notes) == 2
        assert 'year' in exc_info.value.notes[0]
        assert 'day' in exc_info.value.notes[1]

    @pytest.mark.parametrize(
        'text',
        [
            '2023/13/01/00/00',
            '2023/02/30/00/00',
            '2023/06/15/24/00',
            '2023/06/15/23/60',
            '0/01/01/00/00',
            '99999999999/06/15/10/10',
            '2023/06/15/10/' + '1' * 5000,
            '12023/06/15/10/10',
            '2023/006/15/10/10',
        ],
    )
    def test_impossible_calendar_values(self, text: str) -> None:
        with pytest.raises(ParseError) as exc_info:
            decode(text)

        assert exc_info.value.code == ErrorCode.MILITARY_INVALID_DATE

    def test_oversized_fields_are_all_listed(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            decode('99999/06/15/100/10')

        assert exc_info.value.notes == [
            'year: 5 digits, at most 4',
            'hour: 3 digits, at most 2',
        ]

    def test_short_fields_accepted(self) -> None:
        assert decode('2023/6/15/23/45') == decode('2023/06/15/23/45')

    def test_non_string_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            decode(JUNE_15_2345)


class TestRoundTrip:
    """decode(encode(x)) truncates x to the minute."""

    @pytest.mark.parametrize(
        'instant',
        [0, -1, 59_999, JUNE_15_2345 + 59_999, 1_709_251_199_999, -62_135_596_800_000],
    )
    def test_round_trip_truncates_to_minute(self, instant: int) -> None:
        assert decode(encode(instant)) == floor_to_minute(instant)
