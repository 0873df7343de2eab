"""Tests for clock implementations."""

from __future__ import annotations

import time

import pytest

from timebound.core.clock import ManualClock, SystemClock, system_clock

pytestmark = pytest.mark.unit


class TestSystemClock:
    def test_tracks_wall_clock(self) -> None:
        before = int(time.time() * 1000)
        now = SystemClock().now_ms()
        after = int(time.time() * 1000)

        assert before - 1 <= now <= after + 1
        assert isinstance(now, int)

    def test_shared_instance(self) -> None:
        assert system_clock() is system_clock()


class TestManualClock:
    def test_starts_where_told(self) -> None:
        assert ManualClock(1234).now_ms() == 1234
        assert ManualClock().now_ms() == 0

    def test_set_and_advance(self) -> None:
        clock = ManualClock(1000)

        clock.set(5000)
        assert clock.now_ms() == 5000

        assert clock.advance(250) == 5250
        assert clock.now_ms() == 5250
