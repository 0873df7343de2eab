"""Tests for scheduler settings models, validators and defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from timebound.core.errors import (
    ConfigurationError,
    ErrorCode,
    InvalidInputError,
    MultipleValidationErrors,
)
from timebound.core.models.settings import (
    BoundaryKind,
    HourStrategy,
    QueueDepths,
    SchedulerSettings,
)


@pytest.mark.unit
class TestBoundaryKind:
    """Tests for BoundaryKind."""

    def test_values(self) -> None:
        assert [k.value for k in BoundaryKind] == ['day', 'hour', 'minute', 'second']

    @pytest.mark.parametrize(
        ('kind', 'period'),
        [
            (BoundaryKind.DAY, 86_400_000),
            (BoundaryKind.HOUR, 3_600_000),
            (BoundaryKind.MINUTE, 60_000),
            (BoundaryKind.SECOND, 1_000),
        ],
    )
    def test_period_ms(self, kind: BoundaryKind, period: int) -> None:
        assert kind.period_ms == period


@pytest.mark.unit
class TestQueueDepths:
    """Tests for QueueDepths model."""

    def test_defaults(self) -> None:
        depths = QueueDepths()

        assert (depths.day, depths.hour, depths.minute, depths.second) == (7, 24, 60, 60)

    def test_for_kind_accepts_strings(self) -> None:
        depths = QueueDepths(minute=3)

        assert depths.for_kind(BoundaryKind.MINUTE) == 3
        assert depths.for_kind('hour') == 24  # type: ignore[arg-type]

    @pytest.mark.parametrize('depth', [0, -1, 10_001])
    def test_depth_bounds(self, depth: int) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            QueueDepths(minute=depth)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_DEPTH
        assert f'minute queue depth {depth}' in exc_info.value.message

    @pytest.mark.parametrize('depth', [1, 10_000])
    def test_depth_bounds_inclusive(self, depth: int) -> None:
        assert QueueDepths(second=depth).second == depth

    def test_every_bad_depth_reported(self) -> None:
        with pytest.raises(MultipleValidationErrors) as exc_info:
            QueueDepths(day=0, second=20_000)

        errors = exc_info.value.report.errors
        assert [e.code for e in errors] == [ErrorCode.CONFIG_INVALID_DEPTH] * 2
        assert 'day' in errors[0].message
        assert 'second' in errors[1].message

    def test_non_integer_depth_is_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            QueueDepths(hour='lots')  # type: ignore[arg-type]

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            QueueDepths().for_kind('week')  # type: ignore[arg-type]

        assert exc_info.value.code == ErrorCode.UNKNOWN_BOUNDARY_KIND


@pytest.mark.unit
class TestSchedulerSettings:
    """Tests for SchedulerSettings model."""

    def test_defaults(self) -> None:
        settings = SchedulerSettings()

        assert settings.hour_strategy == HourStrategy.HOURLY
        assert settings.poll_interval_ms is None
        assert settings.depths == QueueDepths()

    def test_strategy_from_string(self) -> None:
        assert SchedulerSettings(hour_strategy='half_hourly').hour_strategy == (
            HourStrategy.HALF_HOURLY
        )

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SchedulerSettings(hour_strategy='quarterly')

    @pytest.mark.parametrize('interval', [0, 86_400_001])
    def test_poll_interval_bounds(self, interval: int) -> None:
        with pytest.raises(ValidationError):
            SchedulerSettings(poll_interval_ms=interval)

    @pytest.mark.parametrize(
        ('kind', 'expected'),
        [
            (BoundaryKind.SECOND, 166),
            (BoundaryKind.MINUTE, 10_000),
            (BoundaryKind.HOUR, 600_000),
            (BoundaryKind.DAY, 14_400_000),
        ],
    )
    def test_derived_poll_interval(self, kind: BoundaryKind, expected: int) -> None:
        assert SchedulerSettings().poll_interval_for(kind) == expected

    def test_explicit_poll_interval_wins(self) -> None:
        assert SchedulerSettings(poll_interval_ms=42).poll_interval_for(BoundaryKind.DAY) == 42

    def test_validate_for_rejects_rounded_hours(self) -> None:
        settings = SchedulerSettings(hour_strategy=HourStrategy.ROUNDED)

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_for(BoundaryKind.HOUR)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_HOUR_STRATEGY
        assert exc_info.value.help_text is not None

    def test_validate_for_rejects_slow_polling(self) -> None:
        settings = SchedulerSettings(poll_interval_ms=1_001)

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate_for(BoundaryKind.SECOND)

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_POLL_INTERVAL

    def test_validate_for_accepts_valid(self) -> None:
        settings = SchedulerSettings(poll_interval_ms=1_000)

        for kind in BoundaryKind:
            settings.validate_for(kind)
