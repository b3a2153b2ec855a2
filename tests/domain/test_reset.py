"""Tests for the calendar reset policy."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from docnum.domain.reset import apply_reset, should_reset
from docnum.domain.types import CounterState, ResetFrequency, SequenceConfig

NOW = datetime(2024, 6, 15, 10, 0, tzinfo=UTC)


def _check(frequency: ResetFrequency, last: datetime | None, now: datetime = NOW) -> bool:
    config = SequenceConfig(reset_frequency=frequency)
    counter = CounterState(last_number=5, last_reset_date=last, reset_frequency=frequency)
    return should_reset(counter, config, now)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=UTC)


@pytest.mark.parametrize("last", [None, _utc(1999, 1, 1)])
def test_never_resets(last: datetime | None) -> None:
    assert _check(ResetFrequency.NEVER, last) is False


@pytest.mark.parametrize(
    "frequency", [ResetFrequency.YEARLY, ResetFrequency.MONTHLY, ResetFrequency.DAILY]
)
def test_unset_reset_date_triggers(frequency: ResetFrequency) -> None:
    assert _check(frequency, None) is True


@pytest.mark.parametrize(
    "frequency,last,now,expected",
    [
        (ResetFrequency.YEARLY, _utc(2023, 12, 31, 23), _utc(2024, 1, 1), True),
        (ResetFrequency.YEARLY, _utc(2024, 1, 1), _utc(2024, 12, 31), False),
        (ResetFrequency.MONTHLY, _utc(2024, 5, 31), _utc(2024, 6, 1), True),
        (ResetFrequency.MONTHLY, _utc(2024, 6, 1), _utc(2024, 6, 30), False),
        (ResetFrequency.MONTHLY, _utc(2023, 6, 20), _utc(2024, 6, 1), True),
        (ResetFrequency.DAILY, _utc(2024, 6, 15, 0, 1), _utc(2024, 6, 15, 23, 59), False),
        (ResetFrequency.DAILY, _utc(2024, 6, 14, 23, 59), _utc(2024, 6, 15), True),
    ],
)
def test_boundaries(
    frequency: ResetFrequency, last: datetime, now: datetime, expected: bool
) -> None:
    assert _check(frequency, last, now) is expected


def test_config_frequency_is_authoritative() -> None:
    """A counter written under 'never' still resets once the config says monthly."""
    config = SequenceConfig(reset_frequency=ResetFrequency.MONTHLY)
    counter = CounterState(
        last_number=9, last_reset_date=_utc(2024, 5, 1), reset_frequency=ResetFrequency.NEVER
    )
    assert should_reset(counter, config, NOW) is True


def test_aware_dates_compared_in_now_timezone() -> None:
    # 00:30 on June 1st at +02:00 is still May 31st in UTC.
    last = datetime(2024, 6, 1, 0, 30, tzinfo=timezone(timedelta(hours=2)))
    assert _check(ResetFrequency.MONTHLY, last, _utc(2024, 6, 1, 10)) is True


def test_apply_reset() -> None:
    config = SequenceConfig(starting_number=100, reset_frequency=ResetFrequency.YEARLY)
    counter = apply_reset(config, NOW)
    assert counter.last_number == 99
    assert counter.last_reset_date == NOW
    assert counter.reset_frequency == ResetFrequency.YEARLY
