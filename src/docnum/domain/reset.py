"""Calendar reset policy.

Resets are lazy: the policy is evaluated only when a number is generated.
A type that is not requested during a period keeps a stale
``last_reset_date`` until its next use, which then applies exactly one reset.
"""

from __future__ import annotations

from datetime import datetime

from docnum.domain.types import CounterState, ResetFrequency, SequenceConfig


def _align(last: datetime, now: datetime) -> datetime:
    """Express *last* in *now*'s timezone when both are aware."""
    if last.tzinfo is not None and now.tzinfo is not None:
        return last.astimezone(now.tzinfo)
    return last


def should_reset(counter: CounterState, config: SequenceConfig, now: datetime) -> bool:
    """Whether *counter* must rewind before the next number is issued."""
    frequency = config.reset_frequency
    if frequency == ResetFrequency.NEVER:
        return False

    if counter.last_reset_date is None:
        return True

    last = _align(counter.last_reset_date, now)

    if frequency == ResetFrequency.YEARLY:
        return last.year < now.year
    if frequency == ResetFrequency.MONTHLY:
        return (last.year, last.month) < (now.year, now.month)
    if frequency == ResetFrequency.DAILY:
        return last.date() != now.date()
    return False


def apply_reset(config: SequenceConfig, now: datetime) -> CounterState:
    """Counter state immediately after a reset at *now*."""
    return CounterState(
        last_number=config.starting_number - 1,
        last_reset_date=now,
        reset_frequency=config.reset_frequency,
    )
