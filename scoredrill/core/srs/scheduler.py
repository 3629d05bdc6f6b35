"""Readiness-level scheduler for practice spots.

Each practice attempt moves a spot along the readiness state machine and
recomputes its review interval from the *new* level:

* ``failed`` resets the interval to zero and makes the spot due immediately.
* ``struggled`` grows the interval by 1.2x (floored), capped at a week while
  the spot is below ``young``.
* ``good`` doubles the interval (2.5x once mastered).
* ``excellent`` multiplies it by 2.5 (3x once mastered).

Every interval is capped at the configured maximum. Multipliers are kept as
exact fractions so rounding never depends on binary floating point, and
``round`` means half-up.
"""
from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta
from fractions import Fraction

from scoredrill.core.srs.models import (
    Outcome,
    ReadinessLevel,
    Spot,
    coerce_enum,
    ensure_utc,
    utcnow,
)
from scoredrill.utils.exceptions import ValidationError

DEFAULT_MAXIMUM_INTERVAL_DAYS = 180
DEFAULT_LEARNING_INTERVAL_CAP_DAYS = 7

_NEW = ReadinessLevel.NEW
_LEARNING = ReadinessLevel.LEARNING
_YOUNG = ReadinessLevel.YOUNG
_MASTERED = ReadinessLevel.MASTERED

TRANSITIONS: dict[ReadinessLevel, dict[Outcome, ReadinessLevel]] = {
    _NEW: {
        Outcome.FAILED: _NEW,
        Outcome.STRUGGLED: _LEARNING,
        Outcome.GOOD: _LEARNING,
        Outcome.EXCELLENT: _YOUNG,
    },
    _LEARNING: {
        Outcome.FAILED: _NEW,
        Outcome.STRUGGLED: _LEARNING,
        Outcome.GOOD: _YOUNG,
        Outcome.EXCELLENT: _YOUNG,
    },
    _YOUNG: {
        Outcome.FAILED: _LEARNING,
        Outcome.STRUGGLED: _LEARNING,
        Outcome.GOOD: _YOUNG,
        Outcome.EXCELLENT: _MASTERED,
    },
    _MASTERED: {
        Outcome.FAILED: _LEARNING,
        Outcome.STRUGGLED: _YOUNG,
        Outcome.GOOD: _MASTERED,
        Outcome.EXCELLENT: _MASTERED,
    },
}

# (multiplier below mastered, multiplier at mastered)
_GROWTH: dict[Outcome, tuple[Fraction, Fraction]] = {
    Outcome.GOOD: (Fraction(2), Fraction(5, 2)),
    Outcome.EXCELLENT: (Fraction(5, 2), Fraction(3)),
}
_STRUGGLED_GROWTH = Fraction(6, 5)


def next_level(level: ReadinessLevel, outcome: Outcome) -> ReadinessLevel:
    """Return the readiness level reached from ``level`` after ``outcome``."""

    return TRANSITIONS[level][outcome]


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


class SchedulingEngine:
    """Pure scheduler turning (spot, outcome) into the next spot state."""

    def __init__(
        self,
        *,
        maximum_interval_days: int = DEFAULT_MAXIMUM_INTERVAL_DAYS,
        learning_interval_cap_days: int = DEFAULT_LEARNING_INTERVAL_CAP_DAYS,
    ) -> None:
        if maximum_interval_days < 1 or learning_interval_cap_days < 1:
            raise ValueError("Interval caps must be at least one day")
        self.maximum_interval_days = maximum_interval_days
        self.learning_interval_cap_days = learning_interval_cap_days

    def next_interval(self, interval: int, outcome: Outcome, level: ReadinessLevel) -> int:
        """Return the interval in days for ``outcome`` given the new ``level``."""

        if outcome is Outcome.FAILED:
            return 0
        if outcome is Outcome.STRUGGLED:
            days = max(1, math.floor(interval * _STRUGGLED_GROWTH))
            if level.rank < _YOUNG.rank:
                days = min(days, self.learning_interval_cap_days)
        else:
            below, mastered = _GROWTH[outcome]
            factor = mastered if level is _MASTERED else below
            # A zero interval at mastered would mean "due now" after a success.
            days = max(1, _round_half_up(interval * factor))
        return min(days, self.maximum_interval_days)

    def update(self, spot: Spot, outcome: Outcome | str, now: datetime | None = None) -> Spot:
        """Return the spot after one practice attempt with ``outcome``."""

        if not isinstance(spot, Spot):
            raise ValidationError("Expected a Spot", details={"type": type(spot).__name__})
        spot.validate()
        outcome = coerce_enum(Outcome, outcome, "outcome")
        now = ensure_utc(now) or utcnow()

        level = next_level(spot.readiness_level, outcome)
        interval = self.next_interval(spot.interval, outcome, level)
        next_due = now if outcome is Outcome.FAILED else now + timedelta(days=interval)

        return replace(
            spot,
            readiness_level=level,
            interval=interval,
            next_due=next_due,
            practice_count=spot.practice_count + 1,
            success_count=spot.success_count + (1 if outcome.is_success else 0),
            updated_at=now,
            last_practiced_at=now,
            last_outcome=outcome,
        )


default_engine = SchedulingEngine()
