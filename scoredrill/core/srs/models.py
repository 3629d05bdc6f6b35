"""Practice spot value objects and review-state enums.

A :class:`Spot` is one rectangle on one page of a piece, tracked for spaced
repetition review. Instances are immutable; every change produces a new value
through :func:`dataclasses.replace`, which re-runs validation, so an invalid
spot can never be observed.
"""
from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from scoredrill.utils.exceptions import ValidationError


class Priority(str, Enum):
    """User-assigned urgency, independent of review state."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


class ReadinessLevel(str, Enum):
    """Spaced-repetition maturity stage of a spot."""

    NEW = "new"
    LEARNING = "learning"
    YOUNG = "young"
    MASTERED = "mastered"

    @property
    def rank(self) -> int:
        return _READINESS_RANK[self]


class SpotColor(str, Enum):
    """Difficulty tag chosen by the musician. Not derived from readiness."""

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"


class Outcome(str, Enum):
    """Quality of one practice attempt, ordered worst to best."""

    FAILED = "failed"
    STRUGGLED = "struggled"
    GOOD = "good"
    EXCELLENT = "excellent"

    @property
    def rank(self) -> int:
        return _OUTCOME_RANK[self]

    @property
    def is_success(self) -> bool:
        return self in (Outcome.GOOD, Outcome.EXCELLENT)


_PRIORITY_RANK = {priority: index for index, priority in enumerate(Priority)}
_READINESS_RANK = {level: index for index, level in enumerate(ReadinessLevel)}
_OUTCOME_RANK = {outcome: index for index, outcome in enumerate(Outcome)}

EDITABLE_FIELDS = frozenset({"title", "description", "notes", "priority", "color"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes and normalise aware ones to UTC."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_enum(enum_cls: type[Enum], value: Any, field: str) -> Any:
    """Return ``value`` as a member of ``enum_cls`` or raise ``ValidationError``."""

    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = [member.value for member in enum_cls]
        raise ValidationError(
            f"Invalid {field}: {value!r}",
            details={"field": field, "allowed": allowed},
        ) from exc


@dataclass(frozen=True, slots=True)
class Spot:
    """One annotated rectangle of a score page with its review state."""

    id: str
    piece_id: str
    page_number: int
    x: float
    y: float
    width: float
    height: float
    created_at: datetime
    updated_at: datetime
    title: str = ""
    description: str | None = None
    notes: str | None = None
    priority: Priority = Priority.MEDIUM
    readiness_level: ReadinessLevel = ReadinessLevel.NEW
    color: SpotColor = SpotColor.RED
    practice_count: int = 0
    success_count: int = 0
    interval: int = 0
    next_due: datetime | None = None
    is_active: bool = True
    last_practiced_at: datetime | None = None
    last_outcome: Outcome | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "priority", coerce_enum(Priority, self.priority, "priority"))
        object.__setattr__(
            self,
            "readiness_level",
            coerce_enum(ReadinessLevel, self.readiness_level, "readiness_level"),
        )
        object.__setattr__(self, "color", coerce_enum(SpotColor, self.color, "color"))
        if self.last_outcome is not None:
            object.__setattr__(
                self, "last_outcome", coerce_enum(Outcome, self.last_outcome, "last_outcome")
            )
        for name in ("created_at", "updated_at", "next_due", "last_practiced_at"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, datetime):
                raise ValidationError(
                    f"{name} must be a datetime", details={"field": name, "value": repr(value)}
                )
            object.__setattr__(self, name, ensure_utc(value))
        self.validate()

    def validate(self) -> None:
        """Raise ``ValidationError`` when any spot invariant is violated."""

        if not self.id:
            raise ValidationError("Spot id must not be empty", details={"field": "id"})
        if not self.piece_id:
            raise ValidationError("Spot piece_id must not be empty", details={"field": "piece_id"})
        if isinstance(self.page_number, bool) or not isinstance(self.page_number, int):
            raise ValidationError("Page number must be an integer", details={"field": "page_number"})
        if self.page_number < 1:
            raise ValidationError(
                "Page number must be 1 or greater",
                details={"field": "page_number", "value": self.page_number},
            )

        coords = {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
        for name, value in coords.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValidationError(
                    f"Coordinate {name} must be a finite number", details={"field": name}
                )
        if self.width <= 0 or self.height <= 0:
            raise ValidationError("Spot rectangle is degenerate", details=coords)
        if self.x < 0 or self.y < 0 or self.x + self.width > 1 or self.y + self.height > 1:
            raise ValidationError("Spot rectangle leaves the unit square", details=coords)

        counters = {
            "practice_count": self.practice_count,
            "success_count": self.success_count,
            "interval": self.interval,
        }
        for name, value in counters.items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError(
                    f"{name} must be a non-negative integer", details={"field": name, "value": value}
                )
        if self.success_count > self.practice_count:
            raise ValidationError(
                "success_count cannot exceed practice_count",
                details={
                    "practice_count": self.practice_count,
                    "success_count": self.success_count,
                },
            )
        if self.created_at is None or self.updated_at is None:
            raise ValidationError("Spot timestamps are required")
        if not isinstance(self.is_active, bool):
            raise ValidationError(
                "is_active must be a boolean", details={"field": "is_active", "value": repr(self.is_active)}
            )

    @property
    def success_rate(self) -> float:
        if self.practice_count == 0:
            return 0.0
        return self.success_count / self.practice_count

    def is_due(self, now: datetime) -> bool:
        """Return True if the spot is active and due at ``now``."""

        if not self.is_active:
            return False
        return self.next_due is None or self.next_due <= ensure_utc(now)


def new_spot(
    *,
    piece_id: str,
    page_number: int,
    x: float,
    y: float,
    width: float,
    height: float,
    title: str = "",
    description: str | None = None,
    notes: str | None = None,
    priority: Priority | str = Priority.MEDIUM,
    color: SpotColor | str = SpotColor.RED,
    spot_id: str | None = None,
    now: datetime | None = None,
) -> Spot:
    """Build a spot in its initial lifecycle state (new, never practised, due now)."""

    now = ensure_utc(now) or utcnow()
    return Spot(
        id=spot_id or uuid.uuid4().hex,
        piece_id=piece_id,
        page_number=page_number,
        x=x,
        y=y,
        width=width,
        height=height,
        title=title,
        description=description,
        notes=notes,
        priority=priority,
        color=color,
        created_at=now,
        updated_at=now,
    )


def edit_spot(spot: Spot, *, now: datetime | None = None, **changes: Any) -> Spot:
    """Apply an explicit user edit. Review-state fields cannot be edited."""

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            "Only descriptive fields can be edited",
            details={"fields": sorted(unknown), "allowed": sorted(EDITABLE_FIELDS)},
        )
    if not changes:
        return spot
    return replace(spot, updated_at=ensure_utc(now) or utcnow(), **changes)


def deactivate_spot(spot: Spot, *, now: datetime | None = None) -> Spot:
    """Return the soft-deleted copy of ``spot``; history is retained."""

    return replace(spot, is_active=False, updated_at=ensure_utc(now) or utcnow())


def days_until(moment: datetime | None, now: datetime) -> int:
    """Whole days from ``now`` until ``moment`` (0 when already due)."""

    if moment is None:
        return 0
    delta: timedelta = ensure_utc(moment) - ensure_utc(now)
    return max(0, delta.days)
