"""Display strings for the review-state enums.

The scheduling code only ever compares enum members; presentation layers look
labels up here.
"""
from __future__ import annotations

from enum import Enum

from scoredrill.core.srs.models import Outcome, Priority, ReadinessLevel, SpotColor

PRIORITY_LABELS: dict[Priority, str] = {
    Priority.LOW: "Low",
    Priority.MEDIUM: "Medium",
    Priority.HIGH: "High",
    Priority.CRITICAL: "Critical",
}

READINESS_LABELS: dict[ReadinessLevel, str] = {
    ReadinessLevel.NEW: "New",
    ReadinessLevel.LEARNING: "Learning",
    ReadinessLevel.YOUNG: "Young",
    ReadinessLevel.MASTERED: "Mastered",
}

COLOR_LABELS: dict[SpotColor, str] = {
    SpotColor.RED: "Critical",
    SpotColor.YELLOW: "Practice",
    SpotColor.GREEN: "Maintenance",
    SpotColor.BLUE: "Solved",
}

OUTCOME_LABELS: dict[Outcome, str] = {
    Outcome.FAILED: "Failed",
    Outcome.STRUGGLED: "Struggled",
    Outcome.GOOD: "Good",
    Outcome.EXCELLENT: "Excellent",
}

_TABLES: dict[type[Enum], dict] = {
    Priority: PRIORITY_LABELS,
    ReadinessLevel: READINESS_LABELS,
    SpotColor: COLOR_LABELS,
    Outcome: OUTCOME_LABELS,
}


def display_label(member: Enum) -> str:
    """Return the display string for any review-state enum member."""

    return _TABLES[type(member)][member]


def label_tables() -> dict[str, dict[str, str]]:
    """Return every table keyed by stable tag, for serialisation."""

    return {
        "priority": {member.value: label for member, label in PRIORITY_LABELS.items()},
        "readiness_level": {member.value: label for member, label in READINESS_LABELS.items()},
        "color": {member.value: label for member, label in COLOR_LABELS.items()},
        "outcome": {member.value: label for member, label in OUTCOME_LABELS.items()},
    }
