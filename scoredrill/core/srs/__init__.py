"""Spaced-repetition core: spot model, scheduler and due queue."""

from scoredrill.core.srs.models import (
    Outcome,
    Priority,
    ReadinessLevel,
    Spot,
    SpotColor,
    deactivate_spot,
    edit_spot,
    new_spot,
)
from scoredrill.core.srs.queue import DueQueue, DueQueueBuilder
from scoredrill.core.srs.scheduler import SchedulingEngine, next_level

__all__ = [
    "DueQueue",
    "DueQueueBuilder",
    "Outcome",
    "Priority",
    "ReadinessLevel",
    "SchedulingEngine",
    "Spot",
    "SpotColor",
    "deactivate_spot",
    "edit_spot",
    "new_spot",
    "next_level",
]
