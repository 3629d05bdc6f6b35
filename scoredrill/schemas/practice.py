"""Pydantic models for the practice workflow endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from scoredrill.core.srs.models import Outcome, ReadinessLevel
from scoredrill.schemas.spot import SpotRead


class QueueResponse(BaseModel):
    """Ranked spots due at ``now``."""

    now: datetime
    total_due: int
    items: list[SpotRead]


class NextSpotResponse(BaseModel):
    """Head of the queue, or ``nothing_due`` when the queue is empty."""

    nothing_due: bool
    spot: SpotRead | None = None
    queue_size: int = 0


class ReviewRequest(BaseModel):
    """Outcome of one practice attempt on a spot."""

    spot_id: str = Field(..., min_length=1)
    outcome: Outcome
    updated_at: datetime = Field(..., description="Token of the spot version that was practised")
    practice_time_minutes: int | None = Field(None, ge=0)
    notes: str | None = None


class ReviewResponse(BaseModel):
    """Updated spot after a committed review."""

    spot: SpotRead
    outcome: Outcome
    previous_level: ReadinessLevel
    previous_interval: int
    next_review_in_days: int
    level_changed: bool

    model_config = ConfigDict(from_attributes=True)


class PracticeSummary(BaseModel):
    """Aggregate progress metrics."""

    piece_id: str | None = None
    total_spots: int
    due_now: int
    due_upcoming: int
    upcoming_days: int
    level_counts: dict[str, int]
    priority_counts: dict[str, int]
    color_counts: dict[str, int]
    practice_count: int
    success_count: int
    success_rate: float
    recent_performance: float | None = None


class SpotChangedRead(BaseModel):
    """Notification that a spot changed and queues should be rebuilt."""

    version: int
    spot_id: str
    piece_id: str
    reason: str
    at: datetime

    model_config = ConfigDict(from_attributes=True)


class EventsResponse(BaseModel):
    """Polling response for queue change notifications."""

    version: int
    events: list[SpotChangedRead]
