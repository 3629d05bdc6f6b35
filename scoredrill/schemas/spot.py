"""Pydantic models for spot endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scoredrill.core.srs.models import Outcome, Priority, ReadinessLevel, SpotColor


class SpotCreate(BaseModel):
    """Payload for marking a new practice spot."""

    piece_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field("", max_length=255)
    description: Optional[str] = None
    notes: Optional[str] = None
    page_number: int = Field(..., ge=1)
    x: float = Field(..., ge=0.0, le=1.0, description="Left edge, relative to page width")
    y: float = Field(..., ge=0.0, le=1.0, description="Top edge, relative to page height")
    width: float = Field(..., gt=0.0, le=1.0)
    height: float = Field(..., gt=0.0, le=1.0)
    priority: Priority = Priority.MEDIUM
    color: SpotColor = SpotColor.RED

    @model_validator(mode="after")
    def check_inside_page(self) -> "SpotCreate":
        if self.x + self.width > 1.0 or self.y + self.height > 1.0:
            raise ValueError("Spot rectangle must stay inside the page")
        return self


class SpotUpdate(BaseModel):
    """Descriptive edit; ``updated_at`` is the token the client last read."""

    updated_at: datetime
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    notes: Optional[str] = None
    priority: Optional[Priority] = None
    color: Optional[SpotColor] = None


class SpotRead(BaseModel):
    """Representation of a spot and its review state."""

    id: str
    piece_id: str
    title: str
    description: Optional[str] = None
    notes: Optional[str] = None
    page_number: int
    x: float
    y: float
    width: float
    height: float
    priority: Priority
    color: SpotColor
    readiness_level: ReadinessLevel
    practice_count: int
    success_count: int
    success_rate: float
    interval: int = Field(..., description="Days until the next scheduled review")
    next_due: Optional[datetime] = None
    last_practiced_at: Optional[datetime] = None
    last_outcome: Optional[Outcome] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PracticeLogRead(BaseModel):
    """Single practice history entry."""

    id: str
    spot_id: str
    outcome: Outcome
    reviewed_at: datetime
    level_before: ReadinessLevel
    level_after: ReadinessLevel
    interval_before: int
    interval_after: int
    practice_time_minutes: Optional[int] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
