"""Pydantic schemas package."""

from scoredrill.schemas.practice import (
    EventsResponse,
    NextSpotResponse,
    PracticeSummary,
    QueueResponse,
    ReviewRequest,
    ReviewResponse,
    SpotChangedRead,
)
from scoredrill.schemas.spot import PracticeLogRead, SpotCreate, SpotRead, SpotUpdate

__all__ = [
    "EventsResponse",
    "NextSpotResponse",
    "PracticeLogRead",
    "PracticeSummary",
    "QueueResponse",
    "ReviewRequest",
    "ReviewResponse",
    "SpotChangedRead",
    "SpotCreate",
    "SpotRead",
    "SpotUpdate",
]
