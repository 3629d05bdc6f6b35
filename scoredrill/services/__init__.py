"""Service layer package."""

from scoredrill.services.events import QueueEvents, SpotChanged, queue_events
from scoredrill.services.practice import (
    OutcomePresenter,
    PracticeResult,
    PracticeSessionController,
    SessionState,
)
from scoredrill.services.spots import PracticeLog, SpotRepository, SpotService, SqlSpotRepository
from scoredrill.services.stats import PracticeStatsService

__all__ = [
    "OutcomePresenter",
    "PracticeLog",
    "PracticeResult",
    "PracticeSessionController",
    "PracticeStatsService",
    "QueueEvents",
    "SessionState",
    "SpotChanged",
    "SpotRepository",
    "SpotService",
    "SqlSpotRepository",
    "queue_events",
]
