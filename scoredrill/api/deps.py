"""Shared API dependencies."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from scoredrill.config import settings
from scoredrill.core.srs.queue import DueQueueBuilder
from scoredrill.core.srs.scheduler import SchedulingEngine
from scoredrill.db.session import get_db
from scoredrill.services.events import QueueEvents, queue_events
from scoredrill.services.practice import PracticeSessionController
from scoredrill.services.spots import SpotService, SqlSpotRepository
from scoredrill.services.stats import PracticeStatsService

_engine_singleton: SchedulingEngine | None = None
_queue_builder = DueQueueBuilder()


def get_events() -> QueueEvents:
    return queue_events


def get_scheduling_engine() -> SchedulingEngine:
    """Return the scheduler configured from settings."""

    global _engine_singleton
    if _engine_singleton is None:
        _engine_singleton = SchedulingEngine(
            maximum_interval_days=settings.SRS_MAXIMUM_INTERVAL_DAYS,
            learning_interval_cap_days=settings.SRS_LEARNING_INTERVAL_CAP_DAYS,
        )
    return _engine_singleton


def get_spot_repository(db: Session = Depends(get_db)) -> SqlSpotRepository:
    return SqlSpotRepository(db)


def get_spot_service(
    repository: SqlSpotRepository = Depends(get_spot_repository),
    events: QueueEvents = Depends(get_events),
) -> SpotService:
    return SpotService(repository, events=events)


def get_practice_controller(
    repository: SqlSpotRepository = Depends(get_spot_repository),
    engine: SchedulingEngine = Depends(get_scheduling_engine),
    events: QueueEvents = Depends(get_events),
) -> PracticeSessionController:
    """Assemble a request-scoped practice controller."""

    return PracticeSessionController(
        repository,
        engine=engine,
        queue_builder=_queue_builder,
        events=events,
    )


def get_stats_service(
    db: Session = Depends(get_db),
    repository: SqlSpotRepository = Depends(get_spot_repository),
) -> PracticeStatsService:
    return PracticeStatsService(db, repository=repository)
