"""Practice queue and review endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from scoredrill.api import deps
from scoredrill.config import settings
from scoredrill.schemas import (
    EventsResponse,
    NextSpotResponse,
    PracticeSummary,
    QueueResponse,
    ReviewRequest,
    ReviewResponse,
    SpotChangedRead,
    SpotRead,
)
from scoredrill.services.events import QueueEvents
from scoredrill.services.practice import PracticeSessionController
from scoredrill.services.stats import PracticeStatsService

router = APIRouter(prefix="/practice", tags=["practice"])


@router.get("/queue", response_model=QueueResponse)
def get_queue(
    piece_id: str | None = Query(default=None, max_length=64),
    limit: int = Query(default=settings.QUEUE_DEFAULT_LIMIT, ge=1, le=200),
    controller: PracticeSessionController = Depends(deps.get_practice_controller),
) -> QueueResponse:
    """Return spots due now, most urgent first."""

    now = controller.clock()
    full = controller.queue(now=now, piece_id=piece_id)
    return QueueResponse(
        now=now,
        total_due=len(full),
        items=[SpotRead.model_validate(spot) for spot in full[:limit]],
    )


@router.get("/next", response_model=NextSpotResponse)
def get_next_spot(
    piece_id: str | None = Query(default=None, max_length=64),
    controller: PracticeSessionController = Depends(deps.get_practice_controller),
) -> NextSpotResponse:
    """Return the spot to practise next, if any."""

    queue = controller.queue(piece_id=piece_id)
    head = queue.head()
    if head is None:
        return NextSpotResponse(nothing_due=True)
    return NextSpotResponse(
        nothing_due=False,
        spot=SpotRead.model_validate(head),
        queue_size=len(queue),
    )


@router.post("/review", response_model=ReviewResponse)
def submit_review(
    payload: ReviewRequest,
    controller: PracticeSessionController = Depends(deps.get_practice_controller),
) -> ReviewResponse:
    """Record a practice outcome for the spot version the client was shown."""

    controller.attach(payload.spot_id, payload.updated_at)
    try:
        result = controller.submit(
            payload.outcome,
            practice_time_minutes=payload.practice_time_minutes,
            notes=payload.notes,
        )
    finally:
        controller.cancel()
    return ReviewResponse(
        spot=SpotRead.model_validate(result.spot),
        outcome=result.outcome,
        previous_level=result.previous_level,
        previous_interval=result.previous_interval,
        next_review_in_days=result.next_review_in_days,
        level_changed=result.level_changed,
    )


@router.get("/summary", response_model=PracticeSummary)
def get_summary(
    piece_id: str | None = Query(default=None, max_length=64),
    upcoming_days: int = Query(default=7, ge=1, le=90),
    stats: PracticeStatsService = Depends(deps.get_stats_service),
) -> PracticeSummary:
    """Return progress counters for one piece or for every active spot."""

    return PracticeSummary(**stats.summary(piece_id=piece_id, upcoming_days=upcoming_days))


@router.get("/events", response_model=EventsResponse)
def get_events(
    since: int = Query(default=0, ge=0),
    events: QueueEvents = Depends(deps.get_events),
) -> EventsResponse:
    """Return queue change notifications newer than ``since``."""

    version, changes = events.events_since(since)
    return EventsResponse(
        version=version,
        events=[SpotChangedRead.model_validate(event) for event in changes],
    )
