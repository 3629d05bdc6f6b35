"""Spot management endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from scoredrill.api import deps
from scoredrill.schemas import PracticeLogRead, SpotCreate, SpotRead, SpotUpdate
from scoredrill.services.spots import SpotService, SqlSpotRepository

router = APIRouter(prefix="/spots", tags=["spots"])

NULLABLE_FIELDS = {"description", "notes"}


@router.post("/", response_model=SpotRead, status_code=status.HTTP_201_CREATED)
def create_spot(
    payload: SpotCreate,
    service: SpotService = Depends(deps.get_spot_service),
) -> SpotRead:
    """Mark a new spot on a page of a piece."""

    spot = service.create_spot(**payload.model_dump())
    return SpotRead.model_validate(spot)


@router.get("/", response_model=list[SpotRead])
def list_spots(
    piece_id: str = Query(..., min_length=1, max_length=64),
    include_inactive: bool = Query(default=False),
    repository: SqlSpotRepository = Depends(deps.get_spot_repository),
) -> list[SpotRead]:
    """Return the spots of a piece ordered by page."""

    spots = repository.list_by_piece(piece_id, include_inactive=include_inactive)
    return [SpotRead.model_validate(spot) for spot in spots]


@router.get("/{spot_id}", response_model=SpotRead)
def get_spot(
    spot_id: str,
    repository: SqlSpotRepository = Depends(deps.get_spot_repository),
) -> SpotRead:
    return SpotRead.model_validate(repository.get(spot_id))


@router.patch("/{spot_id}", response_model=SpotRead)
def update_spot(
    spot_id: str,
    payload: SpotUpdate,
    service: SpotService = Depends(deps.get_spot_service),
) -> SpotRead:
    """Edit descriptive fields; a stale ``updated_at`` returns 409."""

    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True, exclude={"updated_at"}).items()
        if value is not None or name in NULLABLE_FIELDS
    }
    spot = service.edit_spot(spot_id, expected_updated_at=payload.updated_at, **changes)
    return SpotRead.model_validate(spot)


@router.delete("/{spot_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_spot(
    spot_id: str,
    service: SpotService = Depends(deps.get_spot_service),
) -> Response:
    """Deactivate a spot. Its practice history is kept."""

    service.deactivate(spot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{spot_id}/history", response_model=list[PracticeLogRead])
def spot_history(
    spot_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    repository: SqlSpotRepository = Depends(deps.get_spot_repository),
) -> list[PracticeLogRead]:
    """Return the most recent practice log entries for a spot."""

    return [PracticeLogRead.model_validate(entry) for entry in repository.history(spot_id, limit=limit)]
