"""Display label lookup for UI clients."""
from __future__ import annotations

from fastapi import APIRouter

from scoredrill.core.srs.labels import label_tables

router = APIRouter(prefix="/labels", tags=["labels"])


@router.get("/", response_model=dict[str, dict[str, str]])
def list_labels() -> dict[str, dict[str, str]]:
    """Return human-readable labels for every enum tag."""

    return label_tables()
