"""API router for version 1."""
from fastapi import APIRouter

from scoredrill.api.v1.endpoints import labels, practice, spots


api_router = APIRouter()
api_router.include_router(spots.router)
api_router.include_router(practice.router)
api_router.include_router(labels.router)
