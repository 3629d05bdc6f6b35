"""Utility helpers package."""

from scoredrill.utils.exceptions import (
    ConflictError,
    NotFoundError,
    RepositoryError,
    ScoreDrillException,
    SessionError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "NotFoundError",
    "RepositoryError",
    "ScoreDrillException",
    "SessionError",
    "ValidationError",
]
