"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from loguru import logger


class ScoreDrillException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(ScoreDrillException):
    """Malformed spot, outcome or edit payload."""
    pass


class NotFoundError(ScoreDrillException):
    """Operation referenced an id that storage does not hold."""
    pass


class ConflictError(ScoreDrillException):
    """Optimistic-concurrency token no longer matches the stored spot."""
    pass


class SessionError(ScoreDrillException):
    """Practice session controller used out of order."""
    pass


class RepositoryError(ScoreDrillException):
    """Storage operation failed."""
    pass


def handle_validation_error(error: ValidationError) -> HTTPException:
    """Handle validation errors."""
    logger.warning(f"Validation error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "message": error.message,
            "details": error.details
        }
    )


def handle_not_found_error(error: NotFoundError) -> HTTPException:
    """Handle lookups of unknown ids."""
    logger.warning(f"Not found: {error.message}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error.message
    )


def handle_conflict_error(error: ConflictError) -> HTTPException:
    """Handle stale optimistic-concurrency tokens."""
    logger.warning(f"Conflict: {error.message}")
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": error.message,
            "details": error.details
        }
    )


def handle_session_error(error: SessionError) -> HTTPException:
    """Handle practice session errors."""
    logger.warning(f"Session error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error.message
    )


def handle_repository_error(error: RepositoryError) -> HTTPException:
    """Handle storage errors and return appropriate HTTP response."""
    logger.error(f"Repository error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database operation failed. Please try again later."
    )
