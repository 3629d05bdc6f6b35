"""FastAPI application factory."""
from __future__ import annotations

from typing import Callable, List

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scoredrill import __version__
from scoredrill.api.v1 import api_router
from scoredrill.config import settings
from scoredrill.utils.exceptions import (
    ConflictError,
    NotFoundError,
    RepositoryError,
    ScoreDrillException,
    SessionError,
    ValidationError,
    handle_conflict_error,
    handle_not_found_error,
    handle_repository_error,
    handle_session_error,
    handle_validation_error,
)


tags_metadata: List[dict[str, str]] = [
    {"name": "spots", "description": "Mark, edit and retire practice spots on score pages."},
    {"name": "practice", "description": "Due queue, reviews and progress summaries."},
    {"name": "labels", "description": "Display labels for review-state tags."},
]

_HANDLERS: dict[type[ScoreDrillException], Callable[..., HTTPException]] = {
    ValidationError: handle_validation_error,
    NotFoundError: handle_not_found_error,
    ConflictError: handle_conflict_error,
    SessionError: handle_session_error,
    RepositoryError: handle_repository_error,
}


def _register_domain_handlers(app: FastAPI) -> None:
    for exc_type, to_http in _HANDLERS.items():

        async def handler(
            request: Request, exc: ScoreDrillException, to_http=to_http
        ) -> JSONResponse:
            http_exc = to_http(exc)
            return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})

        app.add_exception_handler(exc_type, handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Spaced-repetition practice planner for difficult passages in sheet music.",
        version=__version__,
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        debug=settings.DEBUG,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors()), "message": "Validation failed"},
        )

    _register_domain_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
