"""Pytest fixtures for core, service and API tests."""

from collections.abc import AsyncGenerator, Callable, Generator
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from scoredrill.api.deps import get_db
from scoredrill.core.srs.models import Spot
from scoredrill.db.base import Base
from scoredrill.db.models import PracticeLogRecord, SpotRecord
from scoredrill.main import create_app
from scoredrill.services.events import queue_events
from scoredrill.services.spots import SqlSpotRepository

NOW = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=db_engine
    )
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.execute(delete(PracticeLogRecord))
        db.execute(delete(SpotRecord))
        db.commit()
        db.close()


@pytest.fixture(autouse=True)
def clear_events() -> Generator[None, None, None]:
    queue_events.clear()
    try:
        yield
    finally:
        queue_events.clear()


@pytest.fixture()
def repository(db_session: Session) -> SqlSpotRepository:
    return SqlSpotRepository(db_session)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def make_spot() -> Callable[..., Spot]:
    """Factory for valid spots with overridable fields."""

    def factory(spot_id: str = "spot-a", **overrides: Any) -> Spot:
        values: dict[str, Any] = {
            "id": spot_id,
            "piece_id": "etude-op10-no1",
            "page_number": 1,
            "x": 0.1,
            "y": 0.2,
            "width": 0.3,
            "height": 0.1,
            "created_at": NOW,
            "updated_at": NOW,
        }
        values.update(overrides)
        return Spot(**values)

    return factory


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture()
async def async_client(db_session: Session) -> AsyncGenerator[httpx.AsyncClient, None]:
    app = create_app()

    async def override_get_db() -> AsyncGenerator[Session, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
