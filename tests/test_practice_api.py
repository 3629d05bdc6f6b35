"""API tests for the practice queue and review endpoints."""
from __future__ import annotations

from datetime import timedelta

import pytest

from scoredrill.core.srs.models import utcnow
from scoredrill.services.spots import SqlSpotRepository

PRACTICE_URL = "/api/v1/practice"


@pytest.fixture()
def due_spots(repository: SqlSpotRepository, make_spot):
    now = utcnow()
    spots = [
        repository.create(
            make_spot("A", priority="high", readiness_level="young", interval=3, next_due=now - timedelta(days=1))
        ),
        repository.create(
            make_spot("B", priority="critical", readiness_level="mastered", interval=40, next_due=now - timedelta(days=2))
        ),
        repository.create(make_spot("C", priority="critical", next_due=now + timedelta(days=5))),
        repository.create(make_spot("D", piece_id="other-piece", priority="low")),
    ]
    return {spot.id: spot for spot in spots}


def test_queue_orders_due_spots(client, due_spots):
    response = client.get(f"{PRACTICE_URL}/queue")

    assert response.status_code == 200
    data = response.json()
    assert data["total_due"] == 3
    assert [item["id"] for item in data["items"]] == ["B", "A", "D"]


def test_queue_limit_and_piece_filter(client, due_spots):
    limited = client.get(f"{PRACTICE_URL}/queue", params={"limit": 1}).json()
    assert limited["total_due"] == 3
    assert [item["id"] for item in limited["items"]] == ["B"]

    other = client.get(f"{PRACTICE_URL}/queue", params={"piece_id": "other-piece"}).json()
    assert [item["id"] for item in other["items"]] == ["D"]


def test_next_spot(client, due_spots):
    data = client.get(f"{PRACTICE_URL}/next").json()

    assert data["nothing_due"] is False
    assert data["spot"]["id"] == "B"
    assert data["queue_size"] == 3


def test_nothing_due(client):
    data = client.get(f"{PRACTICE_URL}/next").json()

    assert data == {"nothing_due": True, "spot": None, "queue_size": 0}


def test_review_updates_spot(client, due_spots):
    head = client.get(f"{PRACTICE_URL}/next").json()["spot"]

    response = client.post(
        f"{PRACTICE_URL}/review",
        json={"spot_id": head["id"], "outcome": "good", "updated_at": head["updated_at"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["outcome"] == "good"
    assert data["previous_level"] == "mastered"
    assert data["previous_interval"] == 40
    assert data["spot"]["interval"] == 100
    assert data["spot"]["practice_count"] == 1
    assert data["next_review_in_days"] in (99, 100)
    assert data["level_changed"] is False

    assert client.get(f"{PRACTICE_URL}/next").json()["spot"]["id"] == "A"
    events = client.get(f"{PRACTICE_URL}/events", params={"since": 0}).json()
    assert events["version"] == 1
    assert events["events"][0]["spot_id"] == "B"
    assert events["events"][0]["reason"] == "reviewed"


def test_review_with_stale_token_conflicts(client, due_spots):
    head = client.get(f"{PRACTICE_URL}/next").json()["spot"]
    body = {"spot_id": head["id"], "outcome": "excellent", "updated_at": head["updated_at"]}
    assert client.post(f"{PRACTICE_URL}/review", json=body).status_code == 200

    response = client.post(f"{PRACTICE_URL}/review", json=body)

    assert response.status_code == 409
    stored = client.get(f"/api/v1/spots/{head['id']}").json()
    assert stored["practice_count"] == 1


def test_review_rejects_unknown_outcome(client, due_spots):
    spot = due_spots["A"]
    response = client.post(
        f"{PRACTICE_URL}/review",
        json={"spot_id": "A", "outcome": "perfect", "updated_at": spot.updated_at.isoformat()},
    )
    assert response.status_code == 422


def test_review_unknown_spot(client, now):
    response = client.post(
        f"{PRACTICE_URL}/review",
        json={"spot_id": "ghost", "outcome": "good", "updated_at": now.isoformat()},
    )
    assert response.status_code == 404


def test_review_of_inactive_spot_is_rejected(client, repository, make_spot):
    spot = repository.create(make_spot("retired", is_active=False))

    response = client.post(
        f"{PRACTICE_URL}/review",
        json={"spot_id": spot.id, "outcome": "good", "updated_at": spot.updated_at.isoformat()},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["details"]["spot_id"] == "retired"


def test_summary(client, due_spots):
    response = client.get(f"{PRACTICE_URL}/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["total_spots"] == 4
    assert data["due_now"] == 3
    assert data["due_upcoming"] == 1
    assert data["level_counts"]["new"] == 2
    assert data["priority_counts"]["critical"] == 2
    assert data["recent_performance"] is None

    piece = client.get(f"{PRACTICE_URL}/summary", params={"piece_id": "other-piece"}).json()
    assert piece["total_spots"] == 1


def test_events_polling_since_version(client):
    first = client.post(
        "/api/v1/spots/",
        json={"piece_id": "p", "page_number": 1, "x": 0, "y": 0, "width": 0.5, "height": 0.5},
    ).json()
    client.delete(f"/api/v1/spots/{first['id']}")

    data = client.get(f"{PRACTICE_URL}/events", params={"since": 1}).json()

    assert data["version"] == 2
    assert [event["reason"] for event in data["events"]] == ["deactivated"]


@pytest.mark.asyncio
async def test_queue_async(async_client, due_spots):
    response = await async_client.get(f"{PRACTICE_URL}/queue", params={"limit": 2})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == ["B", "A"]
