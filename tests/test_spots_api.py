"""API tests for spot management endpoints."""
from __future__ import annotations

import pytest

from scoredrill.services.events import queue_events

SPOTS_URL = "/api/v1/spots/"


def _payload(**overrides):
    payload = {
        "piece_id": "ballade-1",
        "title": "Coda run",
        "page_number": 3,
        "x": 0.1,
        "y": 0.4,
        "width": 0.5,
        "height": 0.15,
        "priority": "high",
        "color": "yellow",
    }
    payload.update(overrides)
    return payload


def test_create_spot(client):
    response = client.post(SPOTS_URL, json=_payload())

    assert response.status_code == 201
    data = response.json()
    assert data["piece_id"] == "ballade-1"
    assert data["readiness_level"] == "new"
    assert data["priority"] == "high"
    assert data["color"] == "yellow"
    assert data["practice_count"] == 0
    assert data["interval"] == 0
    assert data["next_due"] is None
    assert data["is_active"] is True
    assert data["created_at"] == data["updated_at"]

    version, events = queue_events.events_since(0)
    assert version == 1
    assert events[0].reason == "created"


@pytest.mark.parametrize(
    "overrides",
    [
        {"page_number": 0},
        {"width": 0},
        {"x": 0.7, "width": 0.5},
        {"priority": "urgent"},
        {"color": "purple"},
        {"piece_id": ""},
    ],
)
def test_create_spot_rejects_invalid_payload(client, overrides):
    response = client.post(SPOTS_URL, json=_payload(**overrides))

    assert response.status_code == 422
    assert response.json()["message"] == "Validation failed"


def test_list_and_get_spots(client):
    first = client.post(SPOTS_URL, json=_payload(page_number=5)).json()
    second = client.post(SPOTS_URL, json=_payload(page_number=1)).json()
    client.post(SPOTS_URL, json=_payload(piece_id="nocturne"))

    response = client.get(SPOTS_URL, params={"piece_id": "ballade-1"})

    assert response.status_code == 200
    assert [spot["id"] for spot in response.json()] == [second["id"], first["id"]]
    single = client.get(f"{SPOTS_URL}{first['id']}")
    assert single.status_code == 200
    assert single.json()["page_number"] == 5


def test_get_unknown_spot(client):
    response = client.get(f"{SPOTS_URL}does-not-exist")
    assert response.status_code == 404


def test_update_spot(client):
    created = client.post(SPOTS_URL, json=_payload()).json()

    response = client.patch(
        f"{SPOTS_URL}{created['id']}",
        json={"updated_at": created["updated_at"], "title": "Bars 88-92", "color": "green", "notes": "rotate wrist"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Bars 88-92"
    assert data["color"] == "green"
    assert data["notes"] == "rotate wrist"
    assert data["priority"] == "high"
    assert data["updated_at"] != created["updated_at"]


def test_update_with_stale_token_conflicts(client):
    created = client.post(SPOTS_URL, json=_payload()).json()
    url = f"{SPOTS_URL}{created['id']}"
    assert client.patch(url, json={"updated_at": created["updated_at"], "title": "first"}).status_code == 200

    response = client.patch(url, json={"updated_at": created["updated_at"], "title": "second"})

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["details"]["spot_id"] == created["id"]
    assert client.get(url).json()["title"] == "first"


def test_update_requires_token(client):
    created = client.post(SPOTS_URL, json=_payload()).json()
    response = client.patch(f"{SPOTS_URL}{created['id']}", json={"title": "no token"})
    assert response.status_code == 422


def test_delete_deactivates_spot(client):
    created = client.post(SPOTS_URL, json=_payload()).json()

    response = client.delete(f"{SPOTS_URL}{created['id']}")

    assert response.status_code == 204
    assert client.get(SPOTS_URL, params={"piece_id": "ballade-1"}).json() == []
    listed = client.get(SPOTS_URL, params={"piece_id": "ballade-1", "include_inactive": True}).json()
    assert listed[0]["is_active"] is False


def test_spot_history_endpoint(client):
    created = client.post(SPOTS_URL, json=_payload()).json()
    client.post(
        "/api/v1/practice/review",
        json={"spot_id": created["id"], "outcome": "good", "updated_at": created["updated_at"], "practice_time_minutes": 5},
    )

    response = client.get(f"{SPOTS_URL}{created['id']}/history")

    assert response.status_code == 200
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["outcome"] == "good"
    assert entries[0]["level_before"] == "new"
    assert entries[0]["level_after"] == "learning"
    assert entries[0]["practice_time_minutes"] == 5


def test_history_for_unknown_spot(client):
    assert client.get(f"{SPOTS_URL}missing/history").status_code == 404


def test_labels_endpoint(client):
    response = client.get("/api/v1/labels/")

    assert response.status_code == 200
    assert response.json()["color"]["red"] == "Critical"
