"""Integration tests for the broadcast and statistics endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from notification_engine.infrastructure.database import get_db


@pytest.fixture()
def client(session):
    from main import create_app

    app = create_app()

    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client


def _broadcast_body(**overrides) -> dict:
    body = {
        "type": "maintenance_notice",
        "payload": {"message": "Database upgrade", "scheduledTime": "22:00"},
    }
    body.update(overrides)
    return body


def test_broadcast_endpoint_reports_recipients(client, make_user, templates) -> None:
    make_user("admin")
    staff = make_user("staff")

    response = client.post("/notifications/broadcast", json=_broadcast_body(target_roles=["staff"]))

    assert response.status_code == 201
    body = response.json()
    assert body["recipient_count"] == 1
    inbox = client.get(f"/users/{staff.id}/notifications/").json()
    assert [item["id"] for item in inbox["items"]] == [body["notification_id"]]


def test_broadcast_endpoint_rejects_invalid_events(client, make_user) -> None:
    make_user("admin")

    unknown = client.post("/notifications/broadcast", json=_broadcast_body(type="gossip"))
    incomplete = client.post(
        "/notifications/broadcast", json=_broadcast_body(payload={"message": "x"})
    )

    assert unknown.status_code == 422
    assert "Unknown notification type" in unknown.json()["detail"]
    assert incomplete.status_code == 422
    assert "scheduledTime" in incomplete.json()["detail"]


def test_statistics_endpoint(client, make_user, templates) -> None:
    make_user("admin")
    make_user("staff")
    client.post("/notifications/broadcast", json=_broadcast_body())

    response = client.get("/notifications/statistics")

    assert response.status_code == 200
    body = response.json()
    assert body["total_notifications"] == 1
    assert body["total_deliveries"] == 2
    assert body["unread_deliveries"] == 2
    assert body["read_rate"] == 0.0
    assert body["by_type"] == {"maintenance_notice": 1}


def test_statistics_endpoint_rejects_reversed_period(client) -> None:
    response = client.get(
        "/notifications/statistics",
        params={"start": "2026-02-01T00:00:00", "end": "2026-01-01T00:00:00"},
    )

    assert response.status_code == 400
