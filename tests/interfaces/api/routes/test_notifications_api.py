"""Integration tests for the inbox and preference endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from notification_engine.application.use_cases.notifications import publish_event
from notification_engine.domain.entities import NotificationEvent
from notification_engine.domain.event_types import NotificationType
from notification_engine.infrastructure.database import get_db


@pytest.fixture()
def client(session):
    """Return a test client whose requests share the test session."""

    from main import create_app

    app = create_app()

    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client


def _publish(session, router, user_id: int, order_id: int) -> int:
    return publish_event(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_CREATED,
            payload={"orderId": order_id, "customerName": "Mona", "totalAmount": 10},
            recipient_ids=(user_id,),
        ),
        router=router,
    )


def test_inbox_lists_visible_notifications_newest_first(
    client, session, make_user, templates, router
) -> None:
    user = make_user("staff")
    first = _publish(session, router, user.id, 1)
    second = _publish(session, router, user.id, 2)

    response = client.get(f"/users/{user.id}/notifications/")

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == [second, first]
    assert body["total"] == 2
    assert body["unread"] == 2
    assert body["items"][0]["title"] == "New Order #2"
    assert body["items"][0]["type"] == "order_created"


def test_mark_read_and_unread_count(client, session, make_user, templates, router) -> None:
    user = make_user("staff")
    first = _publish(session, router, user.id, 1)
    _publish(session, router, user.id, 2)

    assert client.patch(f"/users/{user.id}/notifications/{first}/read").status_code == 204
    assert client.get(f"/users/{user.id}/notifications/unread-count").json() == {"unread": 1}

    unread_only = client.get(f"/users/{user.id}/notifications/", params={"unread_only": True})
    assert unread_only.json()["total"] == 1

    assert client.patch(f"/users/{user.id}/notifications/read-all").json() == {"updated": 1}
    assert client.get(f"/users/{user.id}/notifications/unread-count").json() == {"unread": 0}


def test_hide_removes_from_inbox(client, session, make_user, templates, router) -> None:
    user = make_user("staff")
    notification_id = _publish(session, router, user.id, 1)

    assert client.delete(f"/users/{user.id}/notifications/{notification_id}").status_code == 204

    body = client.get(f"/users/{user.id}/notifications/").json()
    assert body["items"] == []
    assert body["total"] == 0


def test_actions_on_foreign_notifications_return_404(
    client, session, make_user, templates, router
) -> None:
    owner = make_user("staff")
    stranger = make_user("staff")
    notification_id = _publish(session, router, owner.id, 1)

    response = client.patch(f"/users/{stranger.id}/notifications/{notification_id}/read")

    assert response.status_code == 404
    assert client.get("/users/999/notifications/").status_code == 404


def test_preferences_round_trip(client, make_user) -> None:
    user = make_user("admin")

    response = client.put(
        f"/users/{user.id}/notification-preferences/stock_low",
        json={"email_enabled": False, "threshold": {"low": 2, "medium": 6}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["email_enabled"] is False
    assert body["threshold"] == {"low": 2, "medium": 6}
    assert body["is_default"] is False

    listed = client.get(f"/users/{user.id}/notification-preferences/").json()
    stock_out = next(item for item in listed if item["notification_type"] == "stock_out")
    assert stock_out["threshold"] == {"low": 2, "medium": 6}
    assert stock_out["is_default"] is True


def test_invalid_threshold_is_unprocessable(client, make_user) -> None:
    user = make_user("admin")

    response = client.put(
        f"/users/{user.id}/notification-preferences/stock_low",
        json={"threshold": {"low": 9, "medium": 4}},
    )

    assert response.status_code == 422


def test_unknown_preference_type_is_bad_request(client, make_user) -> None:
    user = make_user("admin")

    response = client.put(
        f"/users/{user.id}/notification-preferences/order_teleported",
        json={"in_app_enabled": False},
    )

    assert response.status_code == 400


def test_websocket_greets_with_unread_count(client, session, make_user, templates, router):
    user = make_user("staff")
    _publish(session, router, user.id, 1)

    with client.websocket_connect(f"/notifications/ws?user_id={user.id}") as websocket:
        assert websocket.receive_json() == {"type": "init", "data": {"unread": 1}}
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}
