"""Tests for administrator broadcasts and notification statistics."""

from __future__ import annotations

from datetime import timedelta

import pytest

from notification_engine.application.use_cases.inbox import mark_notification_read
from notification_engine.application.use_cases.notifications import (
    get_notification_statistics,
    publish_broadcast,
)
from notification_engine.domain.event_types import Priority
from notification_engine.domain.exceptions import EventValidationError
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.infrastructure.repositories import (
    DeliveryRepository,
    NotificationRepository,
)
from notification_engine.utils import now_in_app_timezone


def _maintenance(session, router, **options):
    return publish_broadcast(
        session,
        notification_type="maintenance_notice",
        payload={"message": "Database upgrade", "scheduledTime": "22:00"},
        router=router,
        **options,
    )


def test_broadcast_without_targets_reaches_every_active_user(
    session, make_user, templates, router
) -> None:
    users = [make_user("admin"), make_user("staff"), make_user("user")]
    make_user("user", is_active=False)

    result = _maintenance(session, router)

    assert result.recipient_count == 3
    deliveries = DeliveryRepository(session).list_for_notification(result.notification_id)
    assert [delivery.user_id for delivery in deliveries] == [user.id for user in users]
    assert NotificationRepository(session).get(result.notification_id).target_roles == ["all"]


def test_broadcast_to_roles(session, make_user, templates, router) -> None:
    admin = make_user("admin")
    make_user("staff")

    result = _maintenance(session, router, target_roles=["admin"], priority="critical")

    assert result.recipient_count == 1
    notification = NotificationRepository(session).get(result.notification_id)
    assert notification.priority is Priority.CRITICAL
    assert [
        delivery.user_id
        for delivery in DeliveryRepository(session).list_for_notification(result.notification_id)
    ] == [admin.id]


def test_broadcast_user_ids_win_over_roles(session, make_user, templates, router) -> None:
    make_user("admin")
    customer = make_user("user")

    result = _maintenance(session, router, target_roles=["admin"], user_ids=[customer.id])

    deliveries = DeliveryRepository(session).list_for_notification(result.notification_id)
    assert [delivery.user_id for delivery in deliveries] == [customer.id]


def test_invalid_broadcast_is_rejected(session, make_user, router) -> None:
    make_user("admin")

    with pytest.raises(EventValidationError):
        publish_broadcast(
            session,
            notification_type="maintenance_notice",
            payload={"message": "No schedule"},
            router=router,
        )

    assert session.query(NotificationModel).count() == 0


def test_statistics_count_notifications_and_deliveries(
    session, make_user, templates, router
) -> None:
    admin = make_user("admin")
    make_user("staff")
    first = _maintenance(session, router)
    _maintenance(session, router, target_roles=["admin"], priority="high")
    mark_notification_read(session, notification_id=first.notification_id, user_id=admin.id)

    statistics = get_notification_statistics(session)

    assert statistics.total_notifications == 2
    assert statistics.total_deliveries == 3
    assert statistics.unread_deliveries == 2
    assert statistics.read_rate == 33.33
    assert statistics.by_type == {"maintenance_notice": 2}
    assert statistics.by_priority == {"medium": 1, "high": 1}


def test_statistics_are_limited_to_the_period(session, make_user, templates, router) -> None:
    make_user("admin")
    _maintenance(session, router)
    later = now_in_app_timezone() + timedelta(hours=1)

    statistics = get_notification_statistics(session, start=later)

    assert statistics.total_notifications == 0
    assert statistics.total_deliveries == 0
    assert statistics.read_rate == 0.0
    assert statistics.by_type == {}


def test_statistics_reject_reversed_period(session) -> None:
    now = now_in_app_timezone()

    with pytest.raises(ValueError):
        get_notification_statistics(session, start=now, end=now - timedelta(days=1))
