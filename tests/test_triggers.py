"""Tests for the order, payment and customer business triggers."""

from __future__ import annotations

import logging

from notification_engine.application.use_cases.notifications import (
    notify_customer_created_during_order,
    notify_high_value_order,
    notify_payment_failed,
)
from notification_engine.application.use_cases.preferences import update_preference
from notification_engine.domain.event_types import NotificationType, Priority
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.infrastructure.repositories import (
    DeliveryRepository,
    NotificationRepository,
)


def _order(total) -> dict:
    return {"id": 31, "customerName": "Mona Ali", "totalAmount": total}


def test_high_value_order_reaches_admins_at_default_threshold(
    session, make_user, templates, router
) -> None:
    admin = make_user("admin")
    make_user("staff")

    notification_id = notify_high_value_order(session, order=_order(1000), router=router)

    notification = NotificationRepository(session).get(notification_id)
    assert notification.type is NotificationType.ORDER_HIGH_VALUE
    assert notification.priority is Priority.HIGH
    assert notification.recipient_ids == [admin.id]
    delivery = DeliveryRepository(session).get_for_user(
        notification_id=notification_id, user_id=admin.id
    )
    assert delivery.title == "High-Value Order Alert #31"
    assert delivery.message == "High-value order (1000 EGP) placed by Mona Ali"


def test_high_value_order_respects_each_admin_threshold(
    session, make_user, templates, router
) -> None:
    cautious = make_user("admin")
    relaxed = make_user("admin")
    update_preference(
        session,
        user_id=cautious.id,
        notification_type="order_high_value",
        threshold={"amount": 500},
    )
    update_preference(
        session,
        user_id=relaxed.id,
        notification_type="order_high_value",
        threshold={"amount": 5000},
    )

    notification_id = notify_high_value_order(session, order=_order(750), router=router)

    deliveries = DeliveryRepository(session).list_for_notification(notification_id)
    assert [delivery.user_id for delivery in deliveries] == [cautious.id]


def test_order_below_every_threshold_publishes_nothing(
    session, make_user, templates, router
) -> None:
    make_user("admin")

    assert notify_high_value_order(session, order=_order(999.99), router=router) is None
    assert session.query(NotificationModel).count() == 0


def test_high_value_order_without_numeric_total_is_skipped(
    session, make_user, router, caplog
) -> None:
    make_user("admin")

    with caplog.at_level(logging.WARNING):
        result = notify_high_value_order(session, order=_order("n/a"), router=router)

    assert result is None
    assert "no numeric total" in caplog.text
    assert session.query(NotificationModel).count() == 0


def test_payment_failed_alerts_admins_and_staff(session, make_user, templates, router) -> None:
    admin = make_user("admin")
    staff = make_user("staff")
    make_user("user")

    notification_id = notify_payment_failed(
        session, order=_order(250), payment_error="Card declined", router=router
    )

    deliveries = DeliveryRepository(session).list_for_notification(notification_id)
    assert [delivery.user_id for delivery in deliveries] == [admin.id, staff.id]
    assert deliveries[1].message == "Payment failed for order #31 (250 EGP) - Card declined"
    notification = NotificationRepository(session).get(notification_id)
    assert notification.priority is Priority.HIGH
    assert notification.payload["failureTime"]


def test_payment_failed_without_error_is_rejected_quietly(
    session, make_user, router, caplog
) -> None:
    make_user("admin")

    with caplog.at_level(logging.ERROR):
        result = notify_payment_failed(session, order=_order(250), payment_error="", router=router)

    assert result is None
    assert session.query(NotificationModel).count() == 0


def test_customer_created_during_order_mentions_the_order(
    session, make_user, templates, router
) -> None:
    staff = make_user("staff")

    notification_id = notify_customer_created_during_order(
        session,
        customer={"id": 4, "firstName": "Omar", "lastName": "Hassan", "phone": "0100"},
        order_id=77,
        router=router,
    )

    notification = NotificationRepository(session).get(notification_id)
    assert notification.type is NotificationType.CUSTOMER_REGISTERED
    assert notification.payload["creationContext"] == "order_processing"
    delivery = DeliveryRepository(session).get_for_user(
        notification_id=notification_id, user_id=staff.id
    )
    assert delivery.title == "New Customer Created"
    assert delivery.message == "New customer Omar Hassan was created during order #77 processing"
