"""Tests for publishing events and creating deliveries."""

from __future__ import annotations

import logging

import pytest

from notification_engine.application.use_cases.notifications import (
    fan_out,
    notify_order_created,
    notify_order_updated,
    notify_system_alert,
    publish_event,
)
from notification_engine.domain.entities import NotificationEvent
from notification_engine.domain.event_types import NotificationType, Priority
from notification_engine.domain.exceptions import EventValidationError
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.infrastructure.repositories import (
    DeliveryRepository,
    NotificationRepository,
)


def _order_event(**overrides) -> NotificationEvent:
    values = {
        "type": NotificationType.ORDER_CREATED,
        "payload": {"orderId": 12, "customerName": "Mona Ali", "totalAmount": 250},
        "related_entity_type": "order",
        "related_entity_id": 12,
        "target_roles": ("admin", "staff"),
    }
    values.update(overrides)
    return NotificationEvent(**values)


def test_publish_creates_one_delivery_per_matching_user(
    session, make_user, templates, router
) -> None:
    admin = make_user("admin")
    staff = make_user("staff")
    make_user("user")
    make_user("staff", is_active=False)

    notification_id = publish_event(session, _order_event(), router=router)

    deliveries = DeliveryRepository(session).list_for_notification(notification_id)
    assert [delivery.user_id for delivery in deliveries] == [admin.id, staff.id]
    assert all(delivery.is_visible and not delivery.is_read for delivery in deliveries)
    notification = NotificationRepository(session).get(notification_id)
    assert notification.priority is Priority.MEDIUM
    assert notification.target_roles == ["admin", "staff"]


def test_empty_roles_address_every_active_user(session, make_user, templates, router) -> None:
    users = [make_user("admin"), make_user("staff"), make_user("user")]

    notification_id = publish_event(
        session,
        NotificationEvent(
            type="maintenance_notice",
            payload={"message": "Upgrade", "scheduledTime": "22:00"},
            target_roles=(),
        ),
        router=router,
    )

    deliveries = DeliveryRepository(session).list_for_notification(notification_id)
    assert {delivery.user_id for delivery in deliveries} == {user.id for user in users}
    assert NotificationRepository(session).get(notification_id).target_roles == ["all"]


def test_fan_out_rerun_is_idempotent(session, make_user, templates, router, mail_sender) -> None:
    make_user("admin")
    make_user("staff")

    notification_id = publish_event(session, _order_event(), router=router)
    again = fan_out(session, notification_id, router=router)

    assert again == []
    assert len(DeliveryRepository(session).list_for_notification(notification_id)) == 2
    assert len(mail_sender.messages) == 2


def test_fan_out_picks_up_users_added_later(session, make_user, templates, router) -> None:
    make_user("admin")
    notification_id = publish_event(session, _order_event(), router=router)
    late = make_user("staff")

    created = fan_out(session, notification_id, router=router)

    assert [delivery.user_id for delivery in created] == [late.id]


def test_duplicate_recipient_ids_create_single_delivery(
    session, make_user, templates, router
) -> None:
    user = make_user("staff")

    notification_id = publish_event(
        session,
        _order_event(target_roles=None, recipient_ids=(user.id, user.id)),
        router=router,
    )

    assert len(DeliveryRepository(session).list_for_notification(notification_id)) == 1


def test_author_is_excluded_when_policy_says_so(session, make_user, templates, router) -> None:
    author = make_user("staff")
    colleague = make_user("staff")

    notification_id = notify_order_created(
        session,
        order={"id": 3, "customer": {"firstName": "Omar", "lastName": "Adel"}, "totalAmount": 90},
        created_by=author.id,
        router=router,
    )

    deliveries = DeliveryRepository(session).list_for_notification(notification_id)
    assert [delivery.user_id for delivery in deliveries] == [colleague.id]


def test_author_is_kept_for_system_alerts(session, make_user, templates, router) -> None:
    admin = make_user("admin")

    notification_id = notify_system_alert(
        session, message="Disk almost full", created_by=admin.id, router=router
    )

    deliveries = DeliveryRepository(session).list_for_notification(notification_id)
    assert [delivery.user_id for delivery in deliveries] == [admin.id]


def test_no_recipients_still_persists_notification(session, make_user, templates, router) -> None:
    make_user("user")

    notification_id = publish_event(
        session, _order_event(target_roles=("warehouse",)), router=router
    )

    assert NotificationRepository(session).get(notification_id) is not None
    assert DeliveryRepository(session).list_for_notification(notification_id) == []


@pytest.mark.parametrize(
    "event",
    [
        NotificationEvent(type="order_teleported", payload={"orderId": 1}),
        NotificationEvent(type="order_created", payload={"orderId": 1}),
        NotificationEvent(
            type="order_created",
            payload={"orderId": 1, "customerName": "A", "totalAmount": 5},
            priority="urgent",
        ),
    ],
)
def test_invalid_events_are_rejected_before_persisting(
    session, make_user, router, caplog, event
) -> None:
    make_user("admin")

    with caplog.at_level(logging.ERROR), pytest.raises(EventValidationError):
        publish_event(session, event, router=router)

    assert session.query(NotificationModel).count() == 0
    assert "Rejected" in caplog.text


def test_triggers_never_raise(session, make_user, router, caplog) -> None:
    make_user("admin")

    with caplog.at_level(logging.ERROR):
        result = notify_order_created(session, order={"customerName": "No id"}, router=router)

    assert result is None
    assert "Could not publish order_created" in caplog.text
    assert session.query(NotificationModel).count() == 0


def test_one_failing_recipient_does_not_block_others(
    session, make_user, templates, mail_sender, pushed
) -> None:
    from notification_engine.application.use_cases.notifications import DeliveryRouter

    first = make_user("admin")
    second = make_user("staff")

    class FlakyRouter(DeliveryRouter):
        def route(self, session, notification, delivery, user, preference=None):
            if user.id == first.id:
                raise RuntimeError("boom")
            return super().route(session, notification, delivery, user, preference)

    flaky = FlakyRouter(mail_sender=mail_sender, realtime_dispatcher=lambda n, d: None)
    notification_id = publish_event(session, _order_event(), router=flaky)

    deliveries = {
        delivery.user_id: delivery
        for delivery in DeliveryRepository(session).list_for_notification(notification_id)
    }
    assert deliveries[first.id].title is None
    assert deliveries[second.id].title == "New Order #12"
    assert [message.to for message in mail_sender.messages] == [second.email]


def test_order_update_without_changes_has_no_empty_summary(
    session, make_user, templates, router
) -> None:
    staff = make_user("staff")

    notification_id = notify_order_updated(
        session,
        order={"id": 7, "customerName": "Mona Ali", "status": "pending"},
        changes={"customer": False, "items": False, "totalAmount": False, "notes": False},
        router=router,
    )

    notification = NotificationRepository(session).get(notification_id)
    delivery = DeliveryRepository(session).get_for_user(
        notification_id=notification_id, user_id=staff.id
    )
    assert notification.payload["changes"] == {}
    assert delivery.message == "Order #7 has been updated"


def test_order_update_summary_lists_only_true_changes(
    session, make_user, templates, router
) -> None:
    staff = make_user("staff")

    notification_id = notify_order_updated(
        session,
        order={"id": 7, "customerName": "Mona Ali"},
        changes={"customer": True, "items": False, "totalAmount": True},
        router=router,
    )

    delivery = DeliveryRepository(session).get_for_user(
        notification_id=notification_id, user_id=staff.id
    )
    assert delivery.message == "Order #7 has been updated (customer changed, total amount changed)"
