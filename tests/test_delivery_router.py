"""Tests for per-recipient channel routing."""

from __future__ import annotations

import logging

from notification_engine.application.use_cases.notifications import publish_event
from notification_engine.application.use_cases.preferences import update_preference
from notification_engine.domain.entities import NotificationEvent
from notification_engine.domain.event_types import NotificationType
from notification_engine.infrastructure.repositories import (
    DeliveryRepository,
    NotificationRepository,
    UserRepository,
)


def _publish_order(session, router, *, recipient_id: int) -> int:
    return publish_event(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_CREATED,
            payload={"orderId": 12, "customerName": "<Mona>", "totalAmount": 250},
            recipient_ids=(recipient_id,),
        ),
        router=router,
    )


def _delivery(session, notification_id: int, user_id: int):
    return DeliveryRepository(session).get_for_user(
        notification_id=notification_id, user_id=user_id
    )


def test_in_app_content_is_rendered_stored_and_pushed(
    session, make_user, templates, router, pushed
) -> None:
    user = make_user("staff", name="Hana")

    notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.title == "New Order #12"
    assert delivery.message == "New order placed by <Mona> for 250 EGP"
    assert delivery.language == "en"
    assert delivery.is_visible is True
    assert pushed == [(notification_id, user.id)]


def test_disabled_in_app_hides_delivery_but_keeps_it(
    session, make_user, templates, router, pushed, mail_sender
) -> None:
    user = make_user("staff")
    update_preference(
        session, user_id=user.id, notification_type="order_created", in_app_enabled=False
    )

    notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery is not None
    assert delivery.is_visible is False
    assert delivery.hidden_at is not None
    assert pushed == []
    assert [message.to for message in mail_sender.messages] == [user.email]


def test_email_success_marks_delivery_sent(
    session, make_user, templates, router, mail_sender
) -> None:
    user = make_user("admin")

    notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.is_email_sent is True
    assert delivery.email_sent_at is not None
    message = mail_sender.messages[0]
    assert message.subject == "New Order Created - #12"
    assert "&lt;Mona&gt;" in message.html
    assert "<Mona>" not in message.html


def test_disabled_email_sends_nothing(session, make_user, templates, router, mail_sender) -> None:
    user = make_user("admin")
    update_preference(
        session, user_id=user.id, notification_type="order_created", email_enabled=False
    )

    notification_id = _publish_order(session, router, recipient_id=user.id)

    assert mail_sender.messages == []
    assert _delivery(session, notification_id, user.id).is_email_sent is False


def test_email_failure_is_recorded_without_touching_in_app(
    session, make_user, templates, pushed, failing_mail_sender, caplog
) -> None:
    from notification_engine.application.use_cases.notifications import DeliveryRouter

    user = make_user("admin")
    failing = DeliveryRouter(
        mail_sender=failing_mail_sender,
        realtime_dispatcher=lambda notification, delivery: pushed.append(delivery.user_id),
    )

    with caplog.at_level(logging.ERROR):
        notification_id = _publish_order(session, failing, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.is_email_sent is False
    assert delivery.email_attempts == 1
    assert delivery.title == "New Order #12"
    assert delivery.is_visible is True
    assert "failed (attempt 1 of 3)" in caplog.text


def test_sender_exception_counts_as_failure(session, make_user, templates, caplog) -> None:
    from notification_engine.application.use_cases.notifications import DeliveryRouter

    def exploding_sender(message):
        raise TimeoutError("mail provider timed out")

    user = make_user("admin")
    router = DeliveryRouter(
        mail_sender=exploding_sender, realtime_dispatcher=lambda notification, delivery: None
    )

    with caplog.at_level(logging.ERROR):
        notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.is_email_sent is False
    assert delivery.email_attempts == 1
    assert "Mail sender raised" in caplog.text


def test_sent_email_is_never_resent(session, make_user, templates, router, mail_sender) -> None:
    user = make_user("admin")
    notification_id = _publish_order(session, router, recipient_id=user.id)
    notification = NotificationRepository(session).get(notification_id)
    delivery = _delivery(session, notification_id, user.id)

    routed = router.route(session, notification, delivery, user)

    assert routed.is_email_sent is True
    assert len(mail_sender.messages) == 1


def test_email_retries_stop_after_max_attempts(
    session, make_user, templates, failing_mail_sender
) -> None:
    from notification_engine.application.use_cases.notifications import DeliveryRouter

    user = make_user("admin")
    sender = failing_mail_sender
    router = DeliveryRouter(mail_sender=sender, realtime_dispatcher=lambda n, d: None)
    notification_id = _publish_order(session, router, recipient_id=user.id)
    notification = NotificationRepository(session).get(notification_id)

    for _ in range(5):
        router.route(
            session, notification, _delivery(session, notification_id, user.id), user
        )

    assert len(sender.messages) == 3
    assert _delivery(session, notification_id, user.id).email_attempts == 3


def test_missing_language_falls_back_to_default(
    session, make_user, templates, router
) -> None:
    user = make_user("staff", language="fr")

    notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.language == "en"
    assert delivery.title == "New Order #12"


def test_preference_language_selects_arabic_variant(session, make_user, templates, router) -> None:
    user = make_user("staff")
    update_preference(session, user_id=user.id, notification_type="order_created", language="ar")

    notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.language == "ar"
    assert delivery.title == "طلب جديد #12"


def test_missing_templates_skip_only_that_recipient_channel(
    session, make_user, router, mail_sender, caplog
) -> None:
    user = make_user("staff")

    with caplog.at_level(logging.WARNING):
        notification_id = _publish_order(session, router, recipient_id=user.id)

    delivery = _delivery(session, notification_id, user.id)
    assert delivery.is_visible is False
    assert mail_sender.messages == []
    assert "Missing in_app template for order_created" in caplog.text
    assert "Missing email template for order_created" in caplog.text


def test_user_without_email_gets_in_app_only(session, make_user, templates, router, mail_sender):
    user = make_user("staff", email="")

    notification_id = _publish_order(session, router, recipient_id=user.id)

    assert _delivery(session, notification_id, user.id).title == "New Order #12"
    assert mail_sender.messages == []
    assert UserRepository(session).get(user.id).email == ""
