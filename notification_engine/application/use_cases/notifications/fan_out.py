"""Resolve the recipients of a notification and create their deliveries."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Delivery, Notification, User
from notification_engine.domain.event_types import ALL_ROLES, get_policy
from notification_engine.infrastructure.repositories import (
    DeliveryRepository,
    NotificationRepository,
    UserRepository,
)

from .route_delivery import DeliveryRouter

logger = logging.getLogger(__name__)


def resolve_recipients(session: Session, notification: Notification) -> list[User]:
    """Return the active users a notification is addressed to.

    Explicit recipient identifiers win over roles; no roles (or ``"all"``)
    address every active user. The author is dropped for types whose policy
    does not notify authors.
    """

    repository = UserRepository(session)
    if notification.recipient_ids is not None:
        users = repository.list_active(user_ids=notification.recipient_ids)
    elif not notification.target_roles or ALL_ROLES in notification.target_roles:
        users = repository.list_active()
    else:
        users = repository.list_active(role_aliases=notification.target_roles)

    if notification.created_by is not None and not get_policy(notification.type).notify_author:
        users = [user for user in users if user.id != notification.created_by]
    return list(users)


def fan_out(
    session: Session,
    notification_id: int,
    *,
    router: DeliveryRouter | None = None,
) -> list[Delivery]:
    """Create missing deliveries for ``notification_id`` and route each new one.

    Safe to run repeatedly: recipients that already hold a delivery are
    skipped. Each recipient is routed independently, so a failure for one
    is logged and the others still proceed.
    """

    notification = NotificationRepository(session).get(notification_id)
    if notification is None:
        raise ValueError(f"Notification with id {notification_id} not found")

    recipients = resolve_recipients(session, notification)
    if not recipients:
        logger.info(
            "Notification %s (%s) resolved no recipients",
            notification.id,
            notification.type.value,
        )
        return []

    created = DeliveryRepository(session).create_many(
        notification.id, [user.id for user in recipients]
    )
    logger.info(
        "Notification %s (%s) fanned out to %s of %s recipients",
        notification.id,
        notification.type.value,
        len(created),
        len(recipients),
    )

    router = router or DeliveryRouter()
    users = {user.id: user for user in recipients}
    return _route_all(session, router, notification, created, users)


def _route_all(
    session: Session,
    router: DeliveryRouter,
    notification: Notification,
    deliveries: Sequence[Delivery],
    users: dict[int, User],
) -> list[Delivery]:
    routed: list[Delivery] = []
    for delivery in deliveries:
        try:
            routed.append(router.route(session, notification, delivery, users[delivery.user_id]))
        except Exception:
            session.rollback()
            logger.exception(
                "Routing notification %s to user %s failed",
                notification.id,
                delivery.user_id,
            )
            routed.append(delivery)
    return routed


__all__ = ["fan_out", "resolve_recipients"]
