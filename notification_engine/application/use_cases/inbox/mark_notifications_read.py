"""Use cases for read-state toggles on deliveries."""

import logging

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Delivery
from notification_engine.infrastructure.repositories import DeliveryRepository

logger = logging.getLogger(__name__)


def mark_notification_read(session: Session, *, notification_id: int, user_id: int) -> Delivery:
    """Mark the delivery of ``notification_id`` to ``user_id`` as read."""

    delivery = DeliveryRepository(session).mark_as_read(
        notification_id=notification_id, user_id=user_id
    )
    if delivery is None:
        raise ValueError("Notification not found")
    return delivery


def mark_all_notifications_read(session: Session, *, user_id: int) -> int:
    """Mark every visible unread delivery of ``user_id`` as read."""

    updated = DeliveryRepository(session).mark_all_as_read(user_id)
    logger.info("Marked %s notifications as read for user %s", updated, user_id)
    return updated
