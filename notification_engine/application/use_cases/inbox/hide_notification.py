"""Use case for removing a notification from a user's inbox."""

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Delivery
from notification_engine.infrastructure.repositories import DeliveryRepository


def hide_notification(session: Session, *, notification_id: int, user_id: int) -> Delivery:
    """Hide the delivery without deleting it; it stays available for audit."""

    repository = DeliveryRepository(session)
    delivery = repository.get_for_user(notification_id=notification_id, user_id=user_id)
    if delivery is None:
        raise ValueError("Notification not found")
    return repository.hide(delivery.id)
