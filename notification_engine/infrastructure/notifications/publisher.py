"""Push freshly rendered in-app deliveries to connected clients."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from notification_engine.domain.entities import Delivery, Notification

from .manager import InboxConnections, inbox_connections

logger = logging.getLogger(__name__)


class DeliveryPublisher:
    """Serialize deliveries and schedule them on the event loop."""

    def __init__(self, connections: InboxConnections) -> None:
        self._connections = connections

    def dispatch(self, notification: Notification, delivery: Delivery) -> None:
        """Schedule ``delivery`` for its recipient; no-op when nobody listens."""

        if not self._connections.count(delivery.user_id):
            return

        message = {"type": "notification", "data": serialize_delivery(notification, delivery)}
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._connections.push, delivery.user_id, message)
            except RuntimeError:
                # Called outside both the event loop and an AnyIO worker thread.
                logger.debug(
                    "No event loop available to push delivery %s to user %s",
                    delivery.id,
                    delivery.user_id,
                )
        else:
            loop.create_task(self._connections.push(delivery.user_id, message))


def serialize_delivery(notification: Notification, delivery: Delivery) -> dict[str, Any]:
    """Return the JSON representation shared by the websocket and the REST inbox."""

    return {
        "id": notification.id,
        "delivery_id": delivery.id,
        "type": notification.type.value,
        "priority": notification.priority.value,
        "title": delivery.title,
        "message": delivery.message,
        "language": delivery.language,
        "payload": notification.payload or {},
        "related_entity_type": notification.related_entity_type,
        "related_entity_id": notification.related_entity_id,
        "created_by": notification.created_by,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
        "is_read": delivery.is_read,
        "read_at": delivery.read_at.isoformat() if delivery.read_at else None,
        "is_email_sent": delivery.is_email_sent,
    }


delivery_publisher = DeliveryPublisher(inbox_connections)


def dispatch_delivery(notification: Notification, delivery: Delivery) -> None:
    """Public helper that delegates to the shared publisher instance."""

    delivery_publisher.dispatch(notification, delivery)


__all__ = [
    "DeliveryPublisher",
    "delivery_publisher",
    "dispatch_delivery",
    "serialize_delivery",
]
