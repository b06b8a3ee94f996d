"""Use case for an administrator broadcast to roles or chosen users."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationEvent
from notification_engine.domain.event_types import Priority
from notification_engine.infrastructure.repositories import DeliveryRepository

from .publish_event import publish_event
from .route_delivery import DeliveryRouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BroadcastResult:
    notification_id: int
    recipient_count: int


def publish_broadcast(
    session: Session,
    *,
    notification_type: str,
    payload: Mapping[str, Any],
    priority: Priority | str | None = None,
    target_roles: Iterable[str] | None = None,
    user_ids: Iterable[int] | None = None,
    related_entity_type: str | None = None,
    related_entity_id: int | None = None,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> BroadcastResult:
    """Publish a manually composed notification.

    ``user_ids`` addresses exactly those users and wins over ``target_roles``.
    Without either the broadcast reaches every active user. Invalid types or
    payloads raise :class:`EventValidationError` before anything is stored.
    """

    recipient_ids = tuple(int(user_id) for user_id in user_ids or ())
    event = NotificationEvent(
        type=notification_type,
        payload=dict(payload),
        priority=priority,
        target_roles=tuple(target_roles or ()) or None,
        recipient_ids=recipient_ids or None,
        related_entity_type=related_entity_type,
        related_entity_id=related_entity_id,
        created_by=created_by,
    )
    notification_id = publish_event(session, event, router=router)
    recipient_count = len(DeliveryRepository(session).list_for_notification(notification_id))
    logger.info(
        "Broadcast %s notification %s to %s recipients",
        notification_type,
        notification_id,
        recipient_count,
    )
    return BroadcastResult(notification_id=notification_id, recipient_count=recipient_count)


__all__ = ["BroadcastResult", "publish_broadcast"]
