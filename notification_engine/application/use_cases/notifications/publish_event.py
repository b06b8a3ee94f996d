"""Use case for publishing a business event as a notification."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Notification, NotificationEvent
from notification_engine.domain.event_types import (
    ALL_ROLES,
    EventTypePolicy,
    NotificationType,
    Priority,
    get_policy,
    parse_notification_type,
)
from notification_engine.domain.exceptions import EventValidationError
from notification_engine.infrastructure.repositories import NotificationRepository
from notification_engine.utils import now_in_app_timezone

from .fan_out import fan_out
from .route_delivery import DeliveryRouter

logger = logging.getLogger(__name__)

_MISSING = object()


def _lookup(payload: Mapping[str, Any], path: str) -> Any:
    current: Any = payload
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def validate_event(event: NotificationEvent) -> tuple[NotificationType, EventTypePolicy]:
    """Return the event type and its policy, or raise :class:`EventValidationError`."""

    notification_type = parse_notification_type(event.type)
    if notification_type is None:
        logger.error("Rejected event with unknown type '%s'", event.type)
        raise EventValidationError(f"Unknown notification type '{event.type}'")

    policy = get_policy(notification_type)
    payload = event.payload if isinstance(event.payload, Mapping) else {}
    missing = [
        field
        for field in policy.required_fields
        if _lookup(payload, field) in (_MISSING, None, "")
    ]
    if missing:
        logger.error(
            "Rejected %s event missing payload fields: %s",
            notification_type.value,
            ", ".join(missing),
        )
        raise EventValidationError(
            f"Event '{notification_type.value}' is missing required fields: {', '.join(missing)}"
        )
    if event.priority is not None:
        try:
            Priority(event.priority)
        except ValueError as exc:
            logger.error(
                "Rejected %s event with unknown priority '%s'",
                notification_type.value,
                event.priority,
            )
            raise EventValidationError(f"Unknown priority '{event.priority}'") from exc
    return notification_type, policy


def publish_event(
    session: Session,
    event: NotificationEvent,
    *,
    router: DeliveryRouter | None = None,
) -> int:
    """Persist the broadcast record for ``event`` and fan it out.

    Invalid events are rejected before anything is written. The returned
    identifier can be handed to :func:`fan_out` again to resume an
    interrupted fan-out.
    """

    notification_type, policy = validate_event(event)
    target_roles = [ALL_ROLES] if event.targets_everyone() else list(event.target_roles)
    notification = NotificationRepository(session).create(
        Notification(
            id=None,
            type=notification_type,
            payload=dict(event.payload),
            priority=Priority(event.priority) if event.priority else policy.priority,
            related_entity_type=event.related_entity_type,
            related_entity_id=event.related_entity_id,
            target_roles=target_roles,
            recipient_ids=(
                list(event.recipient_ids) if event.recipient_ids is not None else None
            ),
            created_by=event.created_by,
            created_at=now_in_app_timezone(),
        )
    )
    fan_out(session, notification.id, router=router)
    return notification.id


__all__ = ["publish_event", "validate_event"]
