"""Domain entities for broadcast notifications and their per-user deliveries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from notification_engine.domain.event_types import ALL_ROLES, NotificationType, Priority


@dataclass
class NotificationEvent:
    """A business occurrence handed to the engine for publishing.

    ``target_roles`` empty (or containing ``"all"``) addresses every active
    user; ``recipient_ids`` overrides role resolution entirely.
    ``priority`` falls back to the type default when omitted.
    """

    type: NotificationType | str
    payload: dict[str, Any] = field(default_factory=dict)
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    target_roles: tuple[str, ...] | None = None
    recipient_ids: tuple[int, ...] | None = None
    priority: Priority | None = None
    created_by: int | None = None

    def targets_everyone(self) -> bool:
        roles = self.target_roles or ()
        return not roles or ALL_ROLES in roles


@dataclass
class Notification:
    """Immutable broadcast record created once per published event."""

    id: int | None
    type: NotificationType
    payload: dict[str, Any]
    priority: Priority
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    target_roles: list[str] = field(default_factory=list)
    recipient_ids: list[int] | None = None
    created_by: int | None = None
    created_at: datetime | None = None


@dataclass
class Delivery:
    """One recipient's read, visibility and email state for a notification."""

    id: int | None
    notification_id: int
    user_id: int
    is_read: bool = False
    read_at: datetime | None = None
    is_visible: bool = True
    hidden_at: datetime | None = None
    is_email_sent: bool = False
    email_sent_at: datetime | None = None
    email_attempts: int = 0
    title: str | None = None
    message: str | None = None
    language: str | None = None
    created_at: datetime | None = None


@dataclass
class InboxEntry:
    """A visible delivery joined with the notification it points to."""

    notification: Notification
    delivery: Delivery


__all__ = ["Delivery", "InboxEntry", "Notification", "NotificationEvent"]
