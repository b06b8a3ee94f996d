"""Domain entities for notification templates and their rendered output."""

from __future__ import annotations

from dataclasses import dataclass

from notification_engine.domain.event_types import Channel, NotificationType, Priority


@dataclass
class NotificationTemplate:
    """Patterns stored for one (type, language, channel) key."""

    id: int | None
    type: NotificationType
    language: str
    channel: Channel
    title_pattern: str
    message_pattern: str
    email_subject_pattern: str | None = None
    email_html_pattern: str | None = None
    priority: Priority = Priority.MEDIUM
    is_active: bool = True

    @property
    def key(self) -> tuple[NotificationType, str, Channel]:
        return (self.type, self.language, self.channel)


@dataclass(frozen=True)
class RenderedNotification:
    title: str
    message: str
    subject: str | None = None
    html: str | None = None


__all__ = ["NotificationTemplate", "RenderedNotification"]
