"""Persistence helpers for broadcast notification records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from notification_engine.domain.entities import Notification
from notification_engine.domain.event_types import NotificationType, Priority
from notification_engine.infrastructure.models import NotificationModel
from notification_engine.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Create and read :class:`Notification` rows; they are never updated."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: int) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self.to_entity(model) if model else None

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel(
            type=notification.type.value,
            payload=notification.payload or {},
            priority=notification.priority.value,
            related_entity_type=notification.related_entity_type,
            related_entity_id=notification.related_entity_id,
            target_roles=list(notification.target_roles or []),
            recipient_ids=(
                list(notification.recipient_ids)
                if notification.recipient_ids is not None
                else None
            ),
            created_by=notification.created_by,
            created_at=ensure_app_naive_datetime(
                notification.created_at or now_in_app_timezone()
            ),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self.to_entity(model)

    def count_created(
        self, *, start: datetime | None = None, end: datetime | None = None
    ) -> int:
        return self.filter_created(self.session.query(NotificationModel), start, end).count()

    def count_by_column(
        self,
        column_name: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict[str, int]:
        """Count notifications grouped by ``type`` or ``priority``."""

        column = getattr(NotificationModel, column_name)
        query = self.filter_created(
            self.session.query(column, func.count(NotificationModel.id)), start, end
        ).group_by(column)
        return {str(value): int(count) for value, count in query.all()}

    @staticmethod
    def filter_created(query: Query, start: datetime | None, end: datetime | None) -> Query:
        """Restrict ``query`` to notifications created within ``[start, end]``."""

        if start is not None:
            query = query.filter(NotificationModel.created_at >= ensure_app_naive_datetime(start))
        if end is not None:
            query = query.filter(NotificationModel.created_at <= ensure_app_naive_datetime(end))
        return query

    @staticmethod
    def to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            type=NotificationType(model.type),
            payload=model.payload or {},
            priority=Priority(model.priority),
            related_entity_type=model.related_entity_type,
            related_entity_id=model.related_entity_id,
            target_roles=list(model.target_roles or []),
            recipient_ids=model.recipient_ids,
            created_by=model.created_by,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
