"""Persistence helpers for notification templates."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationTemplate
from notification_engine.domain.event_types import Channel, NotificationType, Priority
from notification_engine.infrastructure.models import NotificationTemplateModel


class TemplateRepository:
    """Read templates by key and upsert seed data."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(
        self, notification_type: NotificationType, language: str, channel: Channel
    ) -> NotificationTemplate | None:
        model = (
            self.session.query(NotificationTemplateModel)
            .filter(
                NotificationTemplateModel.type == notification_type.value,
                NotificationTemplateModel.language == language,
                NotificationTemplateModel.channel == channel.value,
                NotificationTemplateModel.is_active.is_(True),
            )
            .first()
        )
        return self._to_entity(model) if model else None

    def list_active(self) -> Sequence[NotificationTemplate]:
        query = (
            self.session.query(NotificationTemplateModel)
            .filter(NotificationTemplateModel.is_active.is_(True))
            .order_by(
                NotificationTemplateModel.type,
                NotificationTemplateModel.language,
                NotificationTemplateModel.channel,
            )
        )
        return [self._to_entity(model) for model in query.all()]

    def upsert(self, template: NotificationTemplate) -> NotificationTemplate:
        """Insert ``template`` or overwrite the row holding the same key."""

        model = (
            self.session.query(NotificationTemplateModel)
            .filter(
                NotificationTemplateModel.type == template.type.value,
                NotificationTemplateModel.language == template.language,
                NotificationTemplateModel.channel == template.channel.value,
            )
            .first()
        )
        if model is None:
            model = NotificationTemplateModel()
        self._apply_entity_to_model(model, template)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationTemplateModel, template: NotificationTemplate
    ) -> None:
        model.type = template.type.value
        model.language = template.language
        model.channel = template.channel.value
        model.title = template.title_pattern
        model.message = template.message_pattern
        model.email_subject = template.email_subject_pattern
        model.email_html = template.email_html_pattern
        model.priority = template.priority.value
        model.is_active = template.is_active

    @staticmethod
    def _to_entity(model: NotificationTemplateModel) -> NotificationTemplate:
        return NotificationTemplate(
            id=model.id,
            type=NotificationType(model.type),
            language=model.language,
            channel=Channel(model.channel),
            title_pattern=model.title,
            message_pattern=model.message,
            email_subject_pattern=model.email_subject,
            email_html_pattern=model.email_html,
            priority=Priority(model.priority),
            is_active=model.is_active,
        )


__all__ = ["TemplateRepository"]
