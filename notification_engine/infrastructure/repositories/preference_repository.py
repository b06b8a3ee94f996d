"""Persistence helpers for notification preferences."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationPreference
from notification_engine.domain.event_types import NotificationType
from notification_engine.infrastructure.models import NotificationPreferenceModel


class PreferenceRepository:
    """Provide lookups and upserts for :class:`NotificationPreference`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(
        self, user_id: int, notification_type: NotificationType
    ) -> NotificationPreference | None:
        model = self._get_model(user_id, notification_type)
        return self._to_entity(model) if model else None

    def list_for_user(self, user_id: int) -> Sequence[NotificationPreference]:
        query = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == user_id)
            .order_by(NotificationPreferenceModel.notification_type)
        )
        return [self._to_entity(model) for model in query.all()]

    def get_map_for_users(
        self, user_ids: Sequence[int], notification_types: Sequence[NotificationType]
    ) -> dict[tuple[int, NotificationType], NotificationPreference]:
        """Return preferences keyed by (user id, type) for a batch of users."""

        if not user_ids or not notification_types:
            return {}
        query = self.session.query(NotificationPreferenceModel).filter(
            NotificationPreferenceModel.user_id.in_(set(user_ids)),
            NotificationPreferenceModel.notification_type.in_(
                {notification_type.value for notification_type in notification_types}
            ),
        )
        preferences = (self._to_entity(model) for model in query.all())
        return {
            (preference.user_id, preference.notification_type): preference
            for preference in preferences
        }

    def upsert(self, preference: NotificationPreference) -> NotificationPreference:
        model = self._get_model(preference.user_id, preference.notification_type)
        if model is None:
            model = NotificationPreferenceModel(
                user_id=preference.user_id,
                notification_type=preference.notification_type.value,
            )
        model.in_app_enabled = preference.in_app_enabled
        model.email_enabled = preference.email_enabled
        model.language = preference.language
        model.threshold = preference.threshold
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def create_if_missing(self, preference: NotificationPreference) -> bool:
        """Insert ``preference`` unless the user already has one for the type."""

        if self._get_model(preference.user_id, preference.notification_type) is not None:
            return False
        self.upsert(preference)
        return True

    def _get_model(
        self, user_id: int, notification_type: NotificationType
    ) -> NotificationPreferenceModel | None:
        return (
            self.session.query(NotificationPreferenceModel)
            .filter(
                NotificationPreferenceModel.user_id == user_id,
                NotificationPreferenceModel.notification_type == notification_type.value,
            )
            .first()
        )

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        return NotificationPreference(
            id=model.id,
            user_id=model.user_id,
            notification_type=NotificationType(model.notification_type),
            in_app_enabled=model.in_app_enabled,
            email_enabled=model.email_enabled,
            language=model.language,
            threshold=model.threshold,
        )


__all__ = ["PreferenceRepository"]
