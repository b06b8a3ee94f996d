"""Use case for listing the preferences that apply to a user."""

from sqlalchemy.orm import Session

from notification_engine.domain.event_types import STOCK_TYPES, NotificationType
from notification_engine.infrastructure.repositories import PreferenceRepository, UserRepository

from .effective_preference import EffectivePreference, resolve_effective_preference


def list_preferences(session: Session, *, user_id: int) -> list[EffectivePreference]:
    """Return one effective preference per notification type for ``user_id``."""

    user = UserRepository(session).get(user_id)
    if user is None:
        raise ValueError("User not found")

    stored = {
        preference.notification_type: preference
        for preference in PreferenceRepository(session).list_for_user(user_id)
    }
    stock_preferences = {
        notification_type: preference
        for notification_type, preference in stored.items()
        if notification_type in STOCK_TYPES
    }
    return [
        resolve_effective_preference(
            user,
            notification_type,
            stored.get(notification_type),
            stock_preferences=stock_preferences,
        )
        for notification_type in NotificationType
    ]
