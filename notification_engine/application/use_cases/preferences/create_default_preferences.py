"""Use case for seeding the role-based preferences of a new account."""

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationPreference
from notification_engine.domain.event_types import NotificationType
from notification_engine.infrastructure.repositories import PreferenceRepository, UserRepository

# (type, in-app enabled, email enabled) per role alias
DEFAULT_PREFERENCES: dict[str, tuple[tuple[NotificationType, bool, bool], ...]] = {
    "admin": (
        (NotificationType.ORDER_CREATED, True, True),
        (NotificationType.ORDER_UPDATED, True, False),
        (NotificationType.ORDER_STATUS_CHANGED, True, False),
        (NotificationType.ORDER_FAILED, True, True),
        (NotificationType.ORDER_HIGH_VALUE, True, True),
        (NotificationType.PAYMENT_FAILED, True, True),
        (NotificationType.STOCK_MEDIUM, True, False),
        (NotificationType.STOCK_LOW, True, True),
        (NotificationType.STOCK_OUT, True, True),
        (NotificationType.CUSTOMER_REGISTERED, True, False),
        (NotificationType.SYSTEM_ALERT, True, True),
        (NotificationType.MAINTENANCE_NOTICE, True, True),
    ),
    "staff": (
        (NotificationType.ORDER_CREATED, True, False),
        (NotificationType.ORDER_UPDATED, True, False),
        (NotificationType.ORDER_STATUS_CHANGED, True, False),
        (NotificationType.PAYMENT_FAILED, True, False),
        (NotificationType.STOCK_LOW, True, False),
        (NotificationType.STOCK_OUT, True, True),
        (NotificationType.CUSTOMER_REGISTERED, True, False),
    ),
    "user": (
        (NotificationType.ORDER_CREATED, True, False),
        (NotificationType.ORDER_STATUS_CHANGED, True, False),
    ),
}


def create_default_preferences(session: Session, *, user_id: int) -> int:
    """Insert the defaults for the user's role, keeping existing rows.

    Returns the number of preferences created.
    """

    user = UserRepository(session).get(user_id)
    if user is None:
        raise ValueError("User not found")

    defaults = DEFAULT_PREFERENCES.get(user.role.alias.lower(), DEFAULT_PREFERENCES["user"])
    repository = PreferenceRepository(session)
    created = 0
    for notification_type, in_app_enabled, email_enabled in defaults:
        if repository.create_if_missing(
            NotificationPreference(
                id=None,
                user_id=user_id,
                notification_type=notification_type,
                in_app_enabled=in_app_enabled,
                email_enabled=email_enabled,
                language=user.language,
            )
        ):
            created += 1
    return created
