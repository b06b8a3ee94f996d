"""Use case for changing one notification preference of a user."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.config import get_settings
from notification_engine.domain.entities import NotificationPreference, Thresholds
from notification_engine.domain.event_types import (
    STOCK_TYPES,
    NotificationType,
    parse_notification_type,
)
from notification_engine.domain.exceptions import ThresholdConfigurationError
from notification_engine.infrastructure.repositories import PreferenceRepository, UserRepository


def update_preference(
    session: Session,
    *,
    user_id: int,
    notification_type: str,
    in_app_enabled: bool | None = None,
    email_enabled: bool | None = None,
    language: str | None = None,
    threshold: Mapping[str, Any] | None = None,
) -> NotificationPreference:
    """Create or update the preference of ``user_id`` for ``notification_type``.

    Unlike the evaluator, which repairs bad stored data, explicit input is
    rejected: an invalid threshold raises :class:`ThresholdConfigurationError`.
    """

    resolved_type = parse_notification_type(notification_type)
    if resolved_type is None:
        raise ValueError(f"Unknown notification type '{notification_type}'")

    if UserRepository(session).get(user_id) is None:
        raise ValueError("User not found")

    settings = get_settings()
    if language is not None and language not in settings.supported_languages:
        raise ValueError(f"Unsupported language '{language}'")

    stored_threshold = None
    if threshold is not None:
        stored_threshold = _validated_threshold(resolved_type, threshold)

    repository = PreferenceRepository(session)
    current = repository.get(user_id, resolved_type)
    if current is None:
        current = NotificationPreference(
            id=None, user_id=user_id, notification_type=resolved_type
        )

    return repository.upsert(
        NotificationPreference(
            id=current.id,
            user_id=user_id,
            notification_type=resolved_type,
            in_app_enabled=(
                in_app_enabled if in_app_enabled is not None else current.in_app_enabled
            ),
            email_enabled=email_enabled if email_enabled is not None else current.email_enabled,
            language=language if language is not None else current.language,
            threshold=stored_threshold if stored_threshold is not None else current.threshold,
        )
    )


def _validated_threshold(
    notification_type: NotificationType, threshold: Mapping[str, Any]
) -> dict[str, Any]:
    if notification_type is NotificationType.ORDER_HIGH_VALUE:
        if threshold.get("amount") is None:
            raise ThresholdConfigurationError("Threshold 'amount' is required")
        try:
            amount = float(threshold["amount"])
        except (TypeError, ValueError) as exc:
            raise ThresholdConfigurationError("Threshold 'amount' must be a number") from exc
        if amount <= 0:
            raise ThresholdConfigurationError("Threshold 'amount' must be positive")
        return {"amount": amount}

    if notification_type not in STOCK_TYPES:
        raise ValueError("Thresholds only apply to stock and high-value order notifications")
    try:
        thresholds = Thresholds(low=threshold["low"], medium=threshold["medium"])
    except KeyError as exc:
        raise ThresholdConfigurationError(f"Threshold '{exc.args[0]}' is required") from exc
    return thresholds.as_dict()
