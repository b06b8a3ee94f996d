"""Resolve the preference that actually applies to a recipient."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from notification_engine.config import Settings, get_settings
from notification_engine.domain.entities import NotificationPreference, Thresholds, User
from notification_engine.domain.event_types import STOCK_TYPES, NotificationType
from notification_engine.domain.thresholds import coerce_thresholds, default_thresholds

logger = logging.getLogger(__name__)

# Stock preferences are consulted in this order when building a user's thresholds;
# the legacy ``{"quantity": n}`` shape sets the band named after the type.
_THRESHOLD_SOURCES: tuple[tuple[NotificationType, str | None], ...] = (
    (NotificationType.STOCK_LOW, "low"),
    (NotificationType.STOCK_MEDIUM, "medium"),
    (NotificationType.STOCK_OUT, None),
)


@dataclass(frozen=True)
class EffectivePreference:
    """Stored preference merged with the system defaults."""

    user_id: int
    notification_type: NotificationType
    in_app_enabled: bool
    email_enabled: bool
    language: str
    thresholds: Thresholds | None = None
    amount_threshold: float | None = None
    is_default: bool = True


def system_thresholds(settings: Settings | None = None) -> Thresholds:
    settings = settings or get_settings()
    return default_thresholds(settings.stock_low_default, settings.stock_medium_default)


def resolve_stock_thresholds(
    user_id: int,
    preferences: Mapping[NotificationType, NotificationPreference],
    *,
    defaults: Thresholds,
) -> Thresholds:
    """Combine the user's stock preferences into one validated threshold pair."""

    raw: dict[str, Any] = {}
    for notification_type, legacy_band in _THRESHOLD_SOURCES:
        preference = preferences.get(notification_type)
        stored = preference.threshold if preference else None
        if not isinstance(stored, Mapping):
            continue
        for key in ("low", "medium"):
            if key in stored:
                raw.setdefault(key, stored[key])
        if legacy_band and "quantity" in stored:
            raw.setdefault(legacy_band, stored["quantity"])

    return coerce_thresholds(raw, defaults=defaults, context=f"user {user_id}")


def resolve_amount_threshold(
    preference: NotificationPreference | None, *, default: float
) -> float:
    """Return the order total from which a high-value alert applies.

    Stored values that are not positive numbers are replaced by ``default``.
    """

    stored = preference.threshold if preference else None
    if not isinstance(stored, Mapping) or stored.get("amount") is None:
        return default
    try:
        amount = float(stored["amount"])
    except (TypeError, ValueError):
        amount = 0.0
    if amount <= 0:
        logger.warning(
            "Ignoring invalid high-value threshold %r of user %s; using %s",
            stored["amount"],
            preference.user_id,
            default,
        )
        return default
    return amount


def resolve_effective_preference(
    user: User,
    notification_type: NotificationType,
    preference: NotificationPreference | None,
    *,
    stock_preferences: Mapping[NotificationType, NotificationPreference] | None = None,
    settings: Settings | None = None,
) -> EffectivePreference:
    """Return ``preference`` with gaps filled from the account and settings.

    A missing preference enables both channels and uses the account language.
    """

    settings = settings or get_settings()
    language = (
        (preference.language if preference else None)
        or user.language
        or settings.default_language
    )

    thresholds = None
    if notification_type in STOCK_TYPES:
        sources = dict(stock_preferences or {})
        if preference is not None:
            sources.setdefault(notification_type, preference)
        thresholds = resolve_stock_thresholds(
            user.id, sources, defaults=system_thresholds(settings)
        )

    amount_threshold = None
    if notification_type is NotificationType.ORDER_HIGH_VALUE:
        amount_threshold = resolve_amount_threshold(
            preference, default=settings.high_value_order_default
        )

    if preference is None:
        return EffectivePreference(
            user_id=user.id,
            notification_type=notification_type,
            in_app_enabled=True,
            email_enabled=True,
            language=language,
            thresholds=thresholds,
            amount_threshold=amount_threshold,
        )
    return EffectivePreference(
        user_id=user.id,
        notification_type=notification_type,
        in_app_enabled=preference.in_app_enabled,
        email_enabled=preference.email_enabled,
        language=language,
        thresholds=thresholds,
        amount_threshold=amount_threshold,
        is_default=False,
    )


__all__ = [
    "EffectivePreference",
    "resolve_amount_threshold",
    "resolve_effective_preference",
    "resolve_stock_thresholds",
    "system_thresholds",
]
