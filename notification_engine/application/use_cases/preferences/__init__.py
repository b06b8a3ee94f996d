"""Use cases for notification preferences."""

from .create_default_preferences import DEFAULT_PREFERENCES, create_default_preferences
from .effective_preference import (
    EffectivePreference,
    resolve_amount_threshold,
    resolve_effective_preference,
    resolve_stock_thresholds,
    system_thresholds,
)
from .list_preferences import list_preferences
from .update_preference import update_preference

__all__ = [
    "DEFAULT_PREFERENCES",
    "EffectivePreference",
    "create_default_preferences",
    "list_preferences",
    "resolve_amount_threshold",
    "resolve_effective_preference",
    "resolve_stock_thresholds",
    "system_thresholds",
    "update_preference",
]
