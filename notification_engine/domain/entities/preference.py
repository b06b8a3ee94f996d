"""Domain entities describing per-user notification preferences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from notification_engine.domain.event_types import NotificationType
from notification_engine.domain.exceptions import ThresholdConfigurationError


@dataclass(frozen=True)
class Thresholds:
    """Upper bounds of the low and medium stock bands.

    Construction enforces ``0 < low < medium``.
    """

    low: int
    medium: int

    def __post_init__(self) -> None:
        for name in ("low", "medium"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ThresholdConfigurationError(f"Threshold '{name}' must be an integer")
        if not 0 < self.low < self.medium:
            raise ThresholdConfigurationError(
                f"Thresholds must satisfy 0 < low < medium (got low={self.low}, medium={self.medium})"
            )

    def as_dict(self) -> dict[str, int]:
        return {"low": self.low, "medium": self.medium}


@dataclass
class NotificationPreference:
    """Settings a user keeps for one notification type.

    ``threshold`` holds the raw stored structure; it is only interpreted for
    stock types, through :func:`notification_engine.domain.thresholds.coerce_thresholds`.
    """

    id: int | None
    user_id: int
    notification_type: NotificationType
    in_app_enabled: bool = True
    email_enabled: bool = True
    language: str | None = None
    threshold: dict[str, Any] | None = None


__all__ = ["NotificationPreference", "Thresholds"]
