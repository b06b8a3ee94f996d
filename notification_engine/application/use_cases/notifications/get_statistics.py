"""Use case summarizing notification volume and read rates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from notification_engine.infrastructure.repositories import (
    DeliveryRepository,
    NotificationRepository,
)
from notification_engine.utils import ensure_app_timezone


@dataclass(frozen=True)
class NotificationStatistics:
    total_notifications: int
    total_deliveries: int
    unread_deliveries: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)

    @property
    def read_rate(self) -> float:
        """Percentage of deliveries already read, rounded to two decimals."""

        if not self.total_deliveries:
            return 0.0
        read = self.total_deliveries - self.unread_deliveries
        return round(read * 100 / self.total_deliveries, 2)


def get_notification_statistics(
    session: Session,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> NotificationStatistics:
    """Count notifications created in ``[start, end]`` and their deliveries."""

    start, end = ensure_app_timezone(start), ensure_app_timezone(end)
    if start is not None and end is not None and start > end:
        raise ValueError("The start of the period must not be after its end")

    notifications = NotificationRepository(session)
    deliveries = DeliveryRepository(session)
    return NotificationStatistics(
        total_notifications=notifications.count_created(start=start, end=end),
        total_deliveries=deliveries.count_deliveries(start=start, end=end),
        unread_deliveries=deliveries.count_deliveries(start=start, end=end, unread_only=True),
        by_type=notifications.count_by_column("type", start=start, end=end),
        by_priority=notifications.count_by_column("priority", start=start, end=end),
    )


__all__ = ["NotificationStatistics", "get_notification_statistics"]
