"""Domain entities exposed by the notification engine."""

from .notification import Delivery, InboxEntry, Notification, NotificationEvent
from .notification_template import NotificationTemplate, RenderedNotification
from .preference import NotificationPreference, Thresholds
from .role import Role
from .stock import Severity, StockEvaluation, StockTransition
from .user import User

__all__ = [
    "Delivery",
    "InboxEntry",
    "Notification",
    "NotificationEvent",
    "NotificationPreference",
    "NotificationTemplate",
    "RenderedNotification",
    "Role",
    "Severity",
    "StockEvaluation",
    "StockTransition",
    "Thresholds",
    "User",
]
