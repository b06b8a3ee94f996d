"""Use cases backing the client-facing notification inbox."""

from .hide_notification import hide_notification
from .list_user_notifications import (
    MAX_PAGE_SIZE,
    InboxPage,
    count_unread_notifications,
    list_user_notifications,
)
from .mark_notifications_read import mark_all_notifications_read, mark_notification_read

__all__ = [
    "InboxPage",
    "MAX_PAGE_SIZE",
    "count_unread_notifications",
    "hide_notification",
    "list_user_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
]
