"""Notification types, channels and the per-type delivery policy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NotificationType(str, Enum):
    """Business events the engine knows how to notify about."""

    ORDER_CREATED = "order_created"
    ORDER_UPDATED = "order_updated"
    ORDER_STATUS_CHANGED = "order_status_changed"
    ORDER_FAILED = "order_failed"
    ORDER_HIGH_VALUE = "order_high_value"
    PAYMENT_FAILED = "payment_failed"
    STOCK_MEDIUM = "stock_medium"
    STOCK_LOW = "stock_low"
    STOCK_OUT = "stock_out"
    CUSTOMER_REGISTERED = "customer_registered"
    SYSTEM_ALERT = "system_alert"
    MAINTENANCE_NOTICE = "maintenance_notice"


class Channel(str, Enum):
    """Delivery medium with its own template and enablement flag."""

    IN_APP = "in_app"
    EMAIL = "email"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ALL_ROLES = "all"


@dataclass(frozen=True)
class EventTypePolicy:
    """Static rules applied when an event of a given type is published."""

    target_roles: tuple[str, ...]
    priority: Priority
    required_fields: tuple[str, ...] = ()
    notify_author: bool = True
    is_stock: bool = False


_STOCK_FIELDS = ("productId", "productName", "currentStock")

EVENT_POLICIES: dict[NotificationType, EventTypePolicy] = {
    NotificationType.ORDER_CREATED: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.MEDIUM,
        required_fields=("orderId", "customerName", "totalAmount"),
        notify_author=False,
    ),
    NotificationType.ORDER_UPDATED: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.MEDIUM,
        required_fields=("orderId", "customerName"),
        notify_author=False,
    ),
    NotificationType.ORDER_STATUS_CHANGED: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.MEDIUM,
        required_fields=("orderId", "oldStatus", "newStatus"),
        notify_author=False,
    ),
    NotificationType.ORDER_FAILED: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.CRITICAL,
        required_fields=("orderId", "errorMessage"),
    ),
    NotificationType.ORDER_HIGH_VALUE: EventTypePolicy(
        target_roles=("admin",),
        priority=Priority.HIGH,
        required_fields=("orderId", "customerName", "totalAmount"),
    ),
    NotificationType.PAYMENT_FAILED: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.HIGH,
        required_fields=("orderId", "paymentError"),
    ),
    NotificationType.STOCK_MEDIUM: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.LOW,
        required_fields=_STOCK_FIELDS,
        is_stock=True,
    ),
    NotificationType.STOCK_LOW: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.MEDIUM,
        required_fields=_STOCK_FIELDS,
        is_stock=True,
    ),
    NotificationType.STOCK_OUT: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.CRITICAL,
        required_fields=_STOCK_FIELDS,
        is_stock=True,
    ),
    NotificationType.CUSTOMER_REGISTERED: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.LOW,
        required_fields=("customerId", "customerName"),
        notify_author=False,
    ),
    NotificationType.SYSTEM_ALERT: EventTypePolicy(
        target_roles=("admin",),
        priority=Priority.HIGH,
        required_fields=("message",),
    ),
    NotificationType.MAINTENANCE_NOTICE: EventTypePolicy(
        target_roles=("admin", "staff"),
        priority=Priority.MEDIUM,
        required_fields=("message", "scheduledTime"),
    ),
}

STOCK_TYPES: frozenset[NotificationType] = frozenset(
    notification_type
    for notification_type, policy in EVENT_POLICIES.items()
    if policy.is_stock
)


def parse_notification_type(value: str | NotificationType) -> NotificationType | None:
    """Return the matching :class:`NotificationType` or ``None`` when unknown."""

    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(value)
    except ValueError:
        return None


def get_policy(notification_type: NotificationType) -> EventTypePolicy:
    return EVENT_POLICIES[notification_type]


__all__ = [
    "ALL_ROLES",
    "Channel",
    "EVENT_POLICIES",
    "EventTypePolicy",
    "NotificationType",
    "Priority",
    "STOCK_TYPES",
    "get_policy",
    "parse_notification_type",
]
