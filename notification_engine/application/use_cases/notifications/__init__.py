"""Publishing, fan-out and routing of notifications."""

from .events import (
    notify_customer_created_during_order,
    notify_customer_registered,
    notify_high_value_order,
    notify_maintenance_notice,
    notify_order_created,
    notify_order_failed,
    notify_order_status_changed,
    notify_order_updated,
    notify_payment_failed,
    notify_system_alert,
)
from .fan_out import fan_out, resolve_recipients
from .get_statistics import NotificationStatistics, get_notification_statistics
from .publish_broadcast import BroadcastResult, publish_broadcast
from .publish_event import publish_event, validate_event
from .route_delivery import DeliveryRouter, build_template_variables, route_delivery

__all__ = [
    "BroadcastResult",
    "DeliveryRouter",
    "NotificationStatistics",
    "build_template_variables",
    "fan_out",
    "get_notification_statistics",
    "notify_customer_created_during_order",
    "notify_customer_registered",
    "notify_high_value_order",
    "notify_maintenance_notice",
    "notify_order_created",
    "notify_order_failed",
    "notify_order_status_changed",
    "notify_order_updated",
    "notify_payment_failed",
    "notify_system_alert",
    "publish_broadcast",
    "publish_event",
    "resolve_recipients",
    "route_delivery",
    "validate_event",
]
