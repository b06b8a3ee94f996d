"""Helpers that turn business changes into published notification events.

Each trigger is best effort: failures are logged and swallowed so that the
order, customer or system operation that called it is never rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.application.use_cases.preferences import resolve_amount_threshold
from notification_engine.config import get_settings
from notification_engine.domain.entities import NotificationEvent
from notification_engine.domain.event_types import NotificationType, Priority, get_policy
from notification_engine.infrastructure.repositories import PreferenceRepository, UserRepository
from notification_engine.utils import now_in_app_timezone

from .publish_event import publish_event
from .route_delivery import DeliveryRouter

logger = logging.getLogger(__name__)

STATUS_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "pending": "pending",
        "processing": "processing",
        "shipped": "shipped",
        "delivered": "delivered",
        "completed": "completed",
        "cancelled": "cancelled",
    },
    "ar": {
        "pending": "في الانتظار",
        "processing": "قيد المعالجة",
        "shipped": "تم الشحن",
        "delivered": "تم التسليم",
        "completed": "مكتمل",
        "cancelled": "ملغي",
    },
}


def _publish_safely(
    session: Session,
    event: NotificationEvent,
    *,
    router: DeliveryRouter | None = None,
) -> int | None:
    notification_type = NotificationType(event.type)
    if event.target_roles is None and event.recipient_ids is None:
        event.target_roles = get_policy(notification_type).target_roles
    try:
        return publish_event(session, event, router=router)
    except Exception:
        session.rollback()
        logger.exception(
            "Could not publish %s notification for %s %s",
            notification_type.value,
            event.related_entity_type,
            event.related_entity_id,
        )
        return None


def _customer_name(order: Mapping[str, Any]) -> str:
    if order.get("customerName"):
        return str(order["customerName"])
    customer = order.get("customer")
    if isinstance(customer, Mapping):
        parts = [customer.get("firstName"), customer.get("lastName")]
        name = " ".join(str(part) for part in parts if part)
        if name:
            return name
    return "Unknown Customer"


def _as_json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value.isoformat() if hasattr(value, "isoformat") else value


def _status_labels(old_status: str, new_status: str) -> dict[str, dict[str, str]]:
    return {
        language: {
            "old": labels.get(old_status, old_status),
            "new": labels.get(new_status, new_status),
        }
        for language, labels in STATUS_LABELS.items()
    }


def notify_order_created(
    session: Session,
    *,
    order: Mapping[str, Any],
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    """Inform admins and staff that a new order was placed."""

    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_CREATED,
            payload={
                "orderId": order.get("id"),
                "customerName": _customer_name(order),
                "totalAmount": _as_json_value(order.get("totalAmount")),
                "status": order.get("status"),
                "orderDate": _as_json_value(order.get("orderDate")),
            },
            related_entity_type="order",
            related_entity_id=order.get("id"),
            created_by=created_by,
        ),
        router=router,
    )


def notify_order_updated(
    session: Session,
    *,
    order: Mapping[str, Any],
    changes: Mapping[str, Any] | None = None,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    """Inform admins and staff about an edit; ``changes`` feeds the summary."""

    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_UPDATED,
            payload={
                "orderId": order.get("id"),
                "customerName": _customer_name(order),
                "totalAmount": _as_json_value(order.get("totalAmount")),
                "status": order.get("status"),
                "changes": {key: value for key, value in (changes or {}).items() if value},
                "updateTime": now_in_app_timezone().isoformat(),
            },
            related_entity_type="order",
            related_entity_id=order.get("id"),
            created_by=created_by,
        ),
        router=router,
    )


def notify_order_status_changed(
    session: Session,
    *,
    order: Mapping[str, Any],
    old_status: str,
    new_status: str,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_STATUS_CHANGED,
            payload={
                "orderId": order.get("id"),
                "customerName": _customer_name(order),
                "oldStatus": old_status,
                "newStatus": new_status,
                "statusLabels": _status_labels(old_status, new_status),
                "totalAmount": _as_json_value(order.get("totalAmount")),
            },
            related_entity_type="order",
            related_entity_id=order.get("id"),
            priority=Priority.HIGH if new_status == "cancelled" else None,
            created_by=created_by,
        ),
        router=router,
    )


def notify_order_failed(
    session: Session,
    *,
    order: Mapping[str, Any],
    error_message: str,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_FAILED,
            payload={
                "orderId": order.get("id"),
                "customerName": _customer_name(order),
                "errorMessage": error_message,
                "totalAmount": _as_json_value(order.get("totalAmount")),
            },
            related_entity_type="order",
            related_entity_id=order.get("id"),
            created_by=created_by,
        ),
        router=router,
    )


def _as_amount(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _high_value_recipients(session: Session, amount: float) -> tuple[int, ...]:
    """Return the admins whose own high-value threshold ``amount`` reaches."""

    users = UserRepository(session).list_active(
        role_aliases=get_policy(NotificationType.ORDER_HIGH_VALUE).target_roles
    )
    preferences = PreferenceRepository(session).get_map_for_users(
        [user.id for user in users], [NotificationType.ORDER_HIGH_VALUE]
    )
    default = get_settings().high_value_order_default
    recipients: list[int] = []
    for user in users:
        preference = preferences.get((user.id, NotificationType.ORDER_HIGH_VALUE))
        if amount >= resolve_amount_threshold(preference, default=default):
            recipients.append(user.id)
    return tuple(recipients)


def notify_high_value_order(
    session: Session,
    *,
    order: Mapping[str, Any],
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    """Alert the admins whose high-value threshold the order total reaches.

    Returns ``None`` without publishing when nobody's threshold is reached.
    """

    amount = _as_amount(order.get("totalAmount"))
    if amount is None:
        logger.warning(
            "Order %s has no numeric total; skipping high-value check", order.get("id")
        )
        return None
    try:
        recipients = _high_value_recipients(session, amount)
    except Exception:
        session.rollback()
        logger.exception("Could not resolve high-value recipients for order %s", order.get("id"))
        return None
    if not recipients:
        return None

    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.ORDER_HIGH_VALUE,
            payload={
                "orderId": order.get("id"),
                "customerName": _customer_name(order),
                "totalAmount": _as_json_value(order.get("totalAmount")),
                "amount": amount,
            },
            related_entity_type="order",
            related_entity_id=order.get("id"),
            recipient_ids=recipients,
            created_by=created_by,
        ),
        router=router,
    )


def notify_payment_failed(
    session: Session,
    *,
    order: Mapping[str, Any],
    payment_error: str,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.PAYMENT_FAILED,
            payload={
                "orderId": order.get("id"),
                "customerName": _customer_name(order),
                "totalAmount": _as_json_value(order.get("totalAmount")),
                "paymentError": payment_error,
                "failureTime": now_in_app_timezone().isoformat(),
            },
            related_entity_type="order",
            related_entity_id=order.get("id"),
            created_by=created_by,
        ),
        router=router,
    )


def _customer_payload(customer: Mapping[str, Any]) -> dict[str, Any]:
    name = " ".join(
        str(part) for part in (customer.get("firstName"), customer.get("lastName")) if part
    )
    return {
        "customerId": customer.get("id"),
        "customerName": name or customer.get("name"),
        "email": customer.get("email"),
        "phone": customer.get("phone"),
    }


def notify_customer_registered(
    session: Session,
    *,
    customer: Mapping[str, Any],
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.CUSTOMER_REGISTERED,
            payload=_customer_payload(customer),
            related_entity_type="customer",
            related_entity_id=customer.get("id"),
            created_by=created_by,
        ),
        router=router,
    )


def notify_customer_created_during_order(
    session: Session,
    *,
    customer: Mapping[str, Any],
    order_id: int,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    """Announce a customer record created implicitly while placing an order."""

    payload = _customer_payload(customer)
    payload.update({"createdDuringOrderId": order_id, "creationContext": "order_processing"})
    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.CUSTOMER_REGISTERED,
            payload=payload,
            related_entity_type="customer",
            related_entity_id=customer.get("id"),
            created_by=created_by,
        ),
        router=router,
    )


def notify_system_alert(
    session: Session,
    *,
    message: str,
    message_ar: str | None = None,
    priority: Priority = Priority.HIGH,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    """Alert administrators; ``message_ar`` is shown to Arabic readers when given."""

    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.SYSTEM_ALERT,
            payload={
                "message": message,
                "messageAr": message_ar,
                "alertTime": now_in_app_timezone().isoformat(),
            },
            related_entity_type="system",
            priority=priority,
            created_by=created_by,
        ),
        router=router,
    )


def notify_maintenance_notice(
    session: Session,
    *,
    message: str,
    scheduled_time: str,
    message_ar: str | None = None,
    created_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> int | None:
    return _publish_safely(
        session,
        NotificationEvent(
            type=NotificationType.MAINTENANCE_NOTICE,
            payload={
                "message": message,
                "messageAr": message_ar,
                "scheduledTime": scheduled_time,
                "noticeTime": now_in_app_timezone().isoformat(),
            },
            related_entity_type="system",
            created_by=created_by,
        ),
        router=router,
    )


__all__ = [
    "STATUS_LABELS",
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
]
