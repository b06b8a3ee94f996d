"""Built-in English and Arabic templates for every notification type."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationTemplate
from notification_engine.domain.event_types import Channel, NotificationType, get_policy

from .repositories import TemplateRepository
from .template_store import template_store

logger = logging.getLogger(__name__)

_FOOTER = {
    "en": "This is an automated notification from the CRM system.",
    "ar": "هذا إشعار تلقائي من نظام إدارة العملاء.",
}


def _email_html(language: str, heading: str, rows: list[str], link: str, link_label: str) -> str:
    direction = "rtl" if language == "ar" else "ltr"
    body = "".join(f"<p>{row}</p>" for row in rows)
    return (
        f'<div dir="{direction}" style="font-family: Arial, sans-serif; max-width: 600px;'
        ' margin: 0 auto;">'
        f'<h2 style="color: #495057;">{heading}</h2>'
        f"{body}"
        f'<p><a href="{{{{baseUrl}}}}{link}" style="background-color: #007bff; color: white;'
        f' padding: 12px 24px; text-decoration: none; border-radius: 4px;">{link_label}</a></p>'
        f'<p style="color: #6c757d; font-size: 12px;">{_FOOTER[language]}</p>'
        "</div>"
    )


# Separators are emitted only when an earlier item was listed.
_ORDER_CHANGES_EN = (
    "{{#if changes.customer}}customer changed{{/if}}"
    "{{#if changes.items}}{{#if changes.customer}}, {{/if}}items modified{{/if}}"
    "{{#if changes.totalAmount}}{{#if changes.customer}}, {{else}}{{#if changes.items}}, "
    "{{/if}}{{/if}}total amount changed{{/if}}"
    "{{#if changes.notes}}{{#if changes.customer}}, {{else}}{{#if changes.items}}, {{else}}"
    "{{#if changes.totalAmount}}, {{/if}}{{/if}}{{/if}}notes updated{{/if}}"
)
_ORDER_CHANGES_AR = (
    "{{#if changes.customer}}تم تغيير العميل{{/if}}"
    "{{#if changes.items}}{{#if changes.customer}}، {{/if}}تم تعديل العناصر{{/if}}"
    "{{#if changes.totalAmount}}{{#if changes.customer}}، {{else}}{{#if changes.items}}، "
    "{{/if}}{{/if}}تم تغيير المبلغ الإجمالي{{/if}}"
    "{{#if changes.notes}}{{#if changes.customer}}، {{else}}{{#if changes.items}}، {{else}}"
    "{{#if changes.totalAmount}}، {{/if}}{{/if}}{{/if}}تم تحديث الملاحظات{{/if}}"
)

# (type, language) -> (title, message, email subject, email heading, email rows, link, label)
_CONTENT: dict[tuple[NotificationType, str], tuple[str, str, str, str, list[str], str, str]] = {
    (NotificationType.ORDER_CREATED, "en"): (
        "New Order #{{orderId}}",
        "New order placed by {{customerName}} for {{totalAmount}} EGP",
        "New Order Created - #{{orderId}}",
        "New Order Received",
        [
            "<strong>Customer:</strong> {{customerName}}",
            "<strong>Total Amount:</strong> {{totalAmount}} EGP",
            "<strong>Status:</strong> {{status}}",
        ],
        "/orders/{{orderId}}",
        "View Order",
    ),
    (NotificationType.ORDER_CREATED, "ar"): (
        "طلب جديد #{{orderId}}",
        "طلب جديد من {{customerName}} بقيمة {{totalAmount}} ج م",
        "طلب جديد - #{{orderId}}",
        "تم استلام طلب جديد",
        [
            "<strong>العميل:</strong> {{customerName}}",
            "<strong>المبلغ الإجمالي:</strong> {{totalAmount}} ج م",
            "<strong>الحالة:</strong> {{status}}",
        ],
        "/orders/{{orderId}}",
        "عرض الطلب",
    ),
    (NotificationType.ORDER_UPDATED, "en"): (
        "Order #{{orderId}} Updated",
        "Order #{{orderId}} has been updated{{#if changes}} (" + _ORDER_CHANGES_EN + "){{/if}}",
        "Order #{{orderId}} Updated - {{customerName}}",
        "Order Updated",
        [
            "<strong>Customer:</strong> {{customerName}}",
            "<strong>Total Amount:</strong> {{totalAmount}} EGP",
            "<strong>Updated:</strong> {{updateTime}}",
            "{{#if changes}}<strong>Changes:</strong> " + _ORDER_CHANGES_EN + "{{/if}}",
        ],
        "/orders/{{orderId}}",
        "View Order Details",
    ),
    (NotificationType.ORDER_UPDATED, "ar"): (
        "تم تحديث الطلب #{{orderId}}",
        "تم تحديث الطلب #{{orderId}}{{#if changes}} (" + _ORDER_CHANGES_AR + "){{/if}}",
        "تم تحديث الطلب #{{orderId}} - {{customerName}}",
        "تم تحديث الطلب",
        [
            "<strong>العميل:</strong> {{customerName}}",
            "<strong>المبلغ الإجمالي:</strong> {{totalAmount}} ج م",
            "<strong>تم التحديث:</strong> {{updateTime}}",
            "{{#if changes}}<strong>التغييرات:</strong> " + _ORDER_CHANGES_AR + "{{/if}}",
        ],
        "/orders/{{orderId}}",
        "عرض تفاصيل الطلب",
    ),
    (NotificationType.ORDER_STATUS_CHANGED, "en"): (
        "Order #{{orderId}} Status Updated",
        "Order #{{orderId}} status changed from {{statusLabels.en.old}} to {{statusLabels.en.new}}",
        "Order #{{orderId}} is now {{statusLabels.en.new}}",
        "Order Status Updated",
        [
            "<strong>Customer:</strong> {{customerName}}",
            "<strong>Previous status:</strong> {{statusLabels.en.old}}",
            "<strong>New status:</strong> {{statusLabels.en.new}}",
        ],
        "/orders/{{orderId}}",
        "View Order",
    ),
    (NotificationType.ORDER_STATUS_CHANGED, "ar"): (
        "تم تحديث حالة الطلب #{{orderId}}",
        "تم تغيير حالة الطلب #{{orderId}} من {{statusLabels.ar.old}} إلى {{statusLabels.ar.new}}",
        "حالة الطلب #{{orderId}}: {{statusLabels.ar.new}}",
        "تم تحديث حالة الطلب",
        [
            "<strong>العميل:</strong> {{customerName}}",
            "<strong>الحالة السابقة:</strong> {{statusLabels.ar.old}}",
            "<strong>الحالة الجديدة:</strong> {{statusLabels.ar.new}}",
        ],
        "/orders/{{orderId}}",
        "عرض الطلب",
    ),
    (NotificationType.ORDER_FAILED, "en"): (
        "Order Processing Failed #{{orderId}}",
        "Order #{{orderId}} processing failed: {{errorMessage}}",
        "Order #{{orderId}} Failed",
        "Order Processing Failed",
        [
            "<strong>Customer:</strong> {{customerName}}",
            "<strong>Error:</strong> {{errorMessage}}",
        ],
        "/orders/{{orderId}}",
        "Review Order",
    ),
    (NotificationType.ORDER_FAILED, "ar"): (
        "فشل في معالجة الطلب #{{orderId}}",
        "فشل في معالجة الطلب #{{orderId}}: {{errorMessage}}",
        "فشل الطلب #{{orderId}}",
        "فشل في معالجة الطلب",
        [
            "<strong>العميل:</strong> {{customerName}}",
            "<strong>الخطأ:</strong> {{errorMessage}}",
        ],
        "/orders/{{orderId}}",
        "مراجعة الطلب",
    ),
    (NotificationType.ORDER_HIGH_VALUE, "en"): (
        "High-Value Order Alert #{{orderId}}",
        "High-value order ({{totalAmount}} EGP) placed by {{customerName}}",
        "High-Value Order #{{orderId}} - {{totalAmount}} EGP",
        "High-Value Order",
        [
            "<strong>Customer:</strong> {{customerName}}",
            "<strong>Total:</strong> {{totalAmount}} EGP",
        ],
        "/orders/{{orderId}}",
        "View Order Details",
    ),
    (NotificationType.ORDER_HIGH_VALUE, "ar"): (
        "تنبيه طلب عالي القيمة #{{orderId}}",
        "طلب عالي القيمة ({{totalAmount}} ج م) من {{customerName}}",
        "طلب عالي القيمة #{{orderId}} - {{totalAmount}} ج م",
        "طلب عالي القيمة",
        [
            "<strong>العميل:</strong> {{customerName}}",
            "<strong>الإجمالي:</strong> {{totalAmount}} ج م",
        ],
        "/orders/{{orderId}}",
        "عرض تفاصيل الطلب",
    ),
    (NotificationType.PAYMENT_FAILED, "en"): (
        "Payment Failed for Order #{{orderId}}",
        "Payment failed for order #{{orderId}}"
        "{{#if totalAmount}} ({{totalAmount}} EGP){{/if}} - {{paymentError}}",
        "Payment Failed - Order #{{orderId}}",
        "Payment Failed",
        [
            "{{#if customerName}}<strong>Customer:</strong> {{customerName}}{{/if}}",
            "<strong>Error:</strong> {{paymentError}}",
        ],
        "/orders/{{orderId}}",
        "Review Order",
    ),
    (NotificationType.PAYMENT_FAILED, "ar"): (
        "فشل الدفع للطلب #{{orderId}}",
        "فشل الدفع للطلب #{{orderId}}"
        "{{#if totalAmount}} ({{totalAmount}} ج م){{/if}} - {{paymentError}}",
        "فشل الدفع - الطلب #{{orderId}}",
        "فشل الدفع",
        [
            "{{#if customerName}}<strong>العميل:</strong> {{customerName}}{{/if}}",
            "<strong>الخطأ:</strong> {{paymentError}}",
        ],
        "/orders/{{orderId}}",
        "مراجعة الطلب",
    ),
    (NotificationType.STOCK_MEDIUM, "en"): (
        "Medium Stock Warning: {{productName}}",
        "{{productName}} stock is getting low ({{currentStock}} units remaining)",
        "Medium Stock Warning - {{productName}}",
        "Stock Running Down",
        [
            "<strong>Product:</strong> {{productName}}",
            "{{#if category}}<strong>Category:</strong> {{category}}{{/if}}",
            "<strong>Current stock:</strong> {{currentStock}} units",
        ],
        "/products/{{productId}}",
        "View Product",
    ),
    (NotificationType.STOCK_MEDIUM, "ar"): (
        "تحذير مخزون متوسط: {{productName}}",
        "مخزون {{productName}} يتناقص ({{currentStock}} وحدة متبقية)",
        "تحذير مخزون متوسط - {{productName}}",
        "المخزون يتناقص",
        [
            "<strong>المنتج:</strong> {{productName}}",
            "{{#if category}}<strong>الفئة:</strong> {{category}}{{/if}}",
            "<strong>المخزون الحالي:</strong> {{currentStock}} وحدة",
        ],
        "/products/{{productId}}",
        "عرض المنتج",
    ),
    (NotificationType.STOCK_LOW, "en"): (
        "Low Stock Alert: {{productName}}",
        "{{productName}} is running low on stock ({{currentStock}} units remaining)",
        "Low Stock Alert - {{productName}}",
        "Low Stock Alert",
        [
            "<strong>Product:</strong> {{productName}}",
            "{{#if category}}<strong>Category:</strong> {{category}}{{/if}}",
            "<strong>Current stock:</strong> {{currentStock}} units",
        ],
        "/products/{{productId}}",
        "Restock Product",
    ),
    (NotificationType.STOCK_LOW, "ar"): (
        "تنبيه مخزون منخفض: {{productName}}",
        "{{productName}} ينخفض مخزونه ({{currentStock}} وحدة متبقية)",
        "تنبيه مخزون منخفض - {{productName}}",
        "تنبيه مخزون منخفض",
        [
            "<strong>المنتج:</strong> {{productName}}",
            "{{#if category}}<strong>الفئة:</strong> {{category}}{{/if}}",
            "<strong>المخزون الحالي:</strong> {{currentStock}} وحدة",
        ],
        "/products/{{productId}}",
        "إعادة تخزين المنتج",
    ),
    (NotificationType.STOCK_OUT, "en"): (
        "Out of Stock: {{productName}}",
        "{{productName}} is now out of stock! Immediate restocking required.",
        "Out of Stock Alert - {{productName}}",
        "Product Out of Stock",
        [
            "<strong>Product:</strong> {{productName}}",
            "{{#if category}}<strong>Category:</strong> {{category}}{{/if}}",
            "Immediate restocking is required.",
        ],
        "/products/{{productId}}",
        "Restock Now",
    ),
    (NotificationType.STOCK_OUT, "ar"): (
        "نفد من المخزون: {{productName}}",
        "{{productName}} نفد من المخزون! مطلوب إعادة تخزين فورية.",
        "تنبيه نفاد المخزون - {{productName}}",
        "نفد المنتج من المخزون",
        [
            "<strong>المنتج:</strong> {{productName}}",
            "{{#if category}}<strong>الفئة:</strong> {{category}}{{/if}}",
            "مطلوب إعادة تخزين فورية.",
        ],
        "/products/{{productId}}",
        "إعادة التخزين الآن",
    ),
    (NotificationType.CUSTOMER_REGISTERED, "en"): (
        "{{#if createdDuringOrderId}}New Customer Created{{else}}New Customer Registered{{/if}}",
        "{{#if createdDuringOrderId}}New customer {{customerName}} was created during order "
        "#{{createdDuringOrderId}} processing{{else}}New customer {{customerName}} has registered{{/if}}",
        "New Customer - {{customerName}}",
        "New Customer Registered",
        [
            "<strong>Name:</strong> {{customerName}}",
            "{{#if email}}<strong>Email:</strong> {{email}}{{/if}}",
            "{{#if phone}}<strong>Phone:</strong> {{phone}}{{/if}}",
        ],
        "/customers/{{customerId}}",
        "View Customer",
    ),
    (NotificationType.CUSTOMER_REGISTERED, "ar"): (
        "{{#if createdDuringOrderId}}تم إنشاء عميل جديد{{else}}عميل جديد مسجل{{/if}}",
        "{{#if createdDuringOrderId}}تم إنشاء عميل جديد {{customerName}} أثناء معالجة الطلب "
        "#{{createdDuringOrderId}}{{else}}عميل جديد {{customerName}} قام بالتسجيل{{/if}}",
        "عميل جديد - {{customerName}}",
        "عميل جديد مسجل",
        [
            "<strong>الاسم:</strong> {{customerName}}",
            "{{#if email}}<strong>البريد الإلكتروني:</strong> {{email}}{{/if}}",
            "{{#if phone}}<strong>الهاتف:</strong> {{phone}}{{/if}}",
        ],
        "/customers/{{customerId}}",
        "عرض العميل",
    ),
    (NotificationType.SYSTEM_ALERT, "en"): (
        "System Alert",
        "{{message}}",
        "System Alert",
        "System Alert",
        ["{{message}}"],
        "/notifications",
        "Open Notifications",
    ),
    (NotificationType.SYSTEM_ALERT, "ar"): (
        "تنبيه النظام",
        "{{#if messageAr}}{{messageAr}}{{else}}{{message}}{{/if}}",
        "تنبيه النظام",
        "تنبيه النظام",
        ["{{#if messageAr}}{{messageAr}}{{else}}{{message}}{{/if}}"],
        "/notifications",
        "فتح الإشعارات",
    ),
    (NotificationType.MAINTENANCE_NOTICE, "en"): (
        "Maintenance Notice",
        "{{message}} (scheduled for {{scheduledTime}})",
        "Scheduled Maintenance - {{scheduledTime}}",
        "Scheduled Maintenance",
        ["{{message}}", "<strong>Scheduled for:</strong> {{scheduledTime}}"],
        "/notifications",
        "Open Notifications",
    ),
    (NotificationType.MAINTENANCE_NOTICE, "ar"): (
        "إشعار صيانة",
        "{{#if messageAr}}{{messageAr}}{{else}}{{message}}{{/if}} (موعد الصيانة {{scheduledTime}})",
        "صيانة مجدولة - {{scheduledTime}}",
        "صيانة مجدولة",
        [
            "{{#if messageAr}}{{messageAr}}{{else}}{{message}}{{/if}}",
            "<strong>الموعد:</strong> {{scheduledTime}}",
        ],
        "/notifications",
        "فتح الإشعارات",
    ),
}


def build_seed_templates() -> list[NotificationTemplate]:
    """Return an in-app and an email template for every (type, language) pair."""

    templates: list[NotificationTemplate] = []
    for (notification_type, language), content in _CONTENT.items():
        title, message, subject, heading, rows, link, label = content
        priority = get_policy(notification_type).priority
        templates.append(
            NotificationTemplate(
                id=None,
                type=notification_type,
                language=language,
                channel=Channel.IN_APP,
                title_pattern=title,
                message_pattern=message,
                priority=priority,
            )
        )
        templates.append(
            NotificationTemplate(
                id=None,
                type=notification_type,
                language=language,
                channel=Channel.EMAIL,
                title_pattern=title,
                message_pattern=message,
                email_subject_pattern=subject,
                email_html_pattern=_email_html(language, heading, rows, link, label),
                priority=priority,
            )
        )
    return templates


def seed_templates(session: Session) -> int:
    """Upsert the built-in templates and drop compiled copies of older versions."""

    repository = TemplateRepository(session)
    templates = build_seed_templates()
    for template in templates:
        repository.upsert(template)
    template_store.invalidate()
    logger.info("Seeded %s notification templates", len(templates))
    return len(templates)


__all__ = ["build_seed_templates", "seed_templates"]
