"""ORM models used by the application infrastructure."""

from .notification import NotificationModel, UserNotificationModel
from .notification_preference import NotificationPreferenceModel
from .notification_template import NotificationTemplateModel
from .product import ProductModel
from .role import RoleModel
from .stock_alert_state import StockAlertStateModel
from .user import UserModel

__all__ = [
    "NotificationModel",
    "NotificationPreferenceModel",
    "NotificationTemplateModel",
    "ProductModel",
    "RoleModel",
    "StockAlertStateModel",
    "UserModel",
    "UserNotificationModel",
]
