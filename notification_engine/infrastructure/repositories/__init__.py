"""Repository implementations for infrastructure layer."""

from .delivery_repository import DeliveryRepository
from .notification_repository import NotificationRepository
from .preference_repository import PreferenceRepository
from .product_repository import ProductRepository, StockConflictError
from .role_repository import RoleRepository
from .stock_alert_state_repository import StockAlertStateRepository
from .template_repository import TemplateRepository
from .user_repository import UserRepository

__all__ = [
    "DeliveryRepository",
    "NotificationRepository",
    "PreferenceRepository",
    "ProductRepository",
    "RoleRepository",
    "StockAlertStateRepository",
    "StockConflictError",
    "TemplateRepository",
    "UserRepository",
]
