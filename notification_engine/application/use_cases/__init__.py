"""Aggregate application use cases."""

from .notifications import fan_out, publish_event
from .stock import adjust_stock, apply_stock_change

__all__ = [
    "adjust_stock",
    "apply_stock_change",
    "fan_out",
    "publish_event",
]
