"""Realtime notification helpers for the infrastructure layer."""

from .manager import InboxConnections, inbox_connections
from .publisher import (
    DeliveryPublisher,
    delivery_publisher,
    dispatch_delivery,
    serialize_delivery,
)

__all__ = [
    "InboxConnections",
    "inbox_connections",
    "DeliveryPublisher",
    "delivery_publisher",
    "dispatch_delivery",
    "serialize_delivery",
]
