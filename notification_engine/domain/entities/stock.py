"""Domain entities for stock levels and their alert severity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from notification_engine.domain.event_types import NotificationType


class Severity(str, Enum):
    """Stock band; members are declared from best to worst."""

    NONE = "none"
    MEDIUM = "medium"
    LOW = "low"
    OUT = "out"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def is_worse_than(self, other: "Severity") -> bool:
        return self.rank > other.rank

    @property
    def notification_type(self) -> NotificationType | None:
        return _NOTIFICATION_TYPES.get(self)


_RANKS = {severity: index for index, severity in enumerate(Severity)}
_NOTIFICATION_TYPES = {
    Severity.MEDIUM: NotificationType.STOCK_MEDIUM,
    Severity.LOW: NotificationType.STOCK_LOW,
    Severity.OUT: NotificationType.STOCK_OUT,
}


@dataclass(frozen=True)
class StockTransition:
    """Previous and new quantity of a product, committed as one unit."""

    product_id: int
    product_name: str
    category: str | None
    previous_quantity: int
    new_quantity: int


@dataclass(frozen=True)
class StockEvaluation:
    """Outcome of evaluating a transition against one user's thresholds.

    ``notified_severity`` is the value to remember for the (product, user)
    pair after this evaluation.
    """

    severity: Severity
    last_notified: Severity
    should_notify: bool
    notified_severity: Severity


__all__ = ["Severity", "StockEvaluation", "StockTransition"]
