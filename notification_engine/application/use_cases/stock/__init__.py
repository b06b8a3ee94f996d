"""Use cases for product stock changes."""

from .apply_stock_change import (
    StockChangeResult,
    adjust_stock,
    apply_stock_change,
    evaluate_stock_alerts,
)

__all__ = ["StockChangeResult", "adjust_stock", "apply_stock_change", "evaluate_stock_alerts"]
