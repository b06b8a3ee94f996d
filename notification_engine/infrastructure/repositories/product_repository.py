"""Stock persistence for products."""

from __future__ import annotations

import logging
import time

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from notification_engine.domain.entities import StockTransition
from notification_engine.infrastructure.models import ProductModel
from notification_engine.utils import ensure_app_naive_datetime, now_in_app_timezone

logger = logging.getLogger(__name__)

_MAX_STOCK_WRITE_ATTEMPTS = 5
_LOCKED_RETRY_DELAY_SECONDS = 0.05


class StockConflictError(RuntimeError):
    """Raised when a stock write keeps losing the compare-and-set race."""


class ProductRepository:
    """Read products and apply atomic stock transitions."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, product_id: int) -> ProductModel | None:
        return self.session.get(ProductModel, product_id)

    def create(self, *, name: str, stock_quantity: int, category: str | None = None) -> ProductModel:
        model = ProductModel(
            name=name,
            category=category,
            stock_quantity=stock_quantity,
            stock_version=0,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return model

    def apply_stock_change(
        self,
        product_id: int,
        *,
        quantity: int | None = None,
        delta: int | None = None,
    ) -> StockTransition:
        """Write the new stock level and return the observed transition.

        The row is read ``FOR UPDATE`` where the backend supports it and
        written with a compare-and-set on ``stock_version``, so concurrent
        writers observe transitions of one product in a total order. The
        caller owns the transaction and must commit (or roll back).
        """

        if (quantity is None) == (delta is None):
            raise ValueError("Exactly one of quantity or delta must be provided")

        for attempt in range(1, _MAX_STOCK_WRITE_ATTEMPTS + 1):
            try:
                transition = self._compare_and_set(product_id, quantity=quantity, delta=delta)
            except OperationalError:
                # SQLite reports lock contention as "database is locked".
                self.session.rollback()
                if attempt == _MAX_STOCK_WRITE_ATTEMPTS:
                    raise
                logger.warning(
                    "Stock row of product %s is locked (attempt %s); retrying",
                    product_id,
                    attempt,
                )
                time.sleep(_LOCKED_RETRY_DELAY_SECONDS * attempt)
                continue
            if transition is not None:
                return transition

            logger.info(
                "Stock of product %s changed concurrently (attempt %s); retrying",
                product_id,
                attempt,
            )
            self.session.rollback()

        msg = f"Could not update stock for product {product_id} after {_MAX_STOCK_WRITE_ATTEMPTS} attempts"
        raise StockConflictError(msg)

    def _compare_and_set(
        self, product_id: int, *, quantity: int | None, delta: int | None
    ) -> StockTransition | None:
        model = (
            self.session.query(ProductModel)
            .filter(ProductModel.id == product_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if model is None:
            msg = f"Product with id {product_id} not found"
            raise ValueError(msg)

        previous = model.stock_quantity
        version = model.stock_version
        name, category = model.name, model.category
        new_quantity = quantity if quantity is not None else previous + delta
        if new_quantity < 0:
            msg = f"Stock for product {product_id} cannot drop below zero"
            raise ValueError(msg)

        result = self.session.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock_version == version)
            .values(
                stock_quantity=new_quantity,
                stock_version=version + 1,
                updated_at=ensure_app_naive_datetime(now_in_app_timezone()),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None

        self.session.expire(model)
        return StockTransition(
            product_id=product_id,
            product_name=name,
            category=category,
            previous_quantity=previous,
            new_quantity=new_quantity,
        )


__all__ = ["ProductRepository", "StockConflictError"]
