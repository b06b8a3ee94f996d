"""Persistence for the last stock band notified per (product, user)."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Severity
from notification_engine.infrastructure.models import StockAlertStateModel


class StockAlertStateRepository:
    """Read and write remembered severities inside the caller's transaction."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_map(self, product_id: int, user_ids: Sequence[int]) -> dict[int, Severity]:
        if not user_ids:
            return {}
        query = self.session.query(StockAlertStateModel).filter(
            StockAlertStateModel.product_id == product_id,
            StockAlertStateModel.user_id.in_(set(user_ids)),
        )
        return {model.user_id: Severity(model.last_severity) for model in query.all()}

    def set(self, product_id: int, user_id: int, severity: Severity) -> None:
        model = (
            self.session.query(StockAlertStateModel)
            .filter(
                StockAlertStateModel.product_id == product_id,
                StockAlertStateModel.user_id == user_id,
            )
            .first()
        )
        if model is None:
            model = StockAlertStateModel(product_id=product_id, user_id=user_id)
        model.last_severity = severity.value
        self.session.add(model)
        self.session.flush()


__all__ = ["StockAlertStateRepository"]
