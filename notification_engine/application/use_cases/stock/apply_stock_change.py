"""Use cases for stock writes and the threshold-aware alerts they raise."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from notification_engine.application.use_cases.notifications import DeliveryRouter, publish_event
from notification_engine.application.use_cases.preferences import (
    resolve_stock_thresholds,
    system_thresholds,
)
from notification_engine.domain.entities import (
    NotificationEvent,
    NotificationPreference,
    Severity,
    StockEvaluation,
    StockTransition,
)
from notification_engine.domain.event_types import STOCK_TYPES, NotificationType, get_policy
from notification_engine.domain.thresholds import evaluate
from notification_engine.infrastructure.database import serialized_writes
from notification_engine.infrastructure.repositories import (
    PreferenceRepository,
    ProductRepository,
    StockAlertStateRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class StockChangeResult:
    transition: StockTransition
    evaluations: dict[int, StockEvaluation] = field(default_factory=dict)
    notification_ids: list[int] = field(default_factory=list)

    def recipients_for(self, severity: Severity) -> list[int]:
        return sorted(
            user_id
            for user_id, evaluation in self.evaluations.items()
            if evaluation.should_notify and evaluation.severity is severity
        )


def apply_stock_change(
    session: Session,
    *,
    product_id: int,
    new_quantity: int,
    changed_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> StockChangeResult:
    """Set the stock of ``product_id`` and alert the users whose band worsened."""

    return _change_stock(
        session, product_id, quantity=new_quantity, changed_by=changed_by, router=router
    )


def adjust_stock(
    session: Session,
    *,
    product_id: int,
    delta: int,
    changed_by: int | None = None,
    router: DeliveryRouter | None = None,
) -> StockChangeResult:
    """Add ``delta`` (negative for sales) to the stock of ``product_id``."""

    return _change_stock(session, product_id, delta=delta, changed_by=changed_by, router=router)


def evaluate_stock_alerts(
    session: Session, transition: StockTransition
) -> dict[int, StockEvaluation]:
    """Evaluate ``transition`` once per stock recipient and remember notified bands.

    Runs inside the transaction that wrote the stock level, so the remembered
    band commits (or rolls back) together with the quantity.
    """

    users = UserRepository(session).list_active(
        role_aliases=get_policy(NotificationType.STOCK_LOW).target_roles
    )
    user_ids = [user.id for user in users]
    if not user_ids:
        return {}

    preferences: dict[int, dict[NotificationType, NotificationPreference]] = defaultdict(dict)
    for (user_id, notification_type), preference in (
        PreferenceRepository(session).get_map_for_users(user_ids, sorted(STOCK_TYPES)).items()
    ):
        preferences[user_id][notification_type] = preference

    states = StockAlertStateRepository(session)
    remembered = states.get_map(transition.product_id, user_ids)
    defaults = system_thresholds()

    evaluations: dict[int, StockEvaluation] = {}
    for user_id in user_ids:
        thresholds = resolve_stock_thresholds(user_id, preferences[user_id], defaults=defaults)
        last_notified = remembered.get(user_id, Severity.NONE)
        evaluation = evaluate(
            transition.previous_quantity, transition.new_quantity, thresholds, last_notified
        )
        if evaluation.notified_severity is not last_notified or (
            user_id not in remembered and evaluation.notified_severity is not Severity.NONE
        ):
            states.set(transition.product_id, user_id, evaluation.notified_severity)
        evaluations[user_id] = evaluation
    return evaluations


def _change_stock(
    session: Session,
    product_id: int,
    *,
    quantity: int | None = None,
    delta: int | None = None,
    changed_by: int | None,
    router: DeliveryRouter | None,
) -> StockChangeResult:
    with serialized_writes():
        return _write_and_alert(
            session,
            product_id,
            quantity=quantity,
            delta=delta,
            changed_by=changed_by,
            router=router,
        )


def _write_and_alert(
    session: Session,
    product_id: int,
    *,
    quantity: int | None = None,
    delta: int | None = None,
    changed_by: int | None,
    router: DeliveryRouter | None,
) -> StockChangeResult:
    try:
        transition = ProductRepository(session).apply_stock_change(
            product_id, quantity=quantity, delta=delta
        )
    except Exception:
        session.rollback()
        raise

    result = StockChangeResult(transition=transition)
    try:
        with session.begin_nested():
            result.evaluations = evaluate_stock_alerts(session, transition)
    except Exception:
        logger.exception(
            "Stock alert evaluation failed for product %s; stock change is kept",
            product_id,
        )
        result.evaluations = {}
    session.commit()

    logger.info(
        "Stock of product %s changed from %s to %s",
        product_id,
        transition.previous_quantity,
        transition.new_quantity,
    )
    result.notification_ids = _publish_alerts(session, result, changed_by, router)
    return result


def _publish_alerts(
    session: Session,
    result: StockChangeResult,
    changed_by: int | None,
    router: DeliveryRouter | None,
) -> list[int]:
    transition = result.transition
    notification_ids: list[int] = []
    for severity in (Severity.OUT, Severity.LOW, Severity.MEDIUM):
        recipients = result.recipients_for(severity)
        if not recipients:
            continue
        event = NotificationEvent(
            type=severity.notification_type,
            payload={
                "productId": transition.product_id,
                "productName": transition.product_name,
                "category": transition.category,
                "currentStock": transition.new_quantity,
                "previousStock": transition.previous_quantity,
                "stockQuantity": transition.new_quantity,
                "severity": severity.value,
            },
            related_entity_type="product",
            related_entity_id=transition.product_id,
            recipient_ids=tuple(recipients),
            created_by=changed_by,
        )
        try:
            notification_ids.append(publish_event(session, event, router=router))
        except Exception:
            session.rollback()
            logger.exception(
                "Could not publish %s alert for product %s",
                severity.value,
                transition.product_id,
            )
    return notification_ids


__all__ = ["StockChangeResult", "adjust_stock", "apply_stock_change", "evaluate_stock_alerts"]
