"""Endpoints for administrator broadcasts and notification statistics."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.notifications import (
    get_notification_statistics,
    publish_broadcast,
)
from notification_engine.domain.exceptions import EventValidationError
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.schemas import (
    BroadcastCreate,
    BroadcastRead,
    StatisticsRead,
)

router = APIRouter(prefix="/notifications", tags=["administration"])


@router.post("/broadcast", response_model=BroadcastRead, status_code=status.HTTP_201_CREATED)
def broadcast(payload: BroadcastCreate, db: Session = Depends(get_db)) -> BroadcastRead:
    """Publish a notification to roles, chosen users or everyone."""

    try:
        result = publish_broadcast(
            db,
            notification_type=payload.type,
            payload=payload.payload,
            priority=payload.priority,
            target_roles=payload.target_roles,
            user_ids=payload.user_ids,
            related_entity_type=payload.related_entity_type,
            related_entity_id=payload.related_entity_id,
            created_by=payload.created_by,
        )
    except EventValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return BroadcastRead(
        notification_id=result.notification_id, recipient_count=result.recipient_count
    )


@router.get("/statistics", response_model=StatisticsRead)
def statistics(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    db: Session = Depends(get_db),
) -> StatisticsRead:
    try:
        result = get_notification_statistics(db, start=start, end=end)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return StatisticsRead(
        total_notifications=result.total_notifications,
        total_deliveries=result.total_deliveries,
        unread_deliveries=result.unread_deliveries,
        read_rate=result.read_rate,
        by_type=result.by_type,
        by_priority=result.by_priority,
    )
