"""Endpoints and websocket handler for the notification inbox."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.inbox import (
    MAX_PAGE_SIZE,
    count_unread_notifications,
    hide_notification,
    list_user_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)
from notification_engine.domain.entities import InboxEntry, User
from notification_engine.infrastructure.database import SessionLocal, get_db
from notification_engine.infrastructure.notifications import (
    inbox_connections,
    serialize_delivery,
)
from notification_engine.infrastructure.repositories import DeliveryRepository, UserRepository
from notification_engine.interfaces.api.dependencies import get_active_user
from notification_engine.interfaces.api.schemas import (
    InboxEntryRead,
    InboxPageRead,
    MarkAllReadResult,
    UnreadCountRead,
)

router = APIRouter(prefix="/users/{user_id}/notifications", tags=["notifications"])
realtime_router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _entry_to_schema(entry: InboxEntry) -> InboxEntryRead:
    return InboxEntryRead.model_validate(serialize_delivery(entry.notification, entry.delivery))


@router.get("/", response_model=InboxPageRead)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    unread_only: bool = Query(False),
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> InboxPageRead:
    """Return the visible notifications of the user, newest first."""

    result = list_user_notifications(
        db, user_id=user.id, page=page, limit=limit, unread_only=unread_only
    )
    return InboxPageRead(
        items=[_entry_to_schema(entry) for entry in result.entries],
        total=result.total,
        unread=result.unread,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    )


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> UnreadCountRead:
    return UnreadCountRead(unread=count_unread_notifications(db, user_id=user.id))


@router.patch("/read-all", response_model=MarkAllReadResult)
def read_all(
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> MarkAllReadResult:
    return MarkAllReadResult(updated=mark_all_notifications_read(db, user_id=user.id))


@router.patch("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def read_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> None:
    try:
        mark_notification_read(db, notification_id=notification_id, user_id=user.id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def hide(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_active_user),
) -> None:
    """Remove the notification from the inbox; the record is kept."""

    try:
        hide_notification(db, notification_id=notification_id, user_id=user.id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@realtime_router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams new deliveries to one user."""

    raw_user_id = websocket.query_params.get("user_id")
    if not raw_user_id or not raw_user_id.isdigit():
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = UserRepository(session).get(int(raw_user_id))
        unread = DeliveryRepository(session).count_unread(user.id) if user else 0
    except Exception:
        logger.exception("Could not open notification stream for user %s", raw_user_id)
        await websocket.close(code=1011)
        return
    finally:
        session.close()

    if user is None or not user.is_active:
        await websocket.close(code=1008)
        return

    await inbox_connections.register(user.id, websocket)
    try:
        await websocket.send_json({"type": "init", "data": {"unread": unread}})
        while True:
            message = await websocket.receive_json()
            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list) and ids:
                    ack_session = SessionLocal()
                    try:
                        repository = DeliveryRepository(ack_session)
                        for notification_id in ids:
                            if isinstance(notification_id, int):
                                repository.mark_as_read(
                                    notification_id=notification_id, user_id=user.id
                                )
                    finally:
                        ack_session.close()
    except WebSocketDisconnect:
        pass
    finally:
        inbox_connections.unregister(user.id, websocket)
