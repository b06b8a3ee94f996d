"""Use case for reading a user's visible inbox."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from notification_engine.domain.entities import InboxEntry
from notification_engine.infrastructure.repositories import DeliveryRepository

MAX_PAGE_SIZE = 100


@dataclass
class InboxPage:
    entries: list[InboxEntry]
    total: int
    unread: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


def list_user_notifications(
    session: Session,
    *,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
) -> InboxPage:
    """Return one page of visible deliveries for ``user_id``, newest first."""

    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    repository = DeliveryRepository(session)
    entries, total = repository.list_inbox(
        user_id,
        offset=(page - 1) * limit,
        limit=limit,
        unread_only=unread_only,
    )
    return InboxPage(
        entries=entries,
        total=total,
        unread=repository.count_unread(user_id),
        page=page,
        limit=limit,
    )


def count_unread_notifications(session: Session, *, user_id: int) -> int:
    return DeliveryRepository(session).count_unread(user_id)
