"""Persistence helpers for per-recipient notification deliveries."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notification_engine.domain.entities import Delivery, InboxEntry
from notification_engine.infrastructure.models import NotificationModel, UserNotificationModel
from notification_engine.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

from .notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


class DeliveryRepository:
    """Provide fan-out inserts, channel state updates and inbox queries."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_many(self, notification_id: int, user_ids: Iterable[int]) -> list[Delivery]:
        """Insert one delivery per user, skipping pairs that already exist.

        Returns only the rows created by this call, so running fan-out twice
        for the same notification hands nothing to the router the second time.
        """

        requested = list(dict.fromkeys(int(user_id) for user_id in user_ids))
        if not requested:
            return []

        existing = {
            user_id
            for (user_id,) in self.session.query(UserNotificationModel.user_id)
            .filter(UserNotificationModel.notification_id == notification_id)
            .filter(UserNotificationModel.user_id.in_(requested))
            .all()
        }
        pending = [user_id for user_id in requested if user_id not in existing]
        if not pending:
            return []

        models = [self._new_model(notification_id, user_id) for user_id in pending]
        try:
            with self.session.begin_nested():
                self.session.add_all(models)
        except IntegrityError:
            # A concurrent fan-out won part of the race; insert row by row.
            models = self._create_individually(notification_id, pending)

        self.session.commit()
        for model in models:
            self.session.refresh(model)
        return [self._to_entity(model) for model in models]

    def _create_individually(
        self, notification_id: int, user_ids: Sequence[int]
    ) -> list[UserNotificationModel]:
        created: list[UserNotificationModel] = []
        for user_id in user_ids:
            model = self._new_model(notification_id, user_id)
            try:
                with self.session.begin_nested():
                    self.session.add(model)
            except IntegrityError:
                logger.debug(
                    "Delivery for notification %s and user %s already exists",
                    notification_id,
                    user_id,
                )
                continue
            created.append(model)
        return created

    @staticmethod
    def _new_model(notification_id: int, user_id: int) -> UserNotificationModel:
        return UserNotificationModel(
            notification_id=notification_id,
            user_id=user_id,
            is_read=False,
            is_visible=True,
            is_email_sent=False,
            email_attempts=0,
            created_at=ensure_app_naive_datetime(now_in_app_timezone()),
        )

    def get(self, delivery_id: int) -> Delivery | None:
        model = self.session.get(UserNotificationModel, delivery_id)
        return self._to_entity(model) if model else None

    def get_for_user(self, *, notification_id: int, user_id: int) -> Delivery | None:
        model = self._get_model(notification_id=notification_id, user_id=user_id)
        return self._to_entity(model) if model else None

    def list_for_notification(self, notification_id: int) -> Sequence[Delivery]:
        query = (
            self.session.query(UserNotificationModel)
            .filter(UserNotificationModel.notification_id == notification_id)
            .order_by(UserNotificationModel.user_id)
        )
        return [self._to_entity(model) for model in query.all()]

    def store_in_app_content(
        self, delivery_id: int, *, title: str, message: str, language: str
    ) -> Delivery:
        model = self._require(delivery_id)
        model.title = title
        model.message = message
        model.language = language
        return self._save(model)

    def hide(self, delivery_id: int) -> Delivery:
        model = self._require(delivery_id)
        if model.is_visible:
            model.is_visible = False
            model.hidden_at = ensure_app_naive_datetime(now_in_app_timezone())
        return self._save(model)

    def mark_email_sent(self, delivery_id: int) -> Delivery:
        model = self._require(delivery_id)
        if not model.is_email_sent:
            model.is_email_sent = True
            model.email_sent_at = ensure_app_naive_datetime(now_in_app_timezone())
        model.email_attempts = (model.email_attempts or 0) + 1
        return self._save(model)

    def record_email_failure(self, delivery_id: int) -> Delivery:
        """Count a failed attempt; a sent email is never moved back to pending."""

        model = self._require(delivery_id)
        model.email_attempts = (model.email_attempts or 0) + 1
        return self._save(model)

    def list_inbox(
        self,
        user_id: int,
        *,
        offset: int = 0,
        limit: int | None = 20,
        unread_only: bool = False,
    ) -> tuple[list[InboxEntry], int]:
        """Return visible deliveries of ``user_id`` (newest first) and their total."""

        query = (
            self.session.query(UserNotificationModel, NotificationModel)
            .join(NotificationModel, UserNotificationModel.notification_id == NotificationModel.id)
            .filter(UserNotificationModel.user_id == user_id)
            .filter(UserNotificationModel.is_visible.is_(True))
        )
        if unread_only:
            query = query.filter(UserNotificationModel.is_read.is_(False))
        total = query.count()
        query = query.order_by(
            NotificationModel.created_at.desc(), UserNotificationModel.id.desc()
        ).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        entries = [
            InboxEntry(
                notification=NotificationRepository.to_entity(notification),
                delivery=self._to_entity(delivery),
            )
            for delivery, notification in query.all()
        ]
        return entries, total

    def count_unread(self, user_id: int) -> int:
        return (
            self.session.query(UserNotificationModel)
            .filter(UserNotificationModel.user_id == user_id)
            .filter(UserNotificationModel.is_visible.is_(True))
            .filter(UserNotificationModel.is_read.is_(False))
            .count()
        )

    def mark_as_read(self, *, notification_id: int, user_id: int) -> Delivery | None:
        model = self._get_model(notification_id=notification_id, user_id=user_id)
        if model is None:
            return None
        if not model.is_read:
            model.is_read = True
            model.read_at = ensure_app_naive_datetime(now_in_app_timezone())
            return self._save(model)
        return self._to_entity(model)

    def mark_all_as_read(self, user_id: int) -> int:
        updated = (
            self.session.query(UserNotificationModel)
            .filter(
                UserNotificationModel.user_id == user_id,
                UserNotificationModel.is_read.is_(False),
                UserNotificationModel.is_visible.is_(True),
            )
            .update(
                {
                    UserNotificationModel.is_read: True,
                    UserNotificationModel.read_at: ensure_app_naive_datetime(
                        now_in_app_timezone()
                    ),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return int(updated or 0)

    def count_deliveries(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        unread_only: bool = False,
    ) -> int:
        """Count deliveries of notifications created within ``[start, end]``."""

        query = self.session.query(UserNotificationModel).join(
            NotificationModel, UserNotificationModel.notification_id == NotificationModel.id
        )
        if unread_only:
            query = query.filter(UserNotificationModel.is_read.is_(False))
        return NotificationRepository.filter_created(query, start, end).count()

    def _get_model(self, *, notification_id: int, user_id: int) -> UserNotificationModel | None:
        return (
            self.session.query(UserNotificationModel)
            .filter(
                UserNotificationModel.notification_id == notification_id,
                UserNotificationModel.user_id == user_id,
            )
            .first()
        )

    def _require(self, delivery_id: int) -> UserNotificationModel:
        model = self.session.get(UserNotificationModel, delivery_id)
        if model is None:
            msg = f"Delivery with id {delivery_id} not found"
            raise ValueError(msg)
        return model

    def _save(self, model: UserNotificationModel) -> Delivery:
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserNotificationModel) -> Delivery:
        return Delivery(
            id=model.id,
            notification_id=model.notification_id,
            user_id=model.user_id,
            is_read=model.is_read,
            read_at=ensure_app_timezone(model.read_at),
            is_visible=model.is_visible,
            hidden_at=ensure_app_timezone(model.hidden_at),
            is_email_sent=model.is_email_sent,
            email_sent_at=ensure_app_timezone(model.email_sent_at),
            email_attempts=model.email_attempts or 0,
            title=model.title,
            message=model.message,
            language=model.language,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DeliveryRepository"]
