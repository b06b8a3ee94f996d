"""Route a freshly created delivery through the in-app and email channels."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.application.use_cases.preferences import (
    EffectivePreference,
    resolve_effective_preference,
)
from notification_engine.config import get_settings
from notification_engine.domain.entities import Delivery, Notification, User
from notification_engine.domain.event_types import Channel
from notification_engine.infrastructure.email import EmailMessage, MailSender, send_email
from notification_engine.infrastructure.notifications import dispatch_delivery
from notification_engine.infrastructure.repositories import DeliveryRepository, PreferenceRepository
from notification_engine.infrastructure.template_store import TemplateStore, template_store
from notification_engine.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

RealtimeDispatcher = Callable[[Notification, Delivery], None]


def build_template_variables(
    notification: Notification, user: User, *, language: str
) -> dict[str, Any]:
    """Return the variable bag exposed to templates for one recipient."""

    settings = get_settings()
    created_at = ensure_app_timezone(notification.created_at) or now_in_app_timezone()
    variables: dict[str, Any] = {
        "userName": user.name,
        "userEmail": user.email,
        "baseUrl": settings.base_url.rstrip("/"),
        "notificationType": notification.type.value,
        "priority": notification.priority.value,
        "language": language,
        "date": created_at.date().isoformat(),
        "time": created_at.strftime("%H:%M"),
    }
    variables.update(notification.payload or {})
    return variables


class DeliveryRouter:
    """Apply a recipient's preference to one delivery.

    The in-app row is finalized and committed before email is attempted, and
    a failed email never undoes it.
    """

    def __init__(
        self,
        *,
        mail_sender: MailSender = send_email,
        realtime_dispatcher: RealtimeDispatcher = dispatch_delivery,
        store: TemplateStore = template_store,
    ) -> None:
        self._mail_sender = mail_sender
        self._realtime_dispatcher = realtime_dispatcher
        self._store = store

    def route(
        self,
        session: Session,
        notification: Notification,
        delivery: Delivery,
        user: User,
        preference: EffectivePreference | None = None,
    ) -> Delivery:
        if preference is None:
            stored = PreferenceRepository(session).get(user.id, notification.type)
            preference = resolve_effective_preference(user, notification.type, stored)

        repository = DeliveryRepository(session)
        variables = build_template_variables(
            notification, user, language=preference.language
        )

        if preference.in_app_enabled:
            delivery = self._deliver_in_app(
                session, repository, notification, delivery, preference, variables
            )
        else:
            delivery = repository.hide(delivery.id)

        if preference.email_enabled:
            delivery = self._deliver_email(
                session, repository, notification, delivery, user, preference, variables
            )
        return delivery

    def _deliver_in_app(
        self,
        session: Session,
        repository: DeliveryRepository,
        notification: Notification,
        delivery: Delivery,
        preference: EffectivePreference,
        variables: dict[str, Any],
    ) -> Delivery:
        compiled = self._store.resolve(
            session, notification.type, preference.language, Channel.IN_APP
        )
        if compiled is None:
            # Nothing renderable to surface; keep the row for audit only.
            return repository.hide(delivery.id)

        rendered = compiled.render(variables)
        delivery = repository.store_in_app_content(
            delivery.id,
            title=rendered.title,
            message=rendered.message,
            language=compiled.template.language,
        )
        try:
            self._realtime_dispatcher(notification, delivery)
        except Exception:  # a push failure must not affect the stored delivery
            logger.exception(
                "Failed to push notification %s to user %s", notification.id, delivery.user_id
            )
        return delivery

    def _deliver_email(
        self,
        session: Session,
        repository: DeliveryRepository,
        notification: Notification,
        delivery: Delivery,
        user: User,
        preference: EffectivePreference,
        variables: dict[str, Any],
    ) -> Delivery:
        if delivery.is_email_sent:
            return delivery
        if not user.email:
            logger.warning("User %s has no email address; skipping email", user.id)
            return delivery

        max_attempts = get_settings().email_max_attempts
        if delivery.email_attempts >= max_attempts:
            logger.info(
                "Email for notification %s to user %s reached %s attempts; not retrying",
                notification.id,
                user.id,
                max_attempts,
            )
            return delivery

        compiled = self._store.resolve(
            session, notification.type, preference.language, Channel.EMAIL
        )
        if compiled is None:
            return delivery

        rendered = compiled.render(variables)
        message = EmailMessage(
            to=user.email,
            subject=rendered.subject or rendered.title,
            html=rendered.html or rendered.message,
        )
        try:
            sent = bool(self._mail_sender(message))
        except Exception:
            logger.exception("Mail sender raised for notification %s", notification.id)
            sent = False

        if sent:
            return repository.mark_email_sent(delivery.id)

        delivery = repository.record_email_failure(delivery.id)
        logger.error(
            "Email for notification %s to user %s failed (attempt %s of %s)",
            notification.id,
            user.id,
            delivery.email_attempts,
            max_attempts,
        )
        return delivery


def route_delivery(
    session: Session,
    notification: Notification,
    delivery: Delivery,
    user: User,
    *,
    router: DeliveryRouter | None = None,
) -> Delivery:
    """Route ``delivery`` with ``router`` or a router using the default collaborators."""

    return (router or DeliveryRouter()).route(session, notification, delivery, user)


__all__ = ["DeliveryRouter", "RealtimeDispatcher", "build_template_variables", "route_delivery"]
