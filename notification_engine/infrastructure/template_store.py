"""Cached lookup of compiled notification templates."""

from __future__ import annotations

import logging
from threading import Lock

from sqlalchemy.orm import Session

from notification_engine.config import get_settings
from notification_engine.domain.event_types import Channel, NotificationType
from notification_engine.domain.templating import CompiledTemplate
from notification_engine.infrastructure.repositories import TemplateRepository

logger = logging.getLogger(__name__)

_Key = tuple[NotificationType, str, Channel]


class TemplateStore:
    """Resolve templates by key, falling back to the default language.

    Templates are parsed the first time they are requested and the compiled
    form is shared by every later render. Misses are not cached so templates
    seeded at runtime become visible without a restart.

    Hits stay cached until :meth:`invalidate` is called. ``seed_templates``
    does so after writing; a template edited or deactivated directly in the
    database keeps rendering its old compiled form until then.
    """

    def __init__(self, default_language: str | None = None) -> None:
        self._default_language = default_language
        self._compiled: dict[_Key, CompiledTemplate] = {}
        self._lock = Lock()

    @property
    def default_language(self) -> str:
        return self._default_language or get_settings().default_language

    def resolve(
        self,
        session: Session,
        notification_type: NotificationType,
        language: str,
        channel: Channel,
    ) -> CompiledTemplate | None:
        """Return the exact-match template, else the default-language one.

        ``None`` means neither exists; the gap is logged and the caller skips
        only this channel for this recipient.
        """

        candidates = [language]
        if language != self.default_language:
            candidates.append(self.default_language)

        for candidate in candidates:
            compiled = self._load(session, (notification_type, candidate, channel))
            if compiled is None:
                continue
            if candidate != language:
                logger.info(
                    "No %s template for %s in '%s'; using default language '%s'",
                    channel.value,
                    notification_type.value,
                    language,
                    candidate,
                )
            return compiled

        logger.warning(
            "Missing %s template for %s (language '%s', default '%s')",
            channel.value,
            notification_type.value,
            language,
            self.default_language,
        )
        return None

    def invalidate(self) -> None:
        with self._lock:
            self._compiled.clear()

    def _load(self, session: Session, key: _Key) -> CompiledTemplate | None:
        cached = self._compiled.get(key)
        if cached is not None:
            return cached

        template = TemplateRepository(session).get(*key)
        if template is None:
            return None
        compiled = CompiledTemplate(template)
        with self._lock:
            self._compiled.setdefault(key, compiled)
        return compiled


template_store = TemplateStore()


__all__ = ["TemplateStore", "template_store"]
