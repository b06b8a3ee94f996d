"""Shared fixtures: a throwaway SQLite database, users and fake channels."""

from __future__ import annotations

import itertools
import os
import tempfile
from pathlib import Path

import pytest

TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="notification-engine-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_DIR / 'test.db'}"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

from notification_engine.application.use_cases.notifications import DeliveryRouter  # noqa: E402
from notification_engine.config import reset_settings_cache  # noqa: E402
from notification_engine.domain.entities import User  # noqa: E402
from notification_engine.infrastructure import database  # noqa: E402
from notification_engine.infrastructure.repositories import (  # noqa: E402
    ProductRepository,
    RoleRepository,
    UserRepository,
)
from notification_engine.infrastructure.seed_templates import seed_templates  # noqa: E402
from notification_engine.infrastructure.template_store import template_store  # noqa: E402


class RecordingMailSender:
    """Mail collaborator that remembers messages instead of sending them."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.messages = []

    def __call__(self, message) -> bool:
        self.messages.append(message)
        return self.result


@pytest.fixture(autouse=True)
def clean_database():
    """Give every test empty tables and an empty template cache."""

    reset_settings_cache()
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.initialize_database()
    template_store.invalidate()
    yield
    template_store.invalidate()


@pytest.fixture()
def session():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def roles(session):
    repository = RoleRepository(session)
    return {
        alias: repository.get_or_create(name=alias.title(), alias=alias)
        for alias in ("admin", "staff", "user")
    }


@pytest.fixture()
def make_user(session, roles):
    counter = itertools.count(1)

    def _make_user(
        role: str = "staff",
        *,
        name: str | None = None,
        email: str | None = None,
        language: str = "en",
        is_active: bool = True,
    ) -> User:
        number = next(counter)
        return UserRepository(session).create(
            User(
                id=None,
                role=roles[role],
                name=name or f"User {number}",
                email=email if email is not None else f"user{number}@example.com",
                language=language,
                is_active=is_active,
            )
        )

    return _make_user


@pytest.fixture()
def make_product(session):
    def _make_product(name: str = "Widget", stock: int = 20, category: str | None = "Tools"):
        return ProductRepository(session).create(
            name=name, stock_quantity=stock, category=category
        ).id

    return _make_product


@pytest.fixture()
def templates(session):
    return seed_templates(session)


@pytest.fixture()
def mail_sender():
    return RecordingMailSender()


@pytest.fixture()
def pushed():
    return []


@pytest.fixture()
def router(mail_sender, pushed):
    return DeliveryRouter(
        mail_sender=mail_sender,
        realtime_dispatcher=lambda notification, delivery: pushed.append(
            (notification.id, delivery.user_id)
        ),
    )


@pytest.fixture()
def failing_mail_sender():
    return RecordingMailSender(result=False)
