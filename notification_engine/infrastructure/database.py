"""Database configuration and session management."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from notification_engine.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 15

# SQLite only: transactions opened while set take the write lock up front.
_immediate_begin: ContextVar[bool] = ContextVar("immediate_begin", default=False)


def build_engine(database_url: str) -> Engine:
    """Create the SQLAlchemy engine for ``database_url``."""

    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        # Sessions are used from FastAPI worker threads.
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = _SQLITE_BUSY_TIMEOUT_SECONDS

    created = create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)
    if created.dialect.name == "sqlite":
        event.listen(created, "connect", _configure_sqlite_connection)
        event.listen(created, "begin", _begin_sqlite_transaction)
    return created


def _configure_sqlite_connection(dbapi_connection, _connection_record) -> None:
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest correctly.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin_sqlite_transaction(connection) -> None:
    connection.exec_driver_sql("BEGIN IMMEDIATE" if _immediate_begin.get() else "BEGIN")


@contextmanager
def serialized_writes() -> Iterator[None]:
    """Start SQLite transactions with ``BEGIN IMMEDIATE`` inside the block.

    A deferred transaction that reads first and writes later can deadlock
    against another writer; taking the write lock at ``BEGIN`` queues
    concurrent writers behind the busy timeout instead. Other backends
    ignore the flag and rely on row locks.
    """

    token = _immediate_begin.set(True)
    try:
        yield
    finally:
        _immediate_begin.reset(token)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def initialize_database(bind: Engine | None = None) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notification_engine.infrastructure import models  # noqa: F401  # ensure models are imported

    target = bind or engine
    Base.metadata.create_all(bind=target, checkfirst=True)
    logger.info("Database schema ready on %s", target.url.render_as_string(hide_password=True))


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = [
    "Base",
    "SessionLocal",
    "build_engine",
    "engine",
    "get_db",
    "initialize_database",
    "serialized_writes",
]
