"""Pydantic models describing inbox payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class InboxEntryRead(BaseModel):
    """A delivered notification as shown in a user's inbox."""

    id: int
    delivery_id: int
    type: str
    priority: str
    title: str | None = None
    message: str | None = None
    language: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    created_by: int | None = None
    created_at: datetime | None = None
    is_read: bool
    read_at: datetime | None = None
    is_email_sent: bool


class InboxPageRead(BaseModel):
    items: list[InboxEntryRead]
    total: int
    unread: int
    page: int
    limit: int
    pages: int


class UnreadCountRead(BaseModel):
    unread: int


class MarkAllReadResult(BaseModel):
    updated: int


__all__ = ["InboxEntryRead", "InboxPageRead", "MarkAllReadResult", "UnreadCountRead"]
