"""Pydantic models for broadcasts and notification statistics."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BroadcastCreate(BaseModel):
    """A notification composed by an administrator.

    ``user_ids`` wins over ``target_roles``; with neither set every active
    user receives it.
    """

    type: str = Field(..., min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    priority: str | None = None
    target_roles: list[str] | None = None
    user_ids: list[int] | None = None
    related_entity_type: str | None = None
    related_entity_id: int | None = None
    created_by: int | None = None


class BroadcastRead(BaseModel):
    notification_id: int
    recipient_count: int


class StatisticsRead(BaseModel):
    total_notifications: int
    total_deliveries: int
    unread_deliveries: int
    read_rate: float
    by_type: dict[str, int]
    by_priority: dict[str, int]


__all__ = ["BroadcastCreate", "BroadcastRead", "StatisticsRead"]
