"""Pydantic models describing notification preferences."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ThresholdPayload(BaseModel):
    """Stock bands (``low``/``medium``) or the high-value order ``amount``."""

    low: int | None = Field(default=None, gt=0, description="Upper bound of the low stock band")
    medium: int | None = Field(
        default=None, gt=0, description="Upper bound of the medium stock band"
    )
    amount: float | None = Field(
        default=None, gt=0, description="Order total that counts as high value"
    )


class PreferenceRead(BaseModel):
    notification_type: str
    in_app_enabled: bool
    email_enabled: bool
    language: str
    threshold: dict[str, int | float] | None = None
    is_default: bool


class PreferenceUpdate(BaseModel):
    """Fields left unset keep their current value."""

    in_app_enabled: bool | None = None
    email_enabled: bool | None = None
    language: str | None = Field(default=None, min_length=2, max_length=10)
    threshold: ThresholdPayload | None = None


__all__ = ["PreferenceRead", "PreferenceUpdate", "ThresholdPayload"]
