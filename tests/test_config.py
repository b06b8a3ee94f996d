"""Tests for the environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from notification_engine.config import get_settings, reset_settings_cache


def test_server_and_high_value_settings_come_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("SERVER_HOST", "0.0.0.0")
    monkeypatch.setenv("SERVER_PORT", "9100")
    monkeypatch.setenv("HIGH_VALUE_ORDER_DEFAULT", "2500")
    reset_settings_cache()

    settings = get_settings()

    assert settings.server_host == "0.0.0.0"
    assert settings.server_port == 9100
    assert settings.high_value_order_default == 2500.0


@pytest.mark.parametrize(
    ("name", "value"),
    [("SERVER_PORT", "70000"), ("SERVER_PORT", "0"), ("HIGH_VALUE_ORDER_DEFAULT", "-5")],
)
def test_out_of_range_settings_are_rejected(monkeypatch, name, value) -> None:
    monkeypatch.setenv(name, value)
    reset_settings_cache()

    with pytest.raises(ValidationError):
        get_settings()
