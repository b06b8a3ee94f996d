"""Tests for stock bands and the re-notification decision."""

from __future__ import annotations

import logging

import pytest

from notification_engine.domain.entities import Severity, Thresholds
from notification_engine.domain.exceptions import ThresholdConfigurationError
from notification_engine.domain.thresholds import bucket, coerce_thresholds, evaluate

THRESHOLDS = Thresholds(low=5, medium=10)


def _alerts(quantities: list[int], thresholds: Thresholds = THRESHOLDS) -> list[tuple[int, str]]:
    """Replay a stock sequence and return the (quantity, band) alerts it raises."""

    alerts = []
    last = Severity.NONE
    for previous, current in zip(quantities, quantities[1:]):
        evaluation = evaluate(previous, current, thresholds, last)
        if evaluation.should_notify:
            alerts.append((current, evaluation.severity.value))
        last = evaluation.notified_severity
    return alerts


@pytest.mark.parametrize(
    ("quantity", "expected"),
    [
        (0, Severity.OUT),
        (-2, Severity.OUT),
        (1, Severity.LOW),
        (5, Severity.LOW),
        (6, Severity.MEDIUM),
        (10, Severity.MEDIUM),
        (11, Severity.NONE),
    ],
)
def test_bucket_boundaries(quantity, expected) -> None:
    assert bucket(quantity, THRESHOLDS) is expected


def test_each_worse_band_alerts_once() -> None:
    assert _alerts([20, 8, 4, 0]) == [(8, "medium"), (4, "low"), (0, "out")]


def test_staying_in_band_does_not_alert() -> None:
    assert _alerts([20, 8, 7, 0]) == [(8, "medium"), (0, "out")]


def test_oscillation_inside_a_band_is_silent() -> None:
    assert _alerts([20, 6, 7, 6, 7]) == [(6, "medium")]


def test_recovery_rearms_alerts() -> None:
    assert _alerts([20, 4, 50, 3]) == [(4, "low"), (3, "low")]


def test_improving_band_keeps_worst_remembered() -> None:
    evaluation = evaluate(3, 8, THRESHOLDS, Severity.LOW)

    assert evaluation.severity is Severity.MEDIUM
    assert evaluation.should_notify is False
    assert evaluation.notified_severity is Severity.LOW


def test_distinct_thresholds_diverge_on_same_drop() -> None:
    cautious = evaluate(20, 5, Thresholds(low=3, medium=4))
    eager = evaluate(20, 5, Thresholds(low=8, medium=10))

    assert (cautious.severity, cautious.should_notify) == (Severity.NONE, False)
    assert (eager.severity, eager.should_notify) == (Severity.LOW, True)


@pytest.mark.parametrize(("low", "medium"), [(5, 5), (10, 5), (0, 4), (-1, 4)])
def test_thresholds_reject_invalid_pairs(low, medium) -> None:
    with pytest.raises(ThresholdConfigurationError):
        Thresholds(low=low, medium=medium)


def test_coerce_accepts_numeric_strings_and_partial_data() -> None:
    assert coerce_thresholds({"low": "3"}, defaults=THRESHOLDS) == Thresholds(low=3, medium=10)
    assert coerce_thresholds(None, defaults=THRESHOLDS) == THRESHOLDS


@pytest.mark.parametrize(
    "raw",
    [{"low": 10, "medium": 5}, {"low": -1}, {"low": "many"}, {"low": True}, {"medium": 2.5}],
)
def test_coerce_repairs_malformed_data_and_logs(raw, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="notification_engine.domain.thresholds"):
        thresholds = coerce_thresholds(raw, defaults=THRESHOLDS, context="user 9")

    assert thresholds == THRESHOLDS
    assert "Ignoring malformed stock thresholds" in caplog.text
    assert "user 9" in caplog.text
