"""Stock severity bands and the re-notification decision."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from notification_engine.domain.entities import Severity, StockEvaluation, Thresholds
from notification_engine.domain.exceptions import ThresholdConfigurationError

logger = logging.getLogger(__name__)


def bucket(quantity: int, thresholds: Thresholds) -> Severity:
    """Return the stock band ``quantity`` falls into."""

    if quantity <= 0:
        return Severity.OUT
    if quantity <= thresholds.low:
        return Severity.LOW
    if quantity <= thresholds.medium:
        return Severity.MEDIUM
    return Severity.NONE


def evaluate(
    previous_quantity: int,
    new_quantity: int,
    thresholds: Thresholds,
    last_notified: Severity = Severity.NONE,
) -> StockEvaluation:
    """Decide whether ``new_quantity`` warrants a stock alert.

    An alert fires only when the new band is strictly worse than the band
    last notified for the (product, user) pair. Climbing back above every
    threshold resets the remembered band, so a later drop alerts again.
    """

    severity = bucket(new_quantity, thresholds)
    logger.debug(
        "Stock %s -> %s falls in band %s (last notified %s)",
        previous_quantity,
        new_quantity,
        severity.value,
        last_notified.value,
    )
    if severity is Severity.NONE:
        return StockEvaluation(
            severity=severity,
            last_notified=last_notified,
            should_notify=False,
            notified_severity=Severity.NONE,
        )

    should_notify = severity.is_worse_than(last_notified)
    return StockEvaluation(
        severity=severity,
        last_notified=last_notified,
        should_notify=should_notify,
        notified_severity=severity if should_notify else last_notified,
    )


def default_thresholds(low: int = 5, medium: int = 10) -> Thresholds:
    return Thresholds(low=low, medium=medium)


def coerce_thresholds(
    raw: Mapping[str, Any] | None,
    *,
    defaults: Thresholds,
    context: str = "",
) -> Thresholds:
    """Build :class:`Thresholds` from loosely typed preference data.

    Missing keys take the default value. Anything that cannot form a valid
    pair (non-numeric values, ``low >= medium``, negatives) falls back to
    ``defaults`` entirely and is logged instead of raised, so a stock write
    is never blocked by a preference data error.
    """

    if not raw:
        return defaults

    try:
        low = _as_int(raw.get("low", defaults.low))
        medium = _as_int(raw.get("medium", defaults.medium))
        return Thresholds(low=low, medium=medium)
    except (ThresholdConfigurationError, TypeError, ValueError) as exc:
        logger.warning(
            "Ignoring malformed stock thresholds %s%s: %s; using defaults low=%s medium=%s",
            dict(raw),
            f" ({context})" if context else "",
            exc,
            defaults.low,
            defaults.medium,
        )
        return defaults


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid threshold")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value} is not a whole number")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    if isinstance(value, int):
        return value
    raise TypeError(f"unsupported threshold value {value!r}")


__all__ = ["bucket", "coerce_thresholds", "default_thresholds", "evaluate"]
