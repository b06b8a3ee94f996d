"""Errors raised by the notification engine."""


class EventValidationError(ValueError):
    """Raised when an event is rejected before fan-out."""


class ThresholdConfigurationError(ValueError):
    """Raised when stock thresholds violate ``0 < low < medium``."""


__all__ = ["EventValidationError", "ThresholdConfigurationError"]
