"""Logging utilities for the constrained model sanitizer.

All loggers hang off the ``constrained_model_sanitizer`` logger so host
applications can tune them with a single ``logging`` configuration entry.
"""

import logging
from enum import Enum
from typing import Any

LOGGER_NAME = "constrained_model_sanitizer"


class LogEvent(str, Enum):
    """Event types for sanitizer logging."""

    RULES_LOAD = "rules_load"
    ROUTE_CLASSIFICATION = "route_classification"
    MODEL_CLASSIFICATION = "model_classification"
    PARAMETER_REWRITE = "parameter_rewrite"
    BODY_TRANSPORT = "body_transport"


def get_logger(name: str = "") -> logging.Logger:
    """Return a logger under the package namespace.

    Args:
        name: Child logger name, e.g. ``"transport"``. Fully qualified module
            names inside the package are accepted as well.

    Returns:
        The configured logger
    """
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


_logger = get_logger()


def _log(level: int, event: LogEvent, message: str, **data: Any) -> None:
    """Emit a structured log record.

    Args:
        level: Severity level
        event: Event type
        message: Human-readable message
        **data: Extra structured fields attached to the record
    """
    if not _logger.isEnabledFor(level):
        return
    _logger.log(level, message, extra={"event": event.value, "data": data})


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug message."""
    _log(logging.DEBUG, event, message, **data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info message."""
    _log(logging.INFO, event, message, **data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning message."""
    _log(logging.WARNING, event, message, **data)


def log_error(event: LogEvent, message: str, **data: Any) -> None:
    """Log an error message."""
    _log(logging.ERROR, event, message, **data)
