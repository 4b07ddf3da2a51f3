"""Structured logging for unwrap-core.

This module provides structured logging functions backed by the standard
library ``logging`` package. Structured fields are normalized to strings
and attached to each record as ``record.fields`` so handlers and
formatters can pick them up.

Example:
    >>> from unwrap_core import log_debug
    >>>
    >>> log_debug("Following delegate", {
    ...     "handle_type": "PoolWrapper",
    ...     "depth": 2,
    ... })
"""

from __future__ import annotations

import logging
from typing import Any

from .types import LogContext

LOGGER_NAME = "unwrap_core"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: str = "info") -> None:
    """Set the level of the unwrap-core logger.

    Args:
        level: One of trace, debug, info, warn, error.

    Raises:
        ValueError: If the level name is unknown.
    """
    try:
        logger.setLevel(_LEVELS[level.lower()])
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def log_error(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an ERROR level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context. Can be a dict
                or a LogContext instance.
    """
    _log(logging.ERROR, message, fields)


def log_warn(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a WARN level message with structured fields.

    Use this for degraded resolution, such as a detected cycle.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(logging.WARNING, message, fields)


def log_info(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an INFO level message with structured fields.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(logging.INFO, message, fields)


def log_debug(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a DEBUG level message with structured fields.

    Use this for recovered collaborator failures and followed relations.

    Args:
        message: The log message.
        fields: Optional structured fields for context.

    Example:
        >>> log_debug("Wrapper raised during supports()", {
        ...     "strategy": "protocol_unwrap",
        ...     "capability": "DataSource",
        ... })
    """
    _log(logging.DEBUG, message, fields)


def log_trace(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a TRACE level message with structured fields.

    Use this for per-hop detail. Disabled unless the logger is set to trace.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(TRACE, message, fields)


def _log(
    level: int, message: str, fields: dict[str, Any] | LogContext | None
) -> None:
    if not logger.isEnabledFor(level):
        return
    fields_dict = _normalize_fields(fields)
    logger.log(level, message, extra={"fields": fields_dict or {}})


def _normalize_fields(
    fields: dict[str, Any] | LogContext | None,
) -> dict[str, str] | None:
    """Normalize fields to a dict of strings.

    Args:
        fields: Input fields as dict, LogContext, or None.

    Returns:
        Dict with string values, or None if no fields.
    """
    if fields is None:
        return None

    if isinstance(fields, LogContext):
        # Convert LogContext to dict, excluding None values
        return {k: str(v) for k, v in fields.model_dump().items() if v is not None}

    return {k: str(v) for k, v in fields.items()}


__all__ = [
    "TRACE",
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
