"""
Structured logging helpers.

Visitor queries are free text of arbitrary length, and search results are
lists of corpus payloads. Both are summarized or truncated before they
are attached to a log record as ``extra`` fields.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any, Mapping

MAX_VALUE_LENGTH = 500


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return f"{text[:max_length]}... (truncated, {len(text)} total)"


def safe_log_value(value: Any, max_length: int = MAX_VALUE_LENGTH) -> str:
    """
    Render a value for a log record.

    Collections are summarized by size, never expanded, so a result list
    cannot flood the log.

    Args:
        value: Value to render
        max_length: Characters kept before truncating

    Returns:
        str: Printable representation
    """
    if value is None:
        return "None"
    if isinstance(value, (list, tuple, set)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"
    try:
        text = value if isinstance(value, str) else str(value)
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"
    return _truncate(text, max_length)


def _extras(context: Mapping[str, Any]) -> dict[str, str]:
    return {key: safe_log_value(val) for key, val in context.items()}


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log ``message`` with each keyword attached as a safe ``extra`` field."""
    logger.log(level, message, extra=_extras(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    **context,
) -> None:
    """
    Log a failure with its traceback, error type and message.

    Tolerated failures (degraded search, dropped analytics) pass
    ``level=logging.WARNING``.
    """
    extra = _extras(context)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.log(level, message, exc_info=exc, extra=extra)
