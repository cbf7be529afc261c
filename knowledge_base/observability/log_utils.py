"""
Structured logging helpers.

Context values are flattened to short strings before they reach `extra=`:
embeddings become "vector(N dims)", chunk models become their id, batches
become counts, and long text is clipped.

Dependencies: logging (stdlib), pydantic
System role: Logging helper functions for the store adapters
"""

import logging
from typing import Any

from pydantic import BaseModel

MAX_CONTEXT_LENGTH = 200


def _is_vector(value: list | tuple) -> bool:
    return bool(value) and all(
        isinstance(item, (int, float)) and not isinstance(item, bool) for item in value
    )


def safe_log_value(value: Any, max_length: int = MAX_CONTEXT_LENGTH) -> str:
    """
    Render a log context value as a bounded string.

    Args:
        value: Value to render
        max_length: Length after which the string is clipped

    Returns:
        str: Short representation safe to attach to a log record
    """
    if value is None:
        return "None"

    if isinstance(value, BaseModel):
        identifier = getattr(value, "id", None)
        rendered = f"{type(value).__name__}({identifier})" if identifier else type(value).__name__
    elif isinstance(value, (list, tuple)):
        if _is_vector(value):
            rendered = f"vector({len(value)} dims)"
        else:
            rendered = f"{type(value).__name__}({len(value)} items)"
    elif isinstance(value, (set, frozenset, dict)):
        rendered = f"{type(value).__name__}({len(value)} items)"
    else:
        try:
            rendered = str(value)
        except Exception as e:
            return f"<unrenderable {type(value).__name__}: {type(e).__name__}>"

    if len(rendered) > max_length:
        return f"{rendered[:max_length]}... ({len(rendered)} chars)"
    return rendered


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Log `message` with every context value passed through safe_log_value."""
    logger.log(level, message, extra={key: safe_log_value(val) for key, val in context.items()})


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    level: int = logging.ERROR,
    **context,
) -> None:
    """
    Log a failure with the exception's type and message as structured fields.

    Fallback paths log at WARNING without a traceback; ERROR and above
    attach exc_info.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception being reported
        level: Log level
        **context: Additional context
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.log(level, message, extra=extra, exc_info=level >= logging.ERROR)
