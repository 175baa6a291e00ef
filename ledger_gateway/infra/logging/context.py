"""Context management for structured logging.

Fields set here (``correlation_id``, ``operation_name``...) are attached to
every record emitted in the same async task by ``ContextInjectingFilter``,
so loaders and the ledger client never pass them around explicitly.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

# Each async task gets its own copy automatically
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        ```python
        set_log_context(correlation_id="abc-123")
        logger.info("Resolving checkpoint")  # includes correlation_id
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the current logging context."""
    _log_context.set({})


class ContextInjectingFilter(logging.Filter):
    """Copy contextvar fields onto each ``LogRecord``.

    Installed on the root handlers so every logger benefits. Existing
    record attributes are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
