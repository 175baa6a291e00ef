"""Logging infrastructure.

Structured JSONL logging with automatic context injection:

    import logging
    from ledger_gateway.infra.logging import set_log_context

    logger = logging.getLogger(__name__)

    set_log_context(correlation_id="abc-123")
    logger.info("Resolving checkpoint")  # includes correlation_id
"""

from ledger_gateway.infra.logging.config import (
    configure_logging,
    get_logging_state,
    setup_logging,
    shutdown,
)
from ledger_gateway.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from ledger_gateway.infra.logging.formatters import ContextTextFormatter, JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "ContextTextFormatter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logging_state",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
