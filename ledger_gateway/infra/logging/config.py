"""Logging configuration setup.

Uses:
- dictConfig for the root and third-party logger levels
- QueueHandler + QueueListener so request coroutines never block on I/O
- ContextInjectingFilter on the queue handler, applied in the caller's task
  so contextvar fields (correlation_id) are captured before the hand-off
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from ledger_gateway.infra.logging.context import ContextInjectingFilter
from ledger_gateway.infra.logging.formatters import ContextTextFormatter, JSONFormatter

if TYPE_CHECKING:
    from ledger_gateway.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)

_log_queue: Queue[logging.LogRecord] | None = None
_listener: QueueListener | None = None
_LOGGING_INITIALIZED = False


def shutdown() -> None:
    """Stop the queue listener, flushing pending records."""
    global _listener, _log_queue, _LOGGING_INITIALIZED

    if _listener is not None:
        _listener.stop()
        _listener = None
    _log_queue = None
    _LOGGING_INITIALIZED = False


def setup_logging(settings: LoggingSettings | None = None, force: bool = False) -> None:
    """Configure logging from ``LoggingSettings`` once per process.

    Args:
        settings: Explicit settings; loaded from the environment when omitted.
        force: Reconfigure even if logging was already set up.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    if settings is None:
        from ledger_gateway.core.settings import get_logging_settings

        settings = get_logging_settings()

    configure_logging(**settings.to_logging_kwargs())
    _LOGGING_INITIALIZED = True
    logger.debug(
        "Logging configured",
        extra={"log_level": settings.level, "json_logs": settings.json_logs},
    )


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    console_enabled: bool = True,
    file_path: Path | None = None,
    file_max_bytes: int = 10_485_760,
    file_backup_count: int = 5,
    include_context: bool = True,
    capture_warnings: bool = True,
    service_name: str = "ledger-gateway",
) -> None:
    """Configure the root logger.

    Args:
        log_level: Root logger level.
        json_logs: Emit JSON Lines instead of text.
        console_enabled: Attach a stderr handler.
        file_path: Optional rotating log file.
        file_max_bytes: Size before the file rotates.
        file_backup_count: Rotated files to keep.
        include_context: Inject contextvar fields into every record.
        capture_warnings: Route ``warnings`` through logging.
        service_name: Static ``service`` field for JSON records.
    """
    global _log_queue, _listener

    shutdown()

    if file_path:
        file_path.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper(), "handlers": []},
            "loggers": {
                # uvicorn's access log duplicates the correlation middleware's view
                "uvicorn.access": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )

    formatter: logging.Formatter = (
        JSONFormatter(static={"service": service_name})
        if json_logs
        else ContextTextFormatter()
    )

    handlers: list[logging.Handler] = []
    if console_enabled:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)
    if file_path:
        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=file_max_bytes,
            backupCount=file_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root = logging.getLogger()
    if not handlers:
        root.addHandler(logging.NullHandler())
        return

    _log_queue = Queue()
    _listener = QueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown)

    queue_handler = QueueHandler(_log_queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())
    root.addHandler(queue_handler)

    logging.captureWarnings(capture_warnings)


def get_logging_state() -> dict[str, Any]:
    """Describe the active handlers (used by the health endpoint)."""
    return {
        "initialized": _LOGGING_INITIALIZED,
        "queue_listener": _listener is not None,
        "root_level": logging.getLevelName(logging.getLogger().level),
    }
