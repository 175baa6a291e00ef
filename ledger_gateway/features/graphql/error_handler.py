"""GraphQL error handling and production error masking.

Every error leaving the schema carries ``extensions.code``:

- ``NOT_FOUND``, ``BAD_REQUEST``, ``UNSUPPORTED_OPERATION``: raised on
  purpose through ``AppException`` subclasses, shown as-is
- ``BAD_REQUEST`` also covers query syntax and validation failures
- ``UPSTREAM_ERROR``: the ledger service failed; the message is masked in
  production
- ``INTERNAL_ERROR``: anything else; masked in production, with debug info
  attached in development

Errors are logged with full details server-side by ``log_error``.

Usage:
    # In schema.py:
    schema = LedgerSchema(query=Query, extensions=[ErrorCodeExtension, ...])
"""

from __future__ import annotations

import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from graphql import ExecutionResult as GraphQLExecutionResult
from graphql import GraphQLError
from strawberry.extensions import SchemaExtension
from strawberry.types import ExecutionResult

from ledger_gateway.core.exceptions import AppException
from ledger_gateway.core.settings import get_app_settings
from ledger_gateway.infra.metrics.tracking import track_graphql_error

if TYPE_CHECKING:
    from collections.abc import Iterator

    from strawberry.types import ExecutionContext

logger = logging.getLogger(__name__)

__all__ = [
    "ErrorCategory",
    "ErrorCodeExtension",
    "ensure_error_code",
    "error_code",
    "format_error",
    "is_user_facing_error",
    "log_error",
]


class ErrorCategory:
    """Error codes exposed in ``extensions.code``."""

    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    UPSTREAM = "UPSTREAM_ERROR"
    INTERNAL = "INTERNAL_ERROR"


USER_FACING_CODES = frozenset(
    {ErrorCategory.NOT_FOUND, ErrorCategory.BAD_REQUEST, ErrorCategory.UNSUPPORTED_OPERATION}
)

INTERNAL_MESSAGE = "An internal error occurred. Please try again later."
UPSTREAM_MESSAGE = "The upstream ledger service failed. Please try again later."


# ============================================================================
# Error Classification
# ============================================================================


def error_code(error: GraphQLError) -> str:
    """Classify an error into one of the ``ErrorCategory`` codes."""
    original = error.original_error
    if isinstance(original, AppException):
        return original.code
    if isinstance(original, GraphQLError):
        return error_code(original)
    if original is None or not error.path:
        # Raised by graphql-core before execution: syntax, validation or
        # scalar parsing of literals and variables
        return ErrorCategory.BAD_REQUEST
    return ErrorCategory.INTERNAL


def ensure_error_code(error: GraphQLError) -> None:
    """Attach ``extensions.code`` in place when it is missing.

    Covers errors that never reach execution, which extensions do not see.
    """
    if error.extensions and "code" in error.extensions:
        return
    error.extensions = {**(error.extensions or {}), "code": error_code(error)}


def is_user_facing_error(error: GraphQLError) -> bool:
    """Whether the error's message is safe to show unchanged in production."""
    return error_code(error) in USER_FACING_CODES


# ============================================================================
# Error Formatting
# ============================================================================


def _rebuild(error: GraphQLError, message: str, extensions: dict[str, Any]) -> GraphQLError:
    return GraphQLError(
        message,
        nodes=error.nodes,
        source=error.source,
        positions=error.positions,
        path=error.path,
        original_error=error.original_error,
        extensions=extensions,
    )


def format_error(error: GraphQLError, *, production: bool) -> GraphQLError:
    """Return ``error`` with a code attached and, in production, internals masked."""
    code = error_code(error)
    extensions: dict[str, Any] = {**(error.extensions or {}), "code": code}
    message = error.message
    original = error.original_error

    if isinstance(original, AppException):
        extensions["type"] = original.type
        extensions["status"] = original.status_code
        if original.extra and code != ErrorCategory.UPSTREAM:
            extensions["details"] = original.extra

    if code == ErrorCategory.UPSTREAM and production:
        message = UPSTREAM_MESSAGE
    elif code == ErrorCategory.INTERNAL:
        if production:
            message = INTERNAL_MESSAGE
            extensions["timestamp"] = datetime.now(UTC).isoformat()
        elif original is not None:
            extensions["debug"] = {
                "exception_type": type(original).__name__,
                "exception_message": str(original),
            }

    return _rebuild(error, message, extensions)


# ============================================================================
# Error Logging
# ============================================================================


def log_error(error: GraphQLError, execution_context: ExecutionContext | None = None) -> None:
    """Log error with full details for server-side debugging."""
    code = error_code(error)
    log_context: dict[str, Any] = {
        "error_code": code,
        "error_message": error.message,
        "error_path": error.path,
    }

    if execution_context is not None:
        if execution_context.operation_name:
            log_context["operation_name"] = execution_context.operation_name
        correlation_id = getattr(execution_context.context, "correlation_id", None)
        if correlation_id:
            log_context["correlation_id"] = correlation_id

    original = error.original_error
    if original is not None:
        log_context["exception_type"] = type(original).__name__
        if code == ErrorCategory.INTERNAL:
            log_context["stack_trace"] = "".join(
                traceback.format_exception(type(original), original, original.__traceback__)
            )

    if code in USER_FACING_CODES:
        logger.info("GraphQL user-facing error", extra=log_context)
    elif code == ErrorCategory.UPSTREAM:
        logger.warning("GraphQL upstream error", extra=log_context)
    else:
        logger.error("GraphQL internal error", extra=log_context)


# ============================================================================
# Extension
# ============================================================================


class ErrorCodeExtension(SchemaExtension):
    """Attach error codes to every error in the result and count them."""

    def on_operation(self) -> Iterator[None]:
        yield
        result = self.execution_context.result
        if not isinstance(result, (GraphQLExecutionResult, ExecutionResult)) or not result.errors:
            return

        production = get_app_settings().is_production
        processed = []
        for error in result.errors:
            formatted = format_error(error, production=production)
            track_graphql_error(formatted.extensions["code"])
            processed.append(formatted)
        result.errors = processed
