"""Global exception handlers for the FastAPI application.

REST routes (health, metrics) render failures as RFC 7807 Problem Details.
GraphQL errors never reach these handlers; they are reported inside the
GraphQL response by ``features.graphql.error_handler``.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ledger_gateway.core.exceptions import AppException

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _get_correlation_id(request: Request) -> str | None:
    return getattr(request.state, "correlation_id", None)


def _create_problem_detail(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create RFC 7807 Problem Details response body.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional context information.
    """
    problem: dict[str, Any] = {
        "type": type_,
        "title": title or AppException._default_title(status_code),
        "status": status_code,
        "detail": detail,
    }
    if instance:
        problem["instance"] = instance
    if extra:
        problem.update(extra)
    return problem


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert ``AppException`` into an RFC 7807 response."""
    correlation_id = _get_correlation_id(request)

    logger.warning(
        "Application exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_detail(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or str(request.url),
        extra=exc.extra,
    )
    if correlation_id:
        problem_data["correlation_id"] = correlation_id

    return JSONResponse(status_code=exc.status_code, content=problem_data, media_type=PROBLEM_JSON)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected exceptions; details stay in the logs."""
    correlation_id = _get_correlation_id(request)

    logger.error(
        "Unexpected exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=exc,
    )

    problem_data = _create_problem_detail(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        title="Internal Server Error",
        instance=str(request.url),
    )
    if correlation_id:
        problem_data["correlation_id"] = correlation_id

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem_data,
        media_type=PROBLEM_JSON,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the RFC 7807 exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    logger.debug("Exception handlers configured")


__all__ = [
    "app_exception_handler",
    "configure_exception_handlers",
    "generic_exception_handler",
]
