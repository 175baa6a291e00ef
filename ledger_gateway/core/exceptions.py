"""Custom exception classes for the gateway.

Every error the gateway raises on purpose derives from ``AppException``.
The GraphQL error processor reads ``code`` to decide what a client sees,
and the REST exception handler renders the RFC 7807 fields.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    Follows RFC 7807 Problem Details for HTTP APIs and carries a GraphQL
    error code for the ``extensions.code`` entry.

    Attributes:
        status_code: HTTP status code for the error.
        detail: Human-readable error message.
        type: Error type identifier (used in RFC 7807 problem details).
        title: Short, human-readable summary of the problem type.
        instance: URI reference that identifies the specific occurrence of the problem.
        extra: Additional context-specific information about the error.

    Example:
            raise AppException(
            status_code=404,
            detail="Checkpoint 0xabc not found",
            type="checkpoint-not-found",
            extra={"key": "0xabc"},
        )
    """

    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            status_code: HTTP status code.
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            instance: URI reference identifying this specific occurrence.
            extra: Additional context about the error.
        """
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or self._default_title(status_code)
        self.instance = instance
        self.extra = extra or {}
        super().__init__(detail)

    @staticmethod
    def _default_title(status_code: int) -> str:
        titles = {
            400: "Bad Request",
            404: "Not Found",
            422: "Unprocessable Entity",
            500: "Internal Server Error",
            501: "Not Implemented",
            502: "Bad Gateway",
            503: "Service Unavailable",
        }
        return titles.get(status_code, "Error")


class NotFoundException(AppException):
    """Raised when a key has no corresponding entity.

    Loaders hand instances of this class back in place of a missing entity
    instead of raising, so one absent key never fails its siblings.

    Example:
            NotFoundException(
            detail="Object 0x5 not found",
            type="object-not-found",
            extra={"key": "0x5"},
        )
    """

    code = "NOT_FOUND"

    def __init__(
        self,
        detail: str,
        type: str = "not-found",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=404,
            detail=detail,
            type=type,
            title="Not Found",
            instance=instance,
            extra=extra,
        )


class BadRequestException(AppException):
    """Raised for malformed arguments such as a negative page size or a bad cursor."""

    code = "BAD_REQUEST"

    def __init__(
        self,
        detail: str,
        type: str = "bad-request",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=400,
            detail=detail,
            type=type,
            title="Bad Request",
            instance=instance,
            extra=extra,
        )


class UnsupportedOperationException(AppException):
    """Raised for requests the upstream cannot serve, e.g. backward pagination.

    Fatal to the field that asked for it, not to the whole response.
    """

    code = "UNSUPPORTED_OPERATION"

    def __init__(
        self,
        detail: str,
        type: str = "unsupported-operation",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=501,
            detail=detail,
            type=type,
            title="Not Implemented",
            instance=instance,
            extra=extra,
        )


class UpstreamServiceException(AppException):
    """Raised when the upstream ledger service fails or answers garbage.

    Fatal to the batch or page it happened in. Never retried by loaders or
    the pagination bridge.

    Example:
            raise UpstreamServiceException(
            detail="Ledger RPC sui_getCheckpoint failed: connection reset",
            extra={"method": "sui_getCheckpoint"},
        )
    """

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        detail: str,
        type: str = "upstream-error",
        instance: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            status_code=502,
            detail=detail,
            type=type,
            title="Bad Gateway",
            instance=instance,
            extra=extra,
        )


__all__ = [
    "AppException",
    "BadRequestException",
    "NotFoundException",
    "UnsupportedOperationException",
    "UpstreamServiceException",
]
