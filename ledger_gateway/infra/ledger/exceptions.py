"""Errors raised by the ledger JSON-RPC client."""

from __future__ import annotations

from typing import Any

from ledger_gateway.core.exceptions import UpstreamServiceException


class LedgerRPCError(UpstreamServiceException):
    """The fullnode answered with a JSON-RPC error object.

    Inside a batch response these are handed back per entry instead of
    raised, so callers can treat them as absence of that key.
    """

    metric_outcome = "rpc_error"

    def __init__(
        self,
        method: str,
        code: int,
        message: str,
        data: Any = None,
    ) -> None:
        self.method = method
        self.rpc_code = code
        self.rpc_message = message
        self.data = data
        super().__init__(
            detail=f"Ledger RPC {method} failed: {message} ({code})",
            type="ledger-rpc-error",
            extra={"method": method, "rpc_code": code},
        )


class LedgerTransportError(UpstreamServiceException):
    """The request never produced a usable JSON-RPC answer.

    Covers network failures after retries, non-2xx HTTP status, invalid
    JSON, and payloads that do not decode into the expected models.
    """

    metric_outcome = "transport_error"

    def __init__(self, method: str, reason: str) -> None:
        self.method = method
        self.reason = reason
        super().__init__(
            detail=f"Ledger RPC {method} failed: {reason}",
            type="ledger-transport-error",
            extra={"method": method},
        )


__all__ = ["LedgerRPCError", "LedgerTransportError"]
