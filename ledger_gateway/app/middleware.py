"""Correlation ID middleware.

The correlation ID ties together every log line produced while serving one
request, including upstream RPC calls and loader batches. It is read from
the incoming ``X-Correlation-ID`` header or generated, stored on
``request.state.correlation_id``, set in the logging context, and echoed on
the response.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
import uuid

from starlette.datastructures import Headers, MutableHeaders

from ledger_gateway.infra.logging.context import clear_log_context, set_log_context

if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

MAX_CORRELATION_ID_LENGTH = 128


class CorrelationIDMiddleware:
    """Pure ASGI middleware for correlation ID handling.

    Usage:
        app = FastAPI()
        app.add_middleware(CorrelationIDMiddleware)
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "x-correlation-id",
        generate_if_missing: bool = True,
    ) -> None:
        self.app = app
        self.header_name = header_name.lower()
        self.generate_if_missing = generate_if_missing

    def _extract_or_generate(self, scope: Scope) -> tuple[str | None, bool]:
        value = Headers(scope=scope).get(self.header_name)
        if value and len(value) <= MAX_CORRELATION_ID_LENGTH and value.isprintable():
            return value, False
        if self.generate_if_missing:
            return str(uuid.uuid4()), True
        return None, False

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        value, was_generated = self._extract_or_generate(scope)
        scope.setdefault("state", {})["correlation_id"] = value
        if value:
            set_log_context(correlation_id=value)
            logger.debug(
                "Generated new correlation ID" if was_generated else "Correlation ID received",
                extra={"correlation_id": value},
            )

        async def send_with_correlation_id(message: Message) -> None:
            if message["type"] == "http.response.start" and value:
                MutableHeaders(scope=message).append(self.header_name, value)
            await send(message)

        try:
            await self.app(scope, receive, send_with_correlation_id)
        finally:
            clear_log_context()


def configure_middleware(app: FastAPI) -> None:
    """Install middleware on the application."""
    app.add_middleware(CorrelationIDMiddleware)
    logger.debug("Middleware configured")


__all__ = ["CorrelationIDMiddleware", "configure_middleware"]
