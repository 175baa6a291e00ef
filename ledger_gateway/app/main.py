"""FastAPI application factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI

from ledger_gateway.app.exception_handlers import configure_exception_handlers
from ledger_gateway.app.lifespan import lifespan
from ledger_gateway.app.middleware import configure_middleware
from ledger_gateway.app.router import setup_routers
from ledger_gateway.core.settings import get_settings

if TYPE_CHECKING:
    from ledger_gateway.infra.ledger import LedgerClient


def create_app(ledger_client: LedgerClient | None = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        ledger_client: Upstream client to use instead of one built from
            ``LedgerSettings``; the caller keeps ownership of it.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()
    app_settings = settings.app

    app = FastAPI(
        title=app_settings.title,
        version=app_settings.version,
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.ledger_client = ledger_client

    # Configure exception handlers (must be before middleware)
    configure_exception_handlers(app)
    configure_middleware(app)
    setup_routers(app, app_settings, settings.graphql)

    return app
