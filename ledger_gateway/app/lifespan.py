"""Application lifespan management.

Startup Order:
1. Logging
2. Upstream ledger client (shared connection pool)
3. Epoch index (process-wide, lives as long as the client)

Shutdown Order: Reverse of startup.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from ledger_gateway.core.settings import (
    get_app_settings,
    get_ledger_settings,
    get_logging_settings,
)
from ledger_gateway.features.graphql.epochs import EpochIndex
from ledger_gateway.infra.ledger import LedgerClient
from ledger_gateway.infra.logging import setup_logging
from ledger_gateway.infra.logging import shutdown as shutdown_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the upstream client and epoch index for the life of the app.

    A client already placed on ``app.state.ledger_client`` (tests do this)
    is used as-is and left open on shutdown.
    """
    app_settings = get_app_settings()
    ledger_settings = get_ledger_settings()

    setup_logging(get_logging_settings())
    logger.info(
        "Application starting",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
        },
    )

    client = getattr(app.state, "ledger_client", None)
    owns_client = client is None
    if owns_client:
        client = LedgerClient.from_settings(ledger_settings)
        app.state.ledger_client = client
        logger.info(
            "Ledger client opened",
            extra={"endpoint": ledger_settings.endpoint, "network": ledger_settings.network},
        )

    app.state.epoch_index = EpochIndex(client, page_size=ledger_settings.epoch_page_size)

    try:
        yield
    finally:
        logger.info(
            "Application shutting down",
            extra={"epochs_indexed": app.state.epoch_index.size},
        )
        if owns_client:
            await client.close()
            app.state.ledger_client = None
        shutdown_logging()
