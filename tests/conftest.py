"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings that keep tests off the network
    - Ledger Fixtures: in-memory upstream and the epoch index over it
    - GraphQL Fixtures: request context wired the way the router wires it
    - Application Fixtures: FastAPI app and HTTP client
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from ledger_gateway.core.settings import clear_settings_cache
from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.dataloaders import create_dataloaders
from ledger_gateway.features.graphql.epochs import EpochIndex
from tests.fixtures.ledger import FakeLedgerClient, build_chain

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterator

    from fastapi import FastAPI

# Never reach a real fullnode or write JSON logs to the test output
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("LEDGER_RPC_URL", "http://ledger.invalid:9000")
os.environ.setdefault("LOG_JSON_LOGS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Reload settings for every test so monkeypatched env vars take effect."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Ledger Fixtures
# ============================================================================


@pytest.fixture
def ledger() -> FakeLedgerClient:
    """Upstream with three epochs, ten checkpoints and two transactions."""
    return build_chain()


@pytest.fixture
def epoch_index(ledger: FakeLedgerClient) -> EpochIndex:
    # Small pages so scans cross page boundaries
    return EpochIndex(ledger, page_size=2)


# ============================================================================
# GraphQL Fixtures
# ============================================================================


@pytest.fixture
def make_context(ledger: FakeLedgerClient, epoch_index: EpochIndex):
    """Build a fresh request context; each call gets its own loaders."""

    def factory(max_batch_size: int | None = None, default_page_size: int = 20, max_page_size: int = 50):
        return GraphQLContext(
            client=ledger,  # type: ignore[arg-type]
            loaders=create_dataloaders(ledger, epoch_index, max_batch_size),  # type: ignore[arg-type]
            epochs=epoch_index,
            default_page_size=default_page_size,
            max_page_size=max_page_size,
            correlation_id="test-correlation-id",
        )

    return factory


@pytest.fixture
def graphql_context(make_context) -> GraphQLContext:
    return make_context()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(ledger: FakeLedgerClient) -> AsyncGenerator[FastAPI]:
    """FastAPI application over the fake upstream, with its lifespan running."""
    from ledger_gateway.app.lifespan import lifespan
    from ledger_gateway.app.main import create_app

    application = create_app(ledger_client=ledger)  # type: ignore[arg-type]
    async with lifespan(application):
        yield application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client bound to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
