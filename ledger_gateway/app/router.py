"""Router setup: health, readiness, metrics and the GraphQL endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ledger_gateway.core.settings import get_app_settings
from ledger_gateway.features.graphql.router import create_graphql_router
from ledger_gateway.infra.metrics import REGISTRY

if TYPE_CHECKING:
    from fastapi import FastAPI

    from ledger_gateway.core.settings.app import AppSettings
    from ledger_gateway.core.settings.graphql import GraphQLSettings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["operations"])


@router.get("/health", summary="Liveness probe")
async def health(request: Request) -> dict[str, Any]:
    settings = get_app_settings()
    epoch_index = getattr(request.app.state, "epoch_index", None)
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.version,
        "epochs_indexed": epoch_index.size if epoch_index is not None else 0,
    }


@router.get("/health/ready", summary="Readiness probe (reaches the upstream ledger)")
async def ready(request: Request) -> dict[str, Any]:
    """Fails with a 502 problem response when the upstream is unreachable."""
    chain_identifier = await request.app.state.ledger_client.get_chain_identifier()
    return {"status": "ready", "chain_identifier": chain_identifier}


metrics_router = APIRouter()


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def setup_routers(app: FastAPI, app_settings: AppSettings, graphql_settings: GraphQLSettings) -> None:
    """Mount operational routes and the GraphQL endpoint."""
    app.include_router(router)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router)

    app.include_router(create_graphql_router(), prefix=graphql_settings.path)
    logger.info("GraphQL endpoint mounted", extra={"path": graphql_settings.path})


__all__ = ["metrics_router", "router", "setup_routers"]
