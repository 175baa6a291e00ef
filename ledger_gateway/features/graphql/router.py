"""GraphQL router for FastAPI integration.

Provides:
- GraphQL endpoint (mounted at the configured path by ``app.main``)
- The configured GraphQL IDE on GET
- Request context with the shared upstream client, the process-wide epoch
  index and fresh DataLoaders
"""

from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import APIRouter, BackgroundTasks, Request, Response
from strawberry.fastapi import GraphQLRouter

from ledger_gateway.core.settings import get_graphql_settings
from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.dataloaders import create_dataloaders
from ledger_gateway.features.graphql.schema import schema

logger = logging.getLogger(__name__)


async def get_graphql_context(
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
) -> GraphQLContext:
    """Create GraphQL context from FastAPI dependencies.

    The upstream client and the epoch index live on ``app.state`` (set up in
    the lifespan); loaders are created per request so nothing cached by
    them outlives it.

    Args:
        request: FastAPI request
        response: FastAPI response (for setting headers)
        background_tasks: FastAPI background tasks

    Returns:
        GraphQLContext for use in resolvers
    """
    settings = get_graphql_settings()
    state = request.app.state
    correlation_id = getattr(request.state, "correlation_id", None)

    return GraphQLContext(
        request=request,
        response=response,
        background_tasks=background_tasks,
        client=state.ledger_client,
        loaders=create_dataloaders(
            state.ledger_client,
            state.epoch_index,
            max_batch_size=settings.max_batch_size,
        ),
        epochs=state.epoch_index,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
        correlation_id=correlation_id,
    )


def create_graphql_router() -> APIRouter:
    """Create GraphQL router with settings-based configuration."""
    settings = get_graphql_settings()

    graphql_app = GraphQLRouter(
        schema,
        context_getter=cast("Any", get_graphql_context),
        graphql_ide=settings.graphql_ide or None,
        path="",  # mounted prefix adds the actual path
    )

    logger.debug("GraphQL router created", extra={"graphql_ide": settings.graphql_ide})
    return graphql_app


__all__ = ["create_graphql_router", "get_graphql_context"]
