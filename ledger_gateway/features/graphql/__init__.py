"""GraphQL feature module using Strawberry.

This module provides the read-only GraphQL API over the upstream ledger:
- Query resolvers for checkpoints, epochs, transactions, events, objects,
  addresses and Move packages
- Request-scoped batching loaders and a process-wide epoch index
- Relay-compliant cursor pagination bridged onto upstream page cursors
"""

from __future__ import annotations

from typing import Any

__all__ = ["router", "schema"]


def __getattr__(name: str) -> Any:
    if name == "router":
        from ledger_gateway.features.graphql.router import create_graphql_router

        return create_graphql_router()
    if name == "schema":
        from ledger_gateway.features.graphql.schema import schema as graphql_schema

        return graphql_schema
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
