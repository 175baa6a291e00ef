"""GraphQL schema assembly.

The gateway is read-only: the schema has a Query root and no mutations or
subscriptions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import strawberry

from ledger_gateway.features.graphql.error_handler import ensure_error_code, log_error
from ledger_gateway.features.graphql.extensions import get_extensions
from ledger_gateway.features.graphql.resolvers import Query

if TYPE_CHECKING:
    from graphql import GraphQLError
    from strawberry.types import ExecutionContext

logger = logging.getLogger(__name__)


class LedgerSchema(strawberry.Schema):
    """Schema that logs errors through the gateway's error processor."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        for error in errors:
            ensure_error_code(error)
            log_error(error, execution_context)


def create_schema() -> LedgerSchema:
    """Build the schema with extensions from the current settings."""
    return LedgerSchema(
        query=Query,
        extensions=get_extensions(),
    )


schema = create_schema()

logger.info("GraphQL schema created successfully")

__all__ = ["LedgerSchema", "create_schema", "schema"]
