"""Strawberry extensions for the GraphQL schema.

Provides:
- Error codes and production masking (``ErrorCodeExtension``)
- Query depth limiting
- Optional introspection blocking
"""

from __future__ import annotations

import logging

from graphql.validation import NoSchemaIntrospectionCustomRule
from strawberry.extensions import AddValidationRules, QueryDepthLimiter

from ledger_gateway.core.settings import get_graphql_settings
from ledger_gateway.features.graphql.error_handler import ErrorCodeExtension

logger = logging.getLogger(__name__)

# Ledger types nest deeply (effects -> object changes -> owner -> objects ...)
MAX_QUERY_DEPTH = 15


def get_extensions() -> list:
    """Get list of Strawberry extensions for the schema.

    Returns:
        List of extension classes and instances
    """
    settings = get_graphql_settings()
    extensions: list = [
        ErrorCodeExtension,
        QueryDepthLimiter(max_depth=MAX_QUERY_DEPTH),
    ]
    if not settings.introspection_enabled:
        extensions.append(AddValidationRules([NoSchemaIntrospectionCustomRule]))

    logger.debug(
        "GraphQL extensions configured",
        extra={"max_depth": MAX_QUERY_DEPTH, "introspection": settings.introspection_enabled},
    )
    return extensions


__all__ = ["MAX_QUERY_DEPTH", "get_extensions"]
