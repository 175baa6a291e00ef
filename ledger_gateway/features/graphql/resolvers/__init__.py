"""GraphQL resolvers.

This package contains:
- queries.py: the root Query type
"""

from __future__ import annotations

from ledger_gateway.features.graphql.resolvers.queries import Query

__all__ = ["Query"]
