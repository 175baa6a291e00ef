"""GraphQL context for request-scoped dependencies.

The context is created fresh for each GraphQL request and provides:
- The shared upstream ``LedgerClient``
- Fresh ``DataLoaders`` (batching and caching for this request only)
- The process-wide ``EpochIndex``
- Connection page-size limits
- Correlation ID (for log correlation)

Following Strawberry's FastAPI integration pattern:
https://strawberry.rocks/docs/integrations/fastapi#context_getter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from strawberry.fastapi import BaseContext

from ledger_gateway.features.graphql.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    paginate,
    paginate_sequence,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from starlette.background import BackgroundTasks
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.websockets import WebSocket

    from ledger_gateway.features.graphql.dataloaders import DataLoaders
    from ledger_gateway.features.graphql.epochs import EpochIndex
    from ledger_gateway.features.graphql.pagination import (
        ConnectionArgs,
        ConnectionResult,
        FetchedPage,
    )
    from ledger_gateway.infra.ledger.client import LedgerClient

T = TypeVar("T")


@dataclass
class GraphQLContext(BaseContext):
    """Request context for GraphQL operations.

    Standard fields (per Strawberry docs):
    - request: The HTTP request (or None for WebSocket)
    - response: The HTTP response (for setting headers)
    - background_tasks: FastAPI BackgroundTasks

    Custom fields:
    - client: Upstream ledger client (process-wide)
    - loaders: DataLoaders (request-scoped)
    - epochs: Epoch index (process-wide)
    - default_page_size / max_page_size: connection limits
    - correlation_id: For log correlation

    Example usage in resolver:
        @strawberry.field
        async def checkpoint(self, info: Info[GraphQLContext, None], id: str) -> CheckpointType:
            model = await info.context.loaders.checkpoints.load(id)
            return CheckpointType.from_model(model)
    """

    # Standard Strawberry/FastAPI context fields
    request: Request | WebSocket | None = None
    response: Response | None = None
    background_tasks: BackgroundTasks | None = None

    # Custom application fields
    client: LedgerClient = field(default=None)  # type: ignore[assignment]
    loaders: DataLoaders = field(default=None)  # type: ignore[assignment]
    epochs: EpochIndex = field(default=None)  # type: ignore[assignment]
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    correlation_id: str | None = None

    async def paginate(
        self,
        args: ConnectionArgs,
        fetch_page: Callable[[str | None, int, bool], Awaitable[FetchedPage[T]]],
        cursor_of: Callable[[T], str],
    ) -> ConnectionResult[T]:
        """``paginate`` with this request's page-size limits."""
        return await paginate(
            args,
            fetch_page,
            cursor_of,
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
        )

    async def paginate_sequence(
        self,
        args: ConnectionArgs,
        items: Sequence[T],
        cursor_of: Callable[[T], str],
    ) -> ConnectionResult[T]:
        return await paginate_sequence(
            args,
            items,
            cursor_of,
            default_page_size=self.default_page_size,
            max_page_size=self.max_page_size,
        )


__all__ = ["GraphQLContext"]
