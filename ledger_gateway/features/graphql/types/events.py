"""GraphQL types for events emitted by transactions.

Event cursors are composite: ``eventSeq,txDigest``.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.pagination import (
    ConnectionArgs,
    FetchedPage,
    composite_cursor,
    split_composite_cursor,
)
from ledger_gateway.features.graphql.types.base import PageInfoType
from ledger_gateway.features.graphql.types.move import MoveModuleType, MoveType
from ledger_gateway.features.graphql.types.owners import AddressType
from ledger_gateway.features.graphql.types.scalars import Base64, ms_to_datetime
from ledger_gateway.infra.ledger.models import Event

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.pagination import ConnectionResult
    from ledger_gateway.features.graphql.types.transactions import TransactionBlockType


def event_cursor(event: Event) -> str:
    return composite_cursor(event.id.event_seq, event.id.tx_digest)


@strawberry.type(name="Event", description="An event emitted during execution")
class EventType:
    model: strawberry.Private[Event]

    @classmethod
    def from_model(cls, model: Event) -> EventType:
        return cls(model=model)

    @strawberry.field(description="Module whose function emitted the event")
    async def sending_module(self, info: Info[GraphQLContext, None]) -> MoveModuleType:
        key = composite_cursor(self.model.package_id, self.model.transaction_module)
        return MoveModuleType.from_model(await info.context.loaders.move_modules.load(key))

    @strawberry.field
    def sender(self) -> AddressType:
        return AddressType(address=self.model.sender)

    @strawberry.field
    def timestamp(self) -> datetime | None:
        return ms_to_datetime(self.model.timestamp_ms)

    @strawberry.field
    def type(self) -> MoveType:
        return MoveType(repr=self.model.type)

    @strawberry.field(description="Event contents as JSON")
    def json(self) -> JSON:
        return self.model.parsed_json

    @strawberry.field
    def bcs(self) -> Base64 | None:
        return self.model.bcs

    @strawberry.field
    async def transaction_block(
        self, info: Info[GraphQLContext, None]
    ) -> Annotated[
        "TransactionBlockType", strawberry.lazy("ledger_gateway.features.graphql.types.transactions")
    ]:
        from ledger_gateway.features.graphql.types.transactions import TransactionBlockType

        model = await info.context.loaders.transaction_blocks.load(self.model.id.tx_digest)
        return TransactionBlockType.from_model(model)


# --- Connection Types (Relay Pattern) ---


@strawberry.type(name="EventEdge")
class EventEdge:
    node: EventType
    cursor: str


@strawberry.type(name="EventConnection")
class EventConnection:
    edges: list[EventEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[EventType]) -> EventConnection:
        return cls(
            edges=[EventEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


async def query_event_connection(
    ctx: GraphQLContext,
    args: ConnectionArgs,
    query: dict,
) -> EventConnection:
    """Page through ``suix_queryEvents`` results for one upstream event filter."""

    async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[Event]:
        upstream_cursor = None
        if cursor is not None:
            event_seq, tx_digest = split_composite_cursor(cursor, 2)
            upstream_cursor = {"txDigest": tx_digest, "eventSeq": event_seq}
        page = await ctx.client.query_events(
            query, cursor=upstream_cursor, limit=limit, descending_order=inverted
        )
        return FetchedPage(page.data, page.next_cursor, page.has_next_page)

    result = await ctx.paginate(args, fetch, event_cursor)
    return EventConnection.from_result(result.map(EventType.from_model))


__all__ = ["EventConnection", "EventType", "event_cursor", "query_event_connection"]
