"""GraphQL types for checkpoints.

Provides:
- CheckpointType (Node), keyed by sequence number
- GasCostSummaryType, EndOfEpochDataType, CommitteeMemberType
- CheckpointConnection and ``query_checkpoint_connection``
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated

import strawberry
from strawberry.types import Info

from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.pagination import ConnectionArgs, FetchedPage
from ledger_gateway.features.graphql.types.base import (
    AfterArg,
    BeforeArg,
    FirstArg,
    LastArg,
    Node,
    PageInfoType,
    connection_args,
)
from ledger_gateway.features.graphql.types.scalars import Base64, BigInt, ms_to_datetime
from ledger_gateway.infra.ledger.models import Checkpoint, EndOfEpochData, GasCostSummary

if TYPE_CHECKING:
    from collections.abc import Callable

    from ledger_gateway.features.graphql.pagination import ConnectionResult
    from ledger_gateway.features.graphql.types.epochs import EpochType
    from ledger_gateway.features.graphql.types.transactions import TransactionBlockConnection


@strawberry.type(name="GasCostSummary", description="Gas charged, in MIST")
class GasCostSummaryType:
    computation_cost: BigInt
    storage_cost: BigInt
    storage_rebate: BigInt
    non_refundable_storage_fee: BigInt | None = None

    @classmethod
    def from_model(cls, model: GasCostSummary) -> GasCostSummaryType:
        return cls(
            computation_cost=model.computation_cost,
            storage_cost=model.storage_cost,
            storage_rebate=model.storage_rebate,
            non_refundable_storage_fee=model.non_refundable_storage_fee,
        )


@strawberry.type(name="CommitteeMember")
class CommitteeMemberType:
    authority_name: str
    stake_unit: BigInt


@strawberry.type(name="EndOfEpochData", description="Present on the last checkpoint of an epoch")
class EndOfEpochDataType:
    new_committee: list[CommitteeMemberType]
    next_protocol_version: BigInt

    @classmethod
    def from_model(cls, model: EndOfEpochData) -> EndOfEpochDataType:
        return cls(
            new_committee=[
                CommitteeMemberType(authority_name=name, stake_unit=stake)
                for name, stake in model.next_epoch_committee
            ],
            next_protocol_version=model.next_epoch_protocol_version,
        )


@strawberry.type(name="Checkpoint", description="A certified batch of transactions")
class CheckpointType(Node):
    node_type = "Checkpoint"

    model: strawberry.Private[Checkpoint]

    def node_key(self) -> str:
        return self.model.sequence_number

    @classmethod
    def from_model(cls, model: Checkpoint) -> CheckpointType:
        return cls(model=model)

    @strawberry.field
    def digest(self) -> str:
        return self.model.digest

    @strawberry.field
    def sequence_number(self) -> BigInt:
        return self.model.sequence_number

    @strawberry.field
    def timestamp(self) -> datetime:
        return ms_to_datetime(self.model.timestamp_ms)

    @strawberry.field(description="Aggregated validator signature")
    def validator_signature(self) -> Base64:
        return self.model.validator_signature

    @strawberry.field
    def previous_checkpoint_digest(self) -> str | None:
        return self.model.previous_digest

    @strawberry.field(description="Transactions executed up to and including this checkpoint")
    def network_total_transactions(self) -> BigInt:
        return self.model.network_total_transactions

    @strawberry.field(description="Gas costs accumulated over the epoch so far")
    def rolling_gas_summary(self) -> GasCostSummaryType:
        return GasCostSummaryType.from_model(self.model.epoch_rolling_gas_cost_summary)

    @strawberry.field
    def end_of_epoch(self) -> EndOfEpochDataType | None:
        data = self.model.end_of_epoch_data
        return EndOfEpochDataType.from_model(data) if data else None

    @strawberry.field
    async def epoch(
        self, info: Info[GraphQLContext, None]
    ) -> Annotated["EpochType", strawberry.lazy("ledger_gateway.features.graphql.types.epochs")]:
        from ledger_gateway.features.graphql.types.epochs import EpochType

        return EpochType.from_model(await info.context.loaders.epochs.load(self.model.epoch))

    @strawberry.field(description="Transactions included in this checkpoint")
    async def transaction_block_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> Annotated[
        "TransactionBlockConnection",
        strawberry.lazy("ledger_gateway.features.graphql.types.transactions"),
    ]:
        from ledger_gateway.features.graphql.types.transactions import (
            query_transaction_block_connection,
        )

        return await query_transaction_block_connection(
            info.context,
            connection_args(first, after, last, before),
            {"Checkpoint": self.model.sequence_number},
        )


# --- Connection Types (Relay Pattern) ---


@strawberry.type(name="CheckpointEdge")
class CheckpointEdge:
    node: CheckpointType
    cursor: str


@strawberry.type(name="CheckpointConnection")
class CheckpointConnection:
    edges: list[CheckpointEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[CheckpointType]) -> CheckpointConnection:
        return cls(
            edges=[CheckpointEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


async def query_checkpoint_connection(
    ctx: GraphQLContext,
    args: ConnectionArgs,
    *,
    newest_first: bool = True,
    start: Callable[[bool], str | None] | None = None,
    keep: Callable[[Checkpoint], bool] | None = None,
    exhausted: Callable[[list[Checkpoint], bool], bool] | None = None,
) -> CheckpointConnection:
    """Page through checkpoints.

    Args:
        ctx: Request context.
        args: Client connection arguments.
        newest_first: Order of a forward page; ``last`` flips it.
        start: Cursor to begin from when the client gave no ``after``,
            given the upstream descending flag.
        keep: Predicate dropping checkpoints outside a range.
        exhausted: Given the kept items and the upstream descending flag,
            whether the range ends within this page.
    """

    async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[Checkpoint]:
        descending = newest_first != inverted
        if cursor is None and start is not None:
            cursor = start(descending)
        page = await ctx.client.get_checkpoints(cursor=cursor, limit=limit, descending_order=descending)

        items = page.data
        has_next_page = page.has_next_page
        if keep is not None:
            items = [checkpoint for checkpoint in items if keep(checkpoint)]
            if len(items) < len(page.data):
                has_next_page = False
        if exhausted is not None and exhausted(items, descending):
            has_next_page = False

        for checkpoint in items:
            ctx.loaders.checkpoints.prime(checkpoint.sequence_number, checkpoint)
        return FetchedPage(items, page.next_cursor, has_next_page)

    result = await ctx.paginate(args, fetch, lambda checkpoint: checkpoint.sequence_number)
    return CheckpointConnection.from_result(result.map(CheckpointType.from_model))


__all__ = [
    "CheckpointConnection",
    "CheckpointType",
    "EndOfEpochDataType",
    "GasCostSummaryType",
    "query_checkpoint_connection",
]
