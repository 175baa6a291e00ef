"""Query resolvers for the GraphQL API.

Provides the root read surface:
- chainIdentifier, availableRange
- checkpoint(id) / checkpointConnection
- epoch(id)
- transactionBlock(digest) / transactionBlockConnection(filter)
- eventConnection(filter)
- object(address, version), address(address), owner(address)
- protocolConfig(protocolVersion), coinMetadata(coinType), movePackage(address)
- node(id)
"""

from __future__ import annotations

import logging
from typing import Annotated

import strawberry
from strawberry.types import Info

from ledger_gateway.core.exceptions import BadRequestException, NotFoundException
from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.types.base import (
    AfterArg,
    BeforeArg,
    FirstArg,
    LastArg,
    Node,
    connection_args,
    decode_global_id,
)
from ledger_gateway.features.graphql.types.checkpoints import (
    CheckpointConnection,
    CheckpointType,
    query_checkpoint_connection,
)
from ledger_gateway.features.graphql.types.epochs import EpochType
from ledger_gateway.features.graphql.types.events import EventConnection, query_event_connection
from ledger_gateway.features.graphql.types.inputs import (
    CheckpointIdInput,
    EventFilterInput,
    TransactionBlockFilterInput,
    event_filter_to_upstream,
    transaction_filter_to_upstream,
)
from ledger_gateway.features.graphql.types.move import MoveFunctionType, MoveModuleType, MovePackageType
from ledger_gateway.features.graphql.types.objects import ObjectType
from ledger_gateway.features.graphql.types.owners import AddressType, OwnerType
from ledger_gateway.features.graphql.types.protocol import CoinMetadataType, ProtocolConfigsType
from ledger_gateway.features.graphql.types.scalars import BigInt, SuiAddress
from ledger_gateway.features.graphql.types.transactions import (
    TransactionBlockConnection,
    TransactionBlockType,
    query_transaction_block_connection,
)

logger = logging.getLogger(__name__)

AddressArg = Annotated[SuiAddress, strawberry.argument(description="32-byte address, 0x-prefixed hex")]


@strawberry.type(name="AvailableRange", description="Checkpoints the upstream can serve")
class AvailableRangeType:
    first: CheckpointType | None
    last: CheckpointType | None


async def _latest_checkpoint(ctx: GraphQLContext) -> CheckpointType:
    sequence_number = await ctx.client.get_latest_checkpoint_sequence_number()
    return CheckpointType.from_model(await ctx.loaders.checkpoints.load(sequence_number))


async def _resolve_node(ctx: GraphQLContext, type_name: str, key: str) -> Node:
    loaders = ctx.loaders
    if type_name == CheckpointType.node_type:
        return CheckpointType.from_model(await loaders.checkpoints.load(key))
    if type_name == EpochType.node_type:
        return EpochType.from_model(await loaders.epochs.load(key))
    if type_name == TransactionBlockType.node_type:
        return TransactionBlockType.from_model(await loaders.transaction_blocks.load(key))
    if type_name == ObjectType.node_type:
        return ObjectType.from_model(await loaders.objects.load(key))
    if type_name == MoveModuleType.node_type:
        return MoveModuleType.from_model(await loaders.move_modules.load(key))
    if type_name == MoveFunctionType.node_type:
        return MoveFunctionType.from_record(await loaders.move_functions.load(key))
    raise BadRequestException(
        detail=f"Unknown node type '{type_name}'",
        extra={"type": type_name},
    )


@strawberry.type(description="Root query type")
class Query:
    """GraphQL Query resolvers."""

    @strawberry.field(description="First four bytes of the genesis checkpoint digest")
    async def chain_identifier(self, info: Info[GraphQLContext, None]) -> str:
        return await info.context.client.get_chain_identifier()

    @strawberry.field(description="Oldest and newest checkpoints available")
    async def available_range(self, info: Info[GraphQLContext, None]) -> AvailableRangeType:
        ctx = info.context
        first = CheckpointType.from_model(await ctx.loaders.checkpoints.load("0"))
        return AvailableRangeType(first=first, last=await _latest_checkpoint(ctx))

    @strawberry.field(description="A checkpoint by digest or sequence number; the latest when omitted")
    async def checkpoint(
        self,
        info: Info[GraphQLContext, None],
        id: CheckpointIdInput | None = None,
    ) -> CheckpointType | None:
        ctx = info.context
        if id is None:
            return await _latest_checkpoint(ctx)
        return CheckpointType.from_model(await ctx.loaders.checkpoints.load(id.key()))

    @strawberry.field(description="Checkpoints, newest first")
    async def checkpoint_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> CheckpointConnection:
        return await query_checkpoint_connection(
            info.context, connection_args(first, after, last, before), newest_first=True
        )

    @strawberry.field(description="An epoch by number; the current epoch when omitted")
    async def epoch(
        self,
        info: Info[GraphQLContext, None],
        id: BigInt | None = None,
    ) -> EpochType | None:
        ctx = info.context
        if id is None:
            latest = await _latest_checkpoint(ctx)
            key = latest.model.epoch
        else:
            key = str(id)
        return EpochType.from_model(await ctx.loaders.epochs.load(key))

    @strawberry.field(description="A transaction block by digest")
    async def transaction_block(
        self,
        info: Info[GraphQLContext, None],
        digest: str,
    ) -> TransactionBlockType | None:
        return TransactionBlockType.from_model(await info.context.loaders.transaction_blocks.load(digest))

    @strawberry.field(description="Transaction blocks matching a filter")
    async def transaction_block_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
        filter: TransactionBlockFilterInput | None = None,
    ) -> TransactionBlockConnection:
        return await query_transaction_block_connection(
            info.context,
            connection_args(first, after, last, before),
            transaction_filter_to_upstream(filter),
        )

    @strawberry.field(description="Events matching a filter")
    async def event_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
        filter: EventFilterInput | None = None,
    ) -> EventConnection:
        return await query_event_connection(
            info.context,
            connection_args(first, after, last, before),
            event_filter_to_upstream(filter),
        )

    @strawberry.field(description="An object at its latest version, or at a past one")
    async def object(
        self,
        info: Info[GraphQLContext, None],
        address: AddressArg,
        version: BigInt | None = None,
    ) -> ObjectType | None:
        ctx = info.context
        if version is None:
            return ObjectType.from_model(await ctx.loaders.objects.load(address))

        model = await ctx.client.try_get_past_object(address, int(version))
        if model is None:
            raise NotFoundException(
                detail=f"Object {address} not found at version {version}",
                type="object-version-not-found",
                extra={"key": address, "version": str(version)},
            )
        return ObjectType.from_model(model)

    @strawberry.field(description="An account address")
    def address(self, address: AddressArg) -> AddressType:
        return AddressType(address=address)

    @strawberry.field(description="An address that may be an account or an object")
    def owner(self, address: AddressArg) -> OwnerType:
        return OwnerType(address=address)

    @strawberry.field(description="Protocol configuration at a version; the current one when omitted")
    async def protocol_config(
        self,
        info: Info[GraphQLContext, None],
        protocol_version: BigInt | None = None,
    ) -> ProtocolConfigsType:
        version = str(protocol_version) if protocol_version is not None else None
        return ProtocolConfigsType.from_model(await info.context.client.get_protocol_config(version))

    @strawberry.field(description="Metadata of a coin type")
    async def coin_metadata(
        self,
        info: Info[GraphQLContext, None],
        coin_type: str,
    ) -> CoinMetadataType | None:
        model = await info.context.client.get_coin_metadata(coin_type)
        return CoinMetadataType.from_model(model) if model else None

    @strawberry.field(description="A Move package by address")
    def move_package(self, address: AddressArg) -> MovePackageType:
        return MovePackageType(address=address)

    @strawberry.field(description="Any node by its global id")
    async def node(self, info: Info[GraphQLContext, None], id: strawberry.ID) -> Node | None:
        type_name, key = decode_global_id(str(id))
        logger.debug("Resolving node", extra={"node_type": type_name, "node_key": key})
        return await _resolve_node(info.context, type_name, key)


__all__ = ["AvailableRangeType", "Query"]
