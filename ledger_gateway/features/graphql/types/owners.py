"""GraphQL types for addresses and anything that can own objects.

Provides:
- OwnerInterface (``IOwner``): objects, balances, coins and stakes of an address
- OwnerType (``Owner``): an owner whose kind (account or object) is unknown
- AddressType (``Address``): an account, with its transactions
- BalanceType, StakedSuiType and their connections
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Annotated

import strawberry
from strawberry.types import Info

from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.pagination import FetchedPage
from ledger_gateway.features.graphql.types.base import (
    AfterArg,
    BeforeArg,
    FirstArg,
    LastArg,
    PageInfoType,
    connection_args,
)
from ledger_gateway.features.graphql.types.inputs import (
    AddressTransactionBlockRelationship,
    ObjectFilterInput,
    address_relation_filter,
    object_filter_to_upstream,
)
from ledger_gateway.features.graphql.types.move import MoveType
from ledger_gateway.features.graphql.types.objects import (
    CoinConnection,
    CoinType,
    MoveObjectType,
    ObjectConnection,
    ObjectType,
    forward_only,
)
from ledger_gateway.features.graphql.types.scalars import BigInt, SuiAddress
from ledger_gateway.infra.ledger.models import Balance, Coin, EpochInfo, ObjectData, Stake

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.pagination import ConnectionResult
    from ledger_gateway.features.graphql.types.epochs import EpochType
    from ledger_gateway.features.graphql.types.transactions import TransactionBlockConnection


@strawberry.enum(name="StakeStatus", description="Lifecycle state of a stake")
class StakeStatus(Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    UNSTAKED = "UNSTAKED"


@dataclass(frozen=True)
class StakeRecord:
    stake: Stake
    validator_address: str
    staking_pool: str


@strawberry.type(name="Balance", description="Total balance of one coin type")
class BalanceType:
    model: strawberry.Private[Balance]

    @classmethod
    def from_model(cls, model: Balance) -> BalanceType:
        return cls(model=model)

    @strawberry.field
    def coin_type(self) -> MoveType:
        return MoveType(repr=self.model.coin_type)

    @strawberry.field
    def coin_object_count(self) -> int:
        return self.model.coin_object_count

    @strawberry.field
    def total_balance(self) -> BigInt:
        return self.model.total_balance


@strawberry.type(name="StakedSui", description="A stake delegated to a validator")
class StakedSuiType:
    record: strawberry.Private[StakeRecord]

    @strawberry.field
    def staked_sui_id(self) -> SuiAddress:
        return self.record.stake.staked_sui_id

    @strawberry.field
    def status(self) -> StakeStatus:
        return StakeStatus(self.record.stake.status.upper())

    @strawberry.field
    def principal(self) -> BigInt:
        return self.record.stake.principal

    @strawberry.field
    def estimated_reward(self) -> BigInt | None:
        return self.record.stake.estimated_reward

    @strawberry.field(description="Epoch the stake was requested in")
    async def request_epoch(
        self, info: Info[GraphQLContext, None]
    ) -> Annotated["EpochType", strawberry.lazy("ledger_gateway.features.graphql.types.epochs")]:
        from ledger_gateway.features.graphql.types.epochs import EpochType

        model = await info.context.loaders.epochs.load(self.record.stake.stake_request_epoch)
        return EpochType.from_model(model)

    @strawberry.field(description="Epoch the stake becomes active in")
    async def active_epoch(
        self, info: Info[GraphQLContext, None]
    ) -> Annotated["EpochType", strawberry.lazy("ledger_gateway.features.graphql.types.epochs")] | None:
        from ledger_gateway.features.graphql.types.epochs import EpochType

        # Pending stakes activate in an epoch that may not exist yet
        [model] = await info.context.loaders.epochs.load_many([self.record.stake.stake_active_epoch])
        return EpochType.from_model(model) if isinstance(model, EpochInfo) else None

    @strawberry.field
    def validator_address(self) -> SuiAddress:
        return self.record.validator_address

    @strawberry.field
    async def as_move_object(self, info: Info[GraphQLContext, None]) -> MoveObjectType:
        model = await info.context.loaders.objects.load(self.record.stake.staked_sui_id)
        return MoveObjectType(model=model)


@strawberry.interface(name="IOwner", description="Anything that can own objects")
class OwnerInterface:
    address: SuiAddress = strawberry.field(description="Owner address")

    @strawberry.field(description="Objects owned by this address")
    async def object_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
        filter: ObjectFilterInput | None = None,
    ) -> ObjectConnection:
        ctx = info.context
        upstream_filter = object_filter_to_upstream(filter)

        async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[ObjectData]:
            forward_only(inverted, "objectConnection")
            page = await ctx.client.get_owned_objects(
                self.address, filter=upstream_filter, cursor=cursor, limit=limit
            )
            for obj in page.data:
                ctx.loaders.objects.prime(obj.object_id, obj)
            return FetchedPage(page.data, page.next_cursor, page.has_next_page)

        result = await ctx.paginate(
            connection_args(first, after, last, before), fetch, lambda obj: obj.object_id
        )
        return ObjectConnection.from_result(result.map(ObjectType.from_model))

    @strawberry.field(description="Balance of one coin type (SUI when omitted)")
    async def balance(self, info: Info[GraphQLContext, None], type: str | None = None) -> BalanceType:
        return BalanceType.from_model(await info.context.client.get_balance(self.address, type))

    @strawberry.field(description="Balances of every coin type held, ordered by coin type")
    async def balance_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> BalanceConnection:
        balances = await info.context.client.get_all_balances(self.address)
        ordered = sorted(balances, key=lambda balance: balance.coin_type)
        result = await info.context.paginate_sequence(
            connection_args(first, after, last, before), ordered, lambda balance: balance.coin_type
        )
        return BalanceConnection.from_result(result.map(BalanceType.from_model))

    @strawberry.field(description="Coin objects of one coin type (SUI when omitted)")
    async def coin_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
        type: str | None = None,
    ) -> CoinConnection:
        ctx = info.context

        async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[Coin]:
            forward_only(inverted, "coinConnection")
            page = await ctx.client.get_coins(self.address, type, cursor=cursor, limit=limit)
            return FetchedPage(page.data, page.next_cursor, page.has_next_page)

        result = await ctx.paginate(
            connection_args(first, after, last, before), fetch, lambda coin: coin.coin_object_id
        )
        return CoinConnection.from_result(result.map(CoinType.from_model))

    @strawberry.field(description="Stakes delegated by this address")
    async def stake_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> StakedSuiConnection:
        delegations = await info.context.client.get_stakes(self.address)
        records = [
            StakeRecord(
                stake=stake,
                validator_address=delegation.validator_address,
                staking_pool=delegation.staking_pool,
            )
            for delegation in delegations
            for stake in delegation.stakes
        ]
        result = await info.context.paginate_sequence(
            connection_args(first, after, last, before),
            records,
            lambda record: record.stake.staked_sui_id,
        )
        return StakedSuiConnection.from_result(result.map(lambda record: StakedSuiType(record=record)))


@strawberry.type(name="Owner", description="An address that may be an account or an object")
class OwnerType(OwnerInterface):
    @strawberry.field(description="This owner as an object, when it is one")
    async def as_object(self, info: Info[GraphQLContext, None]) -> ObjectType | None:
        [model] = await info.context.loaders.objects.load_many([self.address])
        return ObjectType.from_model(model) if isinstance(model, ObjectData) else None

    @strawberry.field(description="This owner as an account address")
    def as_address(self) -> AddressType:
        return AddressType(address=self.address)


@strawberry.type(name="Address", description="An account address")
class AddressType(OwnerInterface):
    @strawberry.field(description="Transactions this address took part in")
    async def transaction_block_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
        relation: AddressTransactionBlockRelationship | None = None,
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
            address_relation_filter(self.address, relation),
        )


# --- Connection Types (Relay Pattern) ---


@strawberry.type(name="BalanceEdge")
class BalanceEdge:
    node: BalanceType
    cursor: str


@strawberry.type(name="BalanceConnection")
class BalanceConnection:
    edges: list[BalanceEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[BalanceType]) -> BalanceConnection:
        return cls(
            edges=[BalanceEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


@strawberry.type(name="StakedSuiEdge")
class StakedSuiEdge:
    node: StakedSuiType
    cursor: str


@strawberry.type(name="StakedSuiConnection")
class StakedSuiConnection:
    edges: list[StakedSuiEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[StakedSuiType]) -> StakedSuiConnection:
        return cls(
            edges=[StakedSuiEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


__all__ = [
    "AddressType",
    "BalanceConnection",
    "BalanceType",
    "OwnerInterface",
    "OwnerType",
    "StakeStatus",
    "StakedSuiConnection",
    "StakedSuiType",
]
