"""GraphQL types for on-chain objects.

Provides:
- ObjectType (Node): any object, package or Move object
- MoveObjectType, MoveValueType, CoinType, DynamicFieldType
- ObjectOwner union: AddressOwner | Parent | Shared | Immutable
- Connection types for objects, coins and dynamic fields
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Union

import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info

from ledger_gateway.core.exceptions import UnsupportedOperationException
from ledger_gateway.features.graphql.context import GraphQLContext
from ledger_gateway.features.graphql.pagination import FetchedPage
from ledger_gateway.features.graphql.types.base import (
    AfterArg,
    BeforeArg,
    FirstArg,
    LastArg,
    Node,
    PageInfoType,
    connection_args,
)
from ledger_gateway.features.graphql.types.move import MovePackageType, MoveType, split_type_arguments
from ledger_gateway.features.graphql.types.scalars import Base64, BigInt, SuiAddress
from ledger_gateway.infra.ledger.addresses import normalize_address
from ledger_gateway.infra.ledger.models import (
    AddressOwner,
    Coin,
    DynamicFieldInfo,
    ImmutableOwner,
    ObjectData,
    ObjectOwner,
    SharedOwner,
)

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.pagination import ConnectionResult
    from ledger_gateway.features.graphql.types.owners import OwnerType
    from ledger_gateway.features.graphql.types.transactions import (
        TransactionBlockConnection,
        TransactionBlockType,
    )

_FRAMEWORK = normalize_address("0x2")


def forward_only(inverted: bool, field: str) -> None:
    """Reject ``last`` for connections whose upstream listing has no order flag."""
    if inverted:
        raise UnsupportedOperationException(
            detail=f"'last' is not supported by {field}; page forward with 'first'",
            extra={"field": field},
        )


def is_coin_type(type_repr: str | None) -> bool:
    if not type_repr:
        return False
    name, arguments = split_type_arguments(type_repr)
    parts = name.split("::")
    return (
        len(parts) == 3
        and normalize_address(parts[0]) == _FRAMEWORK
        and parts[1:] == ["coin", "Coin"]
        and len(arguments) == 1
    )


# --- Ownership ---


@strawberry.type(name="AddressOwner", description="Owned by an account address")
class AddressOwnerType:
    address: strawberry.Private[str]

    @strawberry.field
    def owner(
        self,
    ) -> Annotated["OwnerType", strawberry.lazy("ledger_gateway.features.graphql.types.owners")]:
        from ledger_gateway.features.graphql.types.owners import OwnerType

        return OwnerType(address=self.address)


@strawberry.type(name="Parent", description="Owned by another object")
class ParentType:
    parent_id: strawberry.Private[str]

    @strawberry.field
    async def parent(self, info: Info[GraphQLContext, None]) -> ObjectType:
        return ObjectType.from_model(await info.context.loaders.objects.load(self.parent_id))


@strawberry.type(name="Shared", description="Shared object, accessible to everyone")
class SharedType:
    initial_shared_version: BigInt


@strawberry.type(name="Immutable", description="Frozen object, readable by everyone")
class ImmutableType:
    placeholder: bool | None = strawberry.field(name="_", default=None)


ObjectOwnerUnion = Annotated[
    Union[AddressOwnerType, ParentType, SharedType, ImmutableType],
    strawberry.union(name="ObjectOwner", description="Who owns an object"),
]


def owner_from_model(
    owner: AddressOwner | ObjectOwner | SharedOwner | ImmutableOwner | None,
) -> AddressOwnerType | ParentType | SharedType | ImmutableType | None:
    if isinstance(owner, AddressOwner):
        return AddressOwnerType(address=owner.address)
    if isinstance(owner, ObjectOwner):
        return ParentType(parent_id=owner.address)
    if isinstance(owner, SharedOwner):
        return SharedType(initial_shared_version=owner.initial_shared_version)
    if isinstance(owner, ImmutableOwner):
        return ImmutableType()
    return None


# --- Values ---


@strawberry.type(name="DisplayEntry", description="One rendered Display field")
class DisplayEntryType:
    key: str
    value: str


@strawberry.type(name="MoveValue", description="A Move value with its type")
class MoveValueType:
    type: MoveType
    json: JSON | None = None
    bcs: Base64 | None = None


@strawberry.type(name="MoveObject", description="An object holding a Move struct value")
class MoveObjectType:
    model: strawberry.Private[ObjectData]

    @strawberry.field(description="The struct value stored in the object")
    def contents(self) -> MoveValueType | None:
        content = self.model.content
        if content is None or content.type is None:
            return None
        bcs = (self.model.bcs or {}).get("bcsBytes")
        return MoveValueType(type=MoveType(repr=content.type), json=content.fields, bcs=bcs)

    @strawberry.field
    def has_public_transfer(self) -> bool | None:
        return self.model.content.has_public_transfer if self.model.content else None

    @strawberry.field
    def as_object(self) -> ObjectType:
        return ObjectType.from_model(self.model)

    @strawberry.field(description="The object as a coin, when it is one")
    def as_coin(self) -> CoinType | None:
        if not is_coin_type(self.model.type) or self.model.content is None:
            return None
        fields = self.model.content.fields or {}
        coin_type = split_type_arguments(self.model.type or "")[1][0]
        return CoinType.from_model(
            Coin(
                coin_type=coin_type,
                coin_object_id=self.model.object_id,
                version=self.model.version,
                digest=self.model.digest,
                balance=str(fields.get("balance", "0")),
                previous_transaction=self.model.previous_transaction,
            )
        )


@strawberry.type(name="Coin", description="A coin object and its balance")
class CoinType:
    model: strawberry.Private[Coin]

    @classmethod
    def from_model(cls, model: Coin) -> CoinType:
        return cls(model=model)

    @strawberry.field
    def coin_object_id(self) -> SuiAddress:
        return self.model.coin_object_id

    @strawberry.field
    def balance(self) -> BigInt:
        return self.model.balance

    @strawberry.field
    def coin_type(self) -> MoveType:
        return MoveType(repr=self.model.coin_type)

    @strawberry.field
    async def as_move_object(self, info: Info[GraphQLContext, None]) -> MoveObjectType:
        return MoveObjectType(model=await info.context.loaders.objects.load(self.model.coin_object_id))


# --- Objects ---


@strawberry.type(name="Object", description="An object on chain, at its latest or a past version")
class ObjectType(Node):
    node_type = "Object"

    model: strawberry.Private[ObjectData]

    def node_key(self) -> str:
        return self.model.object_id

    @classmethod
    def from_model(cls, model: ObjectData) -> ObjectType:
        return cls(model=model)

    @strawberry.field(description="Object id")
    def address(self) -> SuiAddress:
        return self.model.object_id

    @strawberry.field
    def version(self) -> BigInt:
        return self.model.version

    @strawberry.field
    def digest(self) -> str:
        return self.model.digest

    @strawberry.field
    def owner(self) -> ObjectOwnerUnion | None:
        return owner_from_model(self.model.owner)

    @strawberry.field(description="Transaction that last wrote this object")
    async def previous_transaction_block(
        self, info: Info[GraphQLContext, None]
    ) -> Annotated[
        "TransactionBlockType", strawberry.lazy("ledger_gateway.features.graphql.types.transactions")
    ] | None:
        from ledger_gateway.features.graphql.types.transactions import TransactionBlockType

        digest = self.model.previous_transaction
        if digest is None:
            return None
        return TransactionBlockType.from_model(await info.context.loaders.transaction_blocks.load(digest))

    @strawberry.field
    def storage_rebate(self) -> BigInt | None:
        return self.model.storage_rebate

    @strawberry.field(description="Display fields rendered for this object")
    def display(self) -> list[DisplayEntryType] | None:
        display = self.model.display
        if display is None or display.data is None:
            return None
        return [DisplayEntryType(key=key, value=value) for key, value in display.data.items()]

    @strawberry.field(description="Object type, absent for packages")
    def type(self) -> MoveType | None:
        if self.model.type is None or self.model.is_package:
            return None
        return MoveType(repr=self.model.type)

    @strawberry.field
    def bcs(self) -> Base64 | None:
        bcs = self.model.bcs or {}
        return bcs.get("bcsBytes")

    @strawberry.field
    def as_move_object(self) -> MoveObjectType | None:
        return None if self.model.is_package else MoveObjectType(model=self.model)

    @strawberry.field
    def as_move_package(self) -> MovePackageType | None:
        return MovePackageType(address=self.model.object_id) if self.model.is_package else None

    @strawberry.field(description="Transactions that sent objects to this object")
    async def received_transaction_block_connection(
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
            {"ToAddress": self.model.object_id},
        )

    @strawberry.field(description="Dynamic fields owned by this object")
    async def dynamic_field_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> DynamicFieldConnection:
        ctx = info.context

        async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[DynamicFieldInfo]:
            forward_only(inverted, "dynamicFieldConnection")
            page = await ctx.client.get_dynamic_fields(self.model.object_id, cursor=cursor, limit=limit)
            return FetchedPage(page.data, page.next_cursor, page.has_next_page)

        result = await ctx.paginate(
            connection_args(first, after, last, before), fetch, lambda field: field.object_id
        )
        return DynamicFieldConnection.from_result(result.map(DynamicFieldType.from_model))


# --- Dynamic fields ---


@strawberry.type(name="DynamicField", description="A dynamic field attached to an object")
class DynamicFieldType:
    model: strawberry.Private[DynamicFieldInfo]

    @classmethod
    def from_model(cls, model: DynamicFieldInfo) -> DynamicFieldType:
        return cls(model=model)

    @strawberry.field
    def name(self) -> MoveValueType:
        return MoveValueType(
            type=MoveType(repr=self.model.name.type),
            json=self.model.name.value,
            bcs=self.model.bcs_name,
        )

    @strawberry.field(description="The field's value: an object for dynamic object fields")
    async def value(self, info: Info[GraphQLContext, None]) -> DynamicFieldValue:
        if self.model.type == "DynamicObject":
            model = await info.context.loaders.objects.load(self.model.object_id)
            return MoveObjectType(model=model)
        return MoveValueType(type=MoveType(repr=self.model.object_type))


DynamicFieldValue = Annotated[
    Union[MoveObjectType, MoveValueType],
    strawberry.union(name="DynamicFieldValue"),
]


# --- Connection Types (Relay Pattern) ---


@strawberry.type(name="ObjectEdge")
class ObjectEdge:
    node: ObjectType
    cursor: str


@strawberry.type(name="ObjectConnection")
class ObjectConnection:
    edges: list[ObjectEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[ObjectType]) -> ObjectConnection:
        return cls(
            edges=[ObjectEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


@strawberry.type(name="CoinEdge")
class CoinEdge:
    node: CoinType
    cursor: str


@strawberry.type(name="CoinConnection")
class CoinConnection:
    edges: list[CoinEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[CoinType]) -> CoinConnection:
        return cls(
            edges=[CoinEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


@strawberry.type(name="DynamicFieldEdge")
class DynamicFieldEdge:
    node: DynamicFieldType
    cursor: str


@strawberry.type(name="DynamicFieldConnection")
class DynamicFieldConnection:
    edges: list[DynamicFieldEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[DynamicFieldType]) -> DynamicFieldConnection:
        return cls(
            edges=[DynamicFieldEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


__all__ = [
    "CoinConnection",
    "CoinType",
    "DynamicFieldConnection",
    "DynamicFieldType",
    "MoveObjectType",
    "MoveValueType",
    "ObjectConnection",
    "ObjectOwnerUnion",
    "ObjectType",
    "forward_only",
    "is_coin_type",
    "owner_from_model",
]
