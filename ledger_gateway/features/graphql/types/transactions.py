"""GraphQL types for transaction blocks and their effects.

Provides:
- TransactionBlockType (Node), keyed by digest
- TransactionBlockKind union: genesis, epoch change, consensus commit
  prologue, programmable
- ProgrammableTransaction union (one member per command) and
  TransactionArgument / TransactionInput unions
- TransactionBlockEffectsType with object and balance changes and events
- TransactionBlockConnection and ``query_transaction_block_connection``

Tagged upstream variants are decoded into distinct models at the client
boundary; the converters here dispatch on the model class.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Union

import strawberry
from strawberry.scalars import JSON
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
from ledger_gateway.features.graphql.types.checkpoints import CheckpointType, GasCostSummaryType
from ledger_gateway.features.graphql.types.epochs import EpochType
from ledger_gateway.features.graphql.types.events import EventConnection, EventType, event_cursor
from ledger_gateway.features.graphql.types.move import MoveFunctionType, MoveType
from ledger_gateway.features.graphql.types.objects import ObjectOwnerUnion, ObjectType, owner_from_model
from ledger_gateway.features.graphql.types.owners import AddressType
from ledger_gateway.features.graphql.types.scalars import Base64, BigInt, SuiAddress, ms_to_datetime
from ledger_gateway.infra.ledger.models import (
    BalanceChange,
    ChangeEpochKind,
    ConsensusCommitPrologueKind,
    GasCoinArgument,
    GasData,
    GenesisKind,
    InputArgument,
    MakeMoveVecCommand,
    MergeCoinsCommand,
    MoveCallCommand,
    ObjectChange,
    ObjectData,
    OwnedObjectInput,
    ProgrammableTransactionKind,
    PublishCommand,
    PureInput,
    ReceivingObjectInput,
    ResultArgument,
    SharedObjectInput,
    SplitCoinsCommand,
    TransactionBlock,
    TransferObjectsCommand,
    UpgradeCommand,
)

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.pagination import ConnectionResult


async def _load_objects(ctx: GraphQLContext, object_ids: list[str]) -> list[ObjectType]:
    loaded = await ctx.loaders.objects.load_many(object_ids)
    return [ObjectType.from_model(model) for model in loaded if isinstance(model, ObjectData)]


# --- Arguments ---


@strawberry.type(name="GasCoin", description="The gas coin of the transaction")
class GasCoinType:
    placeholder: bool | None = strawberry.field(name="_", default=None)


@strawberry.type(name="Input", description="One of the transaction's inputs")
class InputType:
    ix: int


@strawberry.type(name="Result", description="Output of an earlier command")
class ResultType:
    cmd: int
    ix: int | None = strawberry.field(default=None, description="Set for nested results")


TransactionArgument = Annotated[
    Union[GasCoinType, InputType, ResultType],
    strawberry.union(name="TransactionArgument"),
]


def argument_from_model(
    argument: GasCoinArgument | InputArgument | ResultArgument,
) -> GasCoinType | InputType | ResultType:
    if isinstance(argument, GasCoinArgument):
        return GasCoinType()
    if isinstance(argument, InputArgument):
        return InputType(ix=argument.index)
    return ResultType(cmd=argument.command, ix=argument.result)


def _arguments(arguments: list[Any]) -> list[GasCoinType | InputType | ResultType]:
    return [argument_from_model(argument) for argument in arguments]


# --- Commands ---


@strawberry.type(name="MoveCallTransaction")
class MoveCallTransactionType:
    model: strawberry.Private[MoveCallCommand]

    @strawberry.field
    def package(self) -> SuiAddress:
        return self.model.package

    @strawberry.field
    def module(self) -> str:
        return self.model.module

    @strawberry.field
    def function_name(self) -> str:
        return self.model.function

    @strawberry.field(description="The called function, normalized")
    async def function(self, info: Info[GraphQLContext, None]) -> MoveFunctionType:
        record = await info.context.loaders.move_functions.load(self.model.function_key)
        return MoveFunctionType.from_record(record)

    @strawberry.field
    def type_arguments(self) -> list[MoveType]:
        return [MoveType(repr=argument) for argument in self.model.type_arguments]

    @strawberry.field
    def arguments(self) -> list[TransactionArgument]:
        return _arguments(self.model.arguments)


@strawberry.type(name="TransferObjectsTransaction")
class TransferObjectsTransactionType:
    inputs: list[TransactionArgument]
    address: TransactionArgument


@strawberry.type(name="SplitCoinsTransaction")
class SplitCoinsTransactionType:
    coin: TransactionArgument
    amounts: list[TransactionArgument]


@strawberry.type(name="MergeCoinsTransaction")
class MergeCoinsTransactionType:
    coin: TransactionArgument
    coins: list[TransactionArgument]


@strawberry.type(name="PublishTransaction")
class PublishTransactionType:
    dependencies: list[SuiAddress]


@strawberry.type(name="UpgradeTransaction")
class UpgradeTransactionType:
    dependencies: list[SuiAddress]
    current_package: SuiAddress
    upgrade_ticket: TransactionArgument


@strawberry.type(name="MakeMoveVecTransaction")
class MakeMoveVecTransactionType:
    type: MoveType | None
    elements: list[TransactionArgument]


ProgrammableTransaction = Annotated[
    Union[
        MoveCallTransactionType,
        TransferObjectsTransactionType,
        SplitCoinsTransactionType,
        MergeCoinsTransactionType,
        PublishTransactionType,
        UpgradeTransactionType,
        MakeMoveVecTransactionType,
    ],
    strawberry.union(name="ProgrammableTransaction", description="One command of a programmable transaction"),
]


def command_from_model(command: Any) -> Any:
    if isinstance(command, MoveCallCommand):
        return MoveCallTransactionType(model=command)
    if isinstance(command, TransferObjectsCommand):
        return TransferObjectsTransactionType(
            inputs=_arguments(command.objects),
            address=argument_from_model(command.address),
        )
    if isinstance(command, SplitCoinsCommand):
        return SplitCoinsTransactionType(
            coin=argument_from_model(command.coin),
            amounts=_arguments(command.amounts),
        )
    if isinstance(command, MergeCoinsCommand):
        return MergeCoinsTransactionType(
            coin=argument_from_model(command.coin),
            coins=_arguments(command.coins),
        )
    if isinstance(command, PublishCommand):
        return PublishTransactionType(dependencies=command.dependencies)
    if isinstance(command, UpgradeCommand):
        return UpgradeTransactionType(
            dependencies=command.dependencies,
            current_package=command.current_package,
            upgrade_ticket=argument_from_model(command.upgrade_ticket),
        )
    if isinstance(command, MakeMoveVecCommand):
        return MakeMoveVecTransactionType(
            type=MoveType(repr=command.element_type) if command.element_type else None,
            elements=_arguments(command.elements),
        )
    raise TypeError(f"Unhandled command variant {type(command).__name__}")


# --- Inputs ---


@strawberry.type(name="SharedInput", description="A shared object input")
class SharedInputType:
    address: SuiAddress
    initial_shared_version: BigInt
    mutable: bool


@strawberry.type(name="OwnedOrImmutable", description="An owned or immutable object input")
class OwnedOrImmutableType:
    address: SuiAddress
    version: BigInt
    digest: str

    @strawberry.field(description="The object at the version the transaction used")
    async def object(self, info: Info[GraphQLContext, None]) -> ObjectType | None:
        model = await info.context.client.try_get_past_object(self.address, int(self.version))
        return ObjectType.from_model(model) if model else None


@strawberry.type(name="Receiving", description="An object received by the transaction")
class ReceivingType:
    address: SuiAddress
    version: BigInt
    digest: str


@strawberry.type(name="Pure", description="A pure value input")
class PureType:
    value_type: str | None
    value: JSON | None


TransactionInput = Annotated[
    Union[SharedInputType, OwnedOrImmutableType, ReceivingType, PureType],
    strawberry.union(name="TransactionInput"),
]


def input_from_model(value: Any) -> Any:
    if isinstance(value, SharedObjectInput):
        return SharedInputType(
            address=value.object_id,
            initial_shared_version=value.initial_shared_version,
            mutable=value.mutable,
        )
    if isinstance(value, OwnedObjectInput):
        return OwnedOrImmutableType(address=value.object_id, version=value.version, digest=value.digest)
    if isinstance(value, ReceivingObjectInput):
        return ReceivingType(address=value.object_id, version=value.version, digest=value.digest)
    if isinstance(value, PureInput):
        return PureType(value_type=value.value_type, value=value.value)
    raise TypeError(f"Unhandled input variant {type(value).__name__}")


# --- Transaction kinds ---


@strawberry.type(name="GenesisTransaction")
class GenesisTransactionType:
    object_ids: strawberry.Private[list[str]]

    @strawberry.field(description="Objects created at genesis")
    async def objects(self, info: Info[GraphQLContext, None]) -> list[ObjectType]:
        return await _load_objects(info.context, self.object_ids)


@strawberry.type(name="ChangeEpochTransaction")
class ChangeEpochTransactionType:
    model: strawberry.Private[ChangeEpochKind]

    @strawberry.field(description="The epoch being started")
    async def epoch(self, info: Info[GraphQLContext, None]) -> EpochType:
        return EpochType.from_model(await info.context.loaders.epochs.load(self.model.epoch))

    @strawberry.field
    def timestamp(self) -> datetime | None:
        return ms_to_datetime(self.model.epoch_start_timestamp_ms)

    @strawberry.field
    def storage_charge(self) -> BigInt:
        return self.model.storage_charge

    @strawberry.field
    def computation_charge(self) -> BigInt:
        return self.model.computation_charge

    @strawberry.field
    def storage_rebate(self) -> BigInt:
        return self.model.storage_rebate


@strawberry.type(name="ConsensusCommitPrologueTransaction")
class ConsensusCommitPrologueTransactionType:
    model: strawberry.Private[ConsensusCommitPrologueKind]

    @strawberry.field
    async def epoch(self, info: Info[GraphQLContext, None]) -> EpochType:
        return EpochType.from_model(await info.context.loaders.epochs.load(self.model.epoch))

    @strawberry.field
    def round(self) -> BigInt:
        return self.model.round

    @strawberry.field
    def timestamp(self) -> datetime | None:
        return ms_to_datetime(self.model.commit_timestamp_ms)


@strawberry.type(name="ProgrammableTransactionBlock")
class ProgrammableTransactionBlockType:
    model: strawberry.Private[ProgrammableTransactionKind]

    @strawberry.field
    def inputs(self) -> list[TransactionInput]:
        return [input_from_model(value) for value in self.model.inputs]

    @strawberry.field(description="Commands, in execution order")
    def transactions(self) -> list[ProgrammableTransaction]:
        return [command_from_model(command) for command in self.model.transactions]


TransactionBlockKind = Annotated[
    Union[
        GenesisTransactionType,
        ChangeEpochTransactionType,
        ConsensusCommitPrologueTransactionType,
        ProgrammableTransactionBlockType,
    ],
    strawberry.union(name="TransactionBlockKind"),
]


def kind_from_model(kind: Any) -> Any:
    if isinstance(kind, GenesisKind):
        return GenesisTransactionType(object_ids=kind.objects)
    if isinstance(kind, ChangeEpochKind):
        return ChangeEpochTransactionType(model=kind)
    if isinstance(kind, ConsensusCommitPrologueKind):
        return ConsensusCommitPrologueTransactionType(model=kind)
    if isinstance(kind, ProgrammableTransactionKind):
        return ProgrammableTransactionBlockType(model=kind)
    raise TypeError(f"Unhandled transaction kind {type(kind).__name__}")


# --- Gas ---


@strawberry.type(name="GasInput", description="How the transaction pays for gas")
class GasInputType:
    model: strawberry.Private[GasData]

    @strawberry.field(description="Address paying for gas")
    def gas_sponsor(self) -> AddressType:
        return AddressType(address=self.model.owner)

    @strawberry.field(description="Coins used to pay for gas")
    async def gas_payment(self, info: Info[GraphQLContext, None]) -> list[ObjectType]:
        return await _load_objects(info.context, [ref.object_id for ref in self.model.payment])

    @strawberry.field
    def gas_price(self) -> BigInt:
        return self.model.price

    @strawberry.field
    def gas_budget(self) -> BigInt:
        return self.model.budget


@strawberry.type(name="GasEffects", description="Gas charged for execution")
class GasEffectsType:
    gas_object_id: strawberry.Private[str]
    gas_summary: GasCostSummaryType

    @strawberry.field
    async def gas_object(self, info: Info[GraphQLContext, None]) -> ObjectType:
        return ObjectType.from_model(await info.context.loaders.objects.load(self.gas_object_id))


# --- Effects ---


@strawberry.enum(name="ExecutionStatus", description="Whether the transaction succeeded")
class ExecutionStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@strawberry.type(name="ObjectChange", description="An object the transaction touched")
class ObjectChangeType:
    model: strawberry.Private[ObjectChange]

    @strawberry.field
    def address(self) -> SuiAddress | None:
        return self.model.changed_id

    @strawberry.field(description="Upstream change kind, e.g. created or mutated")
    def change_type(self) -> str:
        return self.model.type

    @strawberry.field
    def id_created(self) -> bool:
        return self.model.type in ("created", "published")

    @strawberry.field
    def id_deleted(self) -> bool:
        return self.model.type in ("deleted", "wrapped")

    @strawberry.field(description="The object before the transaction")
    async def input_state(self, info: Info[GraphQLContext, None]) -> ObjectType | None:
        if self.model.previous_version is None or self.model.changed_id is None:
            return None
        model = await info.context.client.try_get_past_object(
            self.model.changed_id, int(self.model.previous_version)
        )
        return ObjectType.from_model(model) if model else None

    @strawberry.field(description="The object after the transaction")
    async def output_state(self, info: Info[GraphQLContext, None]) -> ObjectType | None:
        if self.model.version is None or self.model.changed_id is None or self.model.type == "deleted":
            return None
        model = await info.context.client.try_get_past_object(
            self.model.changed_id, int(self.model.version)
        )
        return ObjectType.from_model(model) if model else None


@strawberry.type(name="BalanceChange", description="Net change of one owner's balance")
class BalanceChangeType:
    model: strawberry.Private[BalanceChange]

    @strawberry.field
    def owner(self) -> ObjectOwnerUnion | None:
        return owner_from_model(self.model.owner)

    @strawberry.field
    def coin_type(self) -> MoveType:
        return MoveType(repr=self.model.coin_type)

    @strawberry.field(description="Signed amount as a decimal string")
    def amount(self) -> str:
        return self.model.amount


@strawberry.type(name="TransactionBlockEffects", description="What executing the transaction did")
class TransactionBlockEffectsType:
    block: strawberry.Private[TransactionBlock]

    @property
    def _effects(self):
        return self.block.effects

    @strawberry.field
    def status(self) -> ExecutionStatus:
        return ExecutionStatus(self._effects.status.status)

    @strawberry.field(description="Failure reason, when execution failed")
    def errors(self) -> str | None:
        return self._effects.status.error

    @strawberry.field
    def transaction_block(self) -> TransactionBlockType:
        return TransactionBlockType.from_model(self.block)

    @strawberry.field(description="Transactions whose outputs this one read")
    async def dependencies(self, info: Info[GraphQLContext, None]) -> list[TransactionBlockType]:
        loaded = await info.context.loaders.transaction_blocks.load_many(self._effects.dependencies)
        return [
            TransactionBlockType.from_model(model)
            for model in loaded
            if isinstance(model, TransactionBlock)
        ]

    @strawberry.field
    def gas_effects(self) -> GasEffectsType:
        return GasEffectsType(
            gas_object_id=self._effects.gas_object.reference.object_id,
            gas_summary=GasCostSummaryType.from_model(self._effects.gas_used),
        )

    @strawberry.field
    def object_changes(self) -> list[ObjectChangeType]:
        return [ObjectChangeType(model=change) for change in self.block.object_changes or []]

    @strawberry.field
    def balance_changes(self) -> list[BalanceChangeType]:
        return [BalanceChangeType(model=change) for change in self.block.balance_changes or []]

    @strawberry.field(description="Epoch the transaction executed in")
    async def epoch(self, info: Info[GraphQLContext, None]) -> EpochType:
        return EpochType.from_model(await info.context.loaders.epochs.load(self._effects.executed_epoch))

    @strawberry.field(description="Checkpoint that includes the transaction")
    async def checkpoint(self, info: Info[GraphQLContext, None]) -> CheckpointType | None:
        if self.block.checkpoint is None:
            return None
        return CheckpointType.from_model(await info.context.loaders.checkpoints.load(self.block.checkpoint))

    @strawberry.field
    def timestamp(self) -> datetime | None:
        return ms_to_datetime(self.block.timestamp_ms)

    @strawberry.field(description="Events emitted, in emission order")
    async def event_connection(
        self,
        info: Info[GraphQLContext, None],
        first: FirstArg = None,
        after: AfterArg = None,
        last: LastArg = None,
        before: BeforeArg = None,
    ) -> EventConnection:
        result = await info.context.paginate_sequence(
            connection_args(first, after, last, before), self.block.events or [], event_cursor
        )
        return EventConnection.from_result(result.map(EventType.from_model))


# --- Transaction blocks ---


@strawberry.type(name="TransactionBlock", description="A transaction and its execution results")
class TransactionBlockType(Node):
    node_type = "TransactionBlock"

    model: strawberry.Private[TransactionBlock]

    def node_key(self) -> str:
        return self.model.digest

    @classmethod
    def from_model(cls, model: TransactionBlock) -> TransactionBlockType:
        return cls(model=model)

    @strawberry.field
    def digest(self) -> str:
        return self.model.digest

    @strawberry.field
    def sender(self) -> AddressType | None:
        if self.model.transaction is None:
            return None
        return AddressType(address=self.model.transaction.data.sender)

    @strawberry.field
    def gas_input(self) -> GasInputType | None:
        if self.model.transaction is None:
            return None
        return GasInputType(model=self.model.transaction.data.gas_data)

    @strawberry.field
    def kind(self) -> TransactionBlockKind | None:
        if self.model.transaction is None:
            return None
        return kind_from_model(self.model.transaction.data.transaction)

    @strawberry.field(description="User signatures, base64-encoded")
    def signatures(self) -> list[Base64]:
        return list(self.model.transaction.tx_signatures) if self.model.transaction else []

    @strawberry.field
    def effects(self) -> TransactionBlockEffectsType | None:
        if self.model.effects is None:
            return None
        return TransactionBlockEffectsType(block=self.model)

    @strawberry.field(description="BCS-encoded transaction data")
    def bcs(self) -> Base64 | None:
        return self.model.raw_transaction


# --- Connection Types (Relay Pattern) ---


@strawberry.type(name="TransactionBlockEdge")
class TransactionBlockEdge:
    node: TransactionBlockType
    cursor: str


@strawberry.type(name="TransactionBlockConnection")
class TransactionBlockConnection:
    edges: list[TransactionBlockEdge]
    page_info: PageInfoType

    @classmethod
    def from_result(cls, result: ConnectionResult[TransactionBlockType]) -> TransactionBlockConnection:
        return cls(
            edges=[TransactionBlockEdge(node=edge.node, cursor=edge.cursor) for edge in result.edges],
            page_info=PageInfoType.from_result(result),
        )


async def query_transaction_block_connection(
    ctx: GraphQLContext,
    args: ConnectionArgs,
    upstream_filter: dict[str, Any] | None,
) -> TransactionBlockConnection:
    """Page through ``suix_queryTransactionBlocks`` for one upstream filter.

    ``last`` pages newest first. Every block returned also seeds the
    request's transaction loader.
    """

    async def fetch(cursor: str | None, limit: int, inverted: bool) -> FetchedPage[TransactionBlock]:
        page = await ctx.client.query_transaction_blocks(
            filter=upstream_filter, cursor=cursor, limit=limit, descending_order=inverted
        )
        for block in page.data:
            ctx.loaders.transaction_blocks.prime(block.digest, block)
        return FetchedPage(page.data, page.next_cursor, page.has_next_page)

    result = await ctx.paginate(args, fetch, lambda block: block.digest)
    return TransactionBlockConnection.from_result(result.map(TransactionBlockType.from_model))


__all__ = [
    "ExecutionStatus",
    "TransactionBlockConnection",
    "TransactionBlockEffectsType",
    "TransactionBlockType",
    "argument_from_model",
    "command_from_model",
    "input_from_model",
    "kind_from_model",
    "query_transaction_block_connection",
]
