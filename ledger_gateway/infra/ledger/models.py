"""Pydantic models for ledger JSON-RPC payloads.

Every upstream result is validated into these models once, inside the
client. Enum-like payloads (transaction kinds, programmable commands,
command arguments, transaction inputs, owners) are decoded here into one
class per variant so the GraphQL layer can dispatch on ``isinstance``.
An unrecognised variant fails validation, which the client reports as a
malformed upstream response.

Upstream integers wider than 53 bits are sent as decimal strings; ``U64``
keeps them as strings and accepts plain JSON numbers too.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Generic, Literal, TypeVar, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    model_validator,
)
from pydantic.alias_generators import to_camel


def _number_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


U64 = Annotated[str, BeforeValidator(_number_to_str)]

T = TypeVar("T")


class LedgerModel(BaseModel):
    """Base for upstream payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Page(LedgerModel, Generic[T]):
    """One upstream page: items plus the cursor to resume after them."""

    data: list[T]
    next_cursor: Any = None
    has_next_page: bool = False


def _external_tag(value: Any) -> str | None:
    """Tag of an externally tagged enum value (``"Tag"`` or ``{"Tag": ...}``)."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and len(value) == 1:
        return next(iter(value))
    return getattr(value, "TAG", None)


class _ExternallyTagged(LedgerModel):
    """Variant of an externally tagged enum.

    Subclasses set ``TAG`` and implement ``_unwrap`` to turn the payload
    under the tag into field values.
    """

    TAG: ClassVar[str]

    @model_validator(mode="before")
    @classmethod
    def _decode_tagged(cls, data: Any) -> Any:
        if data == cls.TAG:
            return cls._unwrap(None)
        if isinstance(data, dict) and set(data) == {cls.TAG}:
            return cls._unwrap(data[cls.TAG])
        return data

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        return dict(payload or {})


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class GasCostSummary(LedgerModel):
    computation_cost: U64
    storage_cost: U64
    storage_rebate: U64
    non_refundable_storage_fee: U64 | None = None


class ObjectRef(LedgerModel):
    object_id: str
    version: U64
    digest: str


class AddressOwner(_ExternallyTagged):
    TAG: ClassVar[str] = "AddressOwner"
    address: str

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        return {"address": payload}


class ObjectOwner(_ExternallyTagged):
    TAG: ClassVar[str] = "ObjectOwner"
    address: str

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        return {"address": payload}


class SharedOwner(_ExternallyTagged):
    TAG: ClassVar[str] = "Shared"
    initial_shared_version: U64


class ImmutableOwner(_ExternallyTagged):
    TAG: ClassVar[str] = "Immutable"


Owner = Annotated[
    Union[
        Annotated[AddressOwner, Tag("AddressOwner")],
        Annotated[ObjectOwner, Tag("ObjectOwner")],
        Annotated[SharedOwner, Tag("Shared")],
        Annotated[ImmutableOwner, Tag("Immutable")],
    ],
    Discriminator(_external_tag),
]


class OwnedObjectRef(LedgerModel):
    owner: Owner
    reference: ObjectRef


# ---------------------------------------------------------------------------
# Checkpoints and epochs
# ---------------------------------------------------------------------------


class EndOfEpochData(LedgerModel):
    next_epoch_committee: list[tuple[str, U64]] = Field(default_factory=list)
    next_epoch_protocol_version: U64


class Checkpoint(LedgerModel):
    epoch: U64
    sequence_number: U64
    digest: str
    network_total_transactions: U64
    previous_digest: str | None = None
    epoch_rolling_gas_cost_summary: GasCostSummary
    timestamp_ms: U64
    end_of_epoch_data: EndOfEpochData | None = None
    transactions: list[str] = Field(default_factory=list)
    validator_signature: str


class Validator(LedgerModel):
    """Validator summary as reported inside an epoch."""

    sui_address: str
    name: str | None = None
    description: str | None = None
    image_url: str | None = None
    project_url: str | None = None
    protocol_pubkey_bytes: str | None = None
    network_pubkey_bytes: str | None = None
    worker_pubkey_bytes: str | None = None
    proof_of_possession_bytes: str | None = None
    net_address: str | None = None
    p2p_address: str | None = None
    primary_address: str | None = None
    worker_address: str | None = None
    next_epoch_protocol_pubkey_bytes: str | None = None
    next_epoch_network_pubkey_bytes: str | None = None
    next_epoch_worker_pubkey_bytes: str | None = None
    next_epoch_proof_of_possession: str | None = None
    next_epoch_net_address: str | None = None
    next_epoch_p2p_address: str | None = None
    next_epoch_primary_address: str | None = None
    next_epoch_worker_address: str | None = None
    voting_power: U64 | None = None
    gas_price: U64 | None = None
    commission_rate: U64 | None = None
    next_epoch_stake: U64 | None = None
    next_epoch_gas_price: U64 | None = None
    next_epoch_commission_rate: U64 | None = None
    staking_pool_id: str | None = None
    staking_pool_activation_epoch: U64 | None = None
    staking_pool_sui_balance: U64 | None = None
    rewards_pool: U64 | None = None
    pool_token_balance: U64 | None = None
    pending_stake: U64 | None = None
    pending_total_sui_withdraw: U64 | None = None
    pending_pool_token_withdraw: U64 | None = None
    exchange_rates_size: U64 | None = None


class EndOfEpochInfo(LedgerModel):
    last_checkpoint_id: U64 | None = None
    epoch_end_timestamp: U64 | None = None
    protocol_version: U64 | None = None
    reference_gas_price: U64 | None = None
    total_stake: U64 | None = None
    storage_charge: U64 | None = None
    storage_rebate: U64 | None = None
    storage_fund_balance: U64 | None = None
    stake_subsidy_amount: U64 | None = None
    total_gas_fees: U64 | None = None
    total_stake_rewards_distributed: U64 | None = None


class EpochInfo(LedgerModel):
    epoch: U64
    validators: list[Validator] = Field(default_factory=list)
    epoch_total_transactions: U64 | None = None
    first_checkpoint_id: U64 | None = None
    epoch_start_timestamp: U64 | None = None
    end_of_epoch_info: EndOfEpochInfo | None = None
    reference_gas_price: U64 | None = None

    @property
    def epoch_number(self) -> int:
        return int(self.epoch)


# ---------------------------------------------------------------------------
# Programmable transaction arguments and commands
# ---------------------------------------------------------------------------


class GasCoinArgument(_ExternallyTagged):
    TAG: ClassVar[str] = "GasCoin"


class InputArgument(_ExternallyTagged):
    TAG: ClassVar[str] = "Input"
    index: int

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        return {"index": payload}


class ResultArgument(_ExternallyTagged):
    """Output of an earlier command; ``result`` is set for nested results."""

    TAG: ClassVar[str] = "Result"
    command: int
    result: int | None = None

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        return {"command": payload}


class NestedResultArgument(ResultArgument):
    TAG: ClassVar[str] = "NestedResult"

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        command, result = payload
        return {"command": command, "result": result}


Argument = Annotated[
    Union[
        Annotated[GasCoinArgument, Tag("GasCoin")],
        Annotated[InputArgument, Tag("Input")],
        Annotated[ResultArgument, Tag("Result")],
        Annotated[NestedResultArgument, Tag("NestedResult")],
    ],
    Discriminator(_external_tag),
]


class MoveCallCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "MoveCall"
    package: str
    module: str
    function: str
    type_arguments: list[str] = Field(default_factory=list)
    arguments: list[Argument] = Field(default_factory=list)

    @property
    def function_key(self) -> str:
        return f"{self.package},{self.module},{self.function}"


class TransferObjectsCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "TransferObjects"
    objects: list[Argument]
    address: Argument

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        objects, address = payload
        return {"objects": objects, "address": address}


class SplitCoinsCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "SplitCoins"
    coin: Argument
    amounts: list[Argument]

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        coin, amounts = payload
        return {"coin": coin, "amounts": amounts}


class MergeCoinsCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "MergeCoins"
    coin: Argument
    coins: list[Argument]

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        coin, coins = payload
        return {"coin": coin, "coins": coins}


class PublishCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "Publish"
    dependencies: list[str]

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        return {"dependencies": payload}


class UpgradeCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "Upgrade"
    dependencies: list[str]
    current_package: str
    upgrade_ticket: Argument

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        dependencies, current_package, ticket = payload
        return {
            "dependencies": dependencies,
            "current_package": current_package,
            "upgrade_ticket": ticket,
        }


class MakeMoveVecCommand(_ExternallyTagged):
    TAG: ClassVar[str] = "MakeMoveVec"
    element_type: str | None = None
    elements: list[Argument]

    @classmethod
    def _unwrap(cls, payload: Any) -> dict[str, Any]:
        element_type, elements = payload
        return {"element_type": element_type, "elements": elements}


Command = Annotated[
    Union[
        Annotated[MoveCallCommand, Tag("MoveCall")],
        Annotated[TransferObjectsCommand, Tag("TransferObjects")],
        Annotated[SplitCoinsCommand, Tag("SplitCoins")],
        Annotated[MergeCoinsCommand, Tag("MergeCoins")],
        Annotated[PublishCommand, Tag("Publish")],
        Annotated[UpgradeCommand, Tag("Upgrade")],
        Annotated[MakeMoveVecCommand, Tag("MakeMoveVec")],
    ],
    Discriminator(_external_tag),
]


# ---------------------------------------------------------------------------
# Programmable transaction inputs
# ---------------------------------------------------------------------------


class PureInput(LedgerModel):
    type: Literal["pure"] = "pure"
    value_type: str | None = None
    value: Any = None


class OwnedObjectInput(LedgerModel):
    """Owned or immutable object passed by reference."""

    type: Literal["object"] = "object"
    object_type: Literal["immOrOwnedObject"] = "immOrOwnedObject"
    object_id: str
    version: U64
    digest: str


class SharedObjectInput(LedgerModel):
    type: Literal["object"] = "object"
    object_type: Literal["sharedObject"] = "sharedObject"
    object_id: str
    initial_shared_version: U64
    mutable: bool


class ReceivingObjectInput(LedgerModel):
    type: Literal["object"] = "object"
    object_type: Literal["receiving"] = "receiving"
    object_id: str
    version: U64
    digest: str


def _input_tag(value: Any) -> str | None:
    if isinstance(value, dict):
        if value.get("type") == "pure":
            return "pure"
        return value.get("objectType") or value.get("object_type")
    if isinstance(value, PureInput):
        return "pure"
    return getattr(value, "object_type", None)


TransactionInput = Annotated[
    Union[
        Annotated[PureInput, Tag("pure")],
        Annotated[OwnedObjectInput, Tag("immOrOwnedObject")],
        Annotated[SharedObjectInput, Tag("sharedObject")],
        Annotated[ReceivingObjectInput, Tag("receiving")],
    ],
    Discriminator(_input_tag),
]


# ---------------------------------------------------------------------------
# Transaction kinds
# ---------------------------------------------------------------------------


class GenesisKind(LedgerModel):
    kind: Literal["Genesis"]
    objects: list[str] = Field(default_factory=list)


class ChangeEpochKind(LedgerModel):
    kind: Literal["ChangeEpoch"]
    epoch: U64
    storage_charge: U64
    computation_charge: U64
    storage_rebate: U64
    epoch_start_timestamp_ms: U64


class ConsensusCommitPrologueKind(LedgerModel):
    kind: Literal[
        "ConsensusCommitPrologue",
        "ConsensusCommitPrologueV2",
        "ConsensusCommitPrologueV3",
    ]
    epoch: U64
    round: U64
    commit_timestamp_ms: U64


class ProgrammableTransactionKind(LedgerModel):
    kind: Literal["ProgrammableTransaction"]
    inputs: list[TransactionInput] = Field(default_factory=list)
    transactions: list[Command] = Field(default_factory=list)


TransactionKind = Annotated[
    Union[
        GenesisKind,
        ChangeEpochKind,
        ConsensusCommitPrologueKind,
        ProgrammableTransactionKind,
    ],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Transaction blocks, effects and events
# ---------------------------------------------------------------------------


class GasData(LedgerModel):
    payment: list[ObjectRef] = Field(default_factory=list)
    owner: str
    price: U64
    budget: U64


class TransactionData(LedgerModel):
    message_version: str = "v1"
    transaction: TransactionKind
    sender: str
    gas_data: GasData


class SenderSignedData(LedgerModel):
    data: TransactionData
    tx_signatures: list[str] = Field(default_factory=list)


class ExecutionStatus(LedgerModel):
    status: Literal["success", "failure"]
    error: str | None = None


class TransactionEffects(LedgerModel):
    message_version: str = "v1"
    status: ExecutionStatus
    executed_epoch: U64
    gas_used: GasCostSummary
    transaction_digest: str
    gas_object: OwnedObjectRef
    events_digest: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    modified_at_versions: list[dict[str, Any]] = Field(default_factory=list)
    shared_objects: list[ObjectRef] = Field(default_factory=list)
    created: list[OwnedObjectRef] = Field(default_factory=list)
    mutated: list[OwnedObjectRef] = Field(default_factory=list)
    unwrapped: list[OwnedObjectRef] = Field(default_factory=list)
    deleted: list[ObjectRef] = Field(default_factory=list)
    wrapped: list[ObjectRef] = Field(default_factory=list)


class EventId(LedgerModel):
    tx_digest: str
    event_seq: U64


class Event(LedgerModel):
    id: EventId
    package_id: str
    transaction_module: str
    sender: str
    type: str
    parsed_json: Any = None
    bcs: str | None = None
    timestamp_ms: U64 | None = None


class BalanceChange(LedgerModel):
    owner: Owner
    coin_type: str
    amount: str


class ObjectChange(LedgerModel):
    """One entry of ``objectChanges``; fields present depend on ``type``."""

    type: Literal["published", "transferred", "mutated", "deleted", "wrapped", "created"]
    sender: str | None = None
    object_id: str | None = Field(default=None, alias="objectId")
    package_id: str | None = None
    object_type: str | None = None
    version: U64 | None = None
    previous_version: U64 | None = None
    digest: str | None = None
    owner: Owner | None = None
    recipient: Owner | None = None
    modules: list[str] = Field(default_factory=list)

    @property
    def changed_id(self) -> str | None:
        return self.object_id or self.package_id


class TransactionBlock(LedgerModel):
    digest: str
    transaction: SenderSignedData | None = None
    raw_transaction: str | None = None
    effects: TransactionEffects | None = None
    events: list[Event] | None = None
    object_changes: list[ObjectChange] | None = None
    balance_changes: list[BalanceChange] | None = None
    timestamp_ms: U64 | None = None
    checkpoint: U64 | None = None


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


class DisplayFields(LedgerModel):
    data: dict[str, str] | None = None
    error: Any = None


class ParsedContent(LedgerModel):
    data_type: Literal["moveObject", "package"]
    type: str | None = None
    has_public_transfer: bool | None = None
    fields: Any = None
    disassembled: dict[str, str] | None = None


class ObjectData(LedgerModel):
    object_id: str
    version: U64
    digest: str
    type: str | None = None
    owner: Owner | None = None
    previous_transaction: str | None = None
    storage_rebate: U64 | None = None
    display: DisplayFields | None = None
    content: ParsedContent | None = None
    bcs: dict[str, Any] | None = None

    @property
    def is_package(self) -> bool:
        return self.type == "package" or (
            self.content is not None and self.content.data_type == "package"
        )


class ObjectResponse(LedgerModel):
    data: ObjectData | None = None
    error: dict[str, Any] | None = None


class PastObjectResponse(LedgerModel):
    status: Literal[
        "VersionFound",
        "ObjectNotExists",
        "ObjectDeleted",
        "VersionNotFound",
        "VersionTooHigh",
    ]
    details: Any = None


class DynamicFieldName(LedgerModel):
    type: str
    value: Any = None


class DynamicFieldInfo(LedgerModel):
    name: DynamicFieldName
    bcs_name: str | None = None
    type: Literal["DynamicField", "DynamicObject"]
    object_type: str
    object_id: str
    version: U64
    digest: str


# ---------------------------------------------------------------------------
# Accounts: balances, coins, stakes
# ---------------------------------------------------------------------------


class Balance(LedgerModel):
    coin_type: str
    coin_object_count: int
    total_balance: U64
    locked_balance: dict[str, Any] = Field(default_factory=dict)


class Coin(LedgerModel):
    coin_type: str
    coin_object_id: str
    version: U64
    digest: str
    balance: U64
    previous_transaction: str | None = None


class Stake(LedgerModel):
    staked_sui_id: str
    stake_request_epoch: U64
    stake_active_epoch: U64
    principal: U64
    status: Literal["Pending", "Active", "Unstaked"]
    estimated_reward: U64 | None = None


class DelegatedStake(LedgerModel):
    validator_address: str
    staking_pool: str
    stakes: list[Stake] = Field(default_factory=list)


class CoinMetadata(LedgerModel):
    decimals: int
    name: str
    symbol: str
    description: str
    icon_url: str | None = None
    id: str | None = None


class ProtocolConfig(LedgerModel):
    min_supported_protocol_version: U64
    max_supported_protocol_version: U64
    protocol_version: U64
    feature_flags: dict[str, bool] = Field(default_factory=dict)
    attributes: dict[str, dict[str, Any] | None] = Field(default_factory=dict)

    def attribute_value(self, key: str) -> str | None:
        """Attribute values arrive wrapped as ``{"u64": "10"}``; unwrap to a string."""
        wrapped = self.attributes.get(key)
        if not wrapped:
            return None
        return str(next(iter(wrapped.values())))


# ---------------------------------------------------------------------------
# Normalized Move
# ---------------------------------------------------------------------------


class MoveModuleId(LedgerModel):
    address: str
    name: str


class AbilitySet(LedgerModel):
    abilities: list[str] = Field(default_factory=list)


class StructTypeParameter(LedgerModel):
    constraints: AbilitySet
    is_phantom: bool = False


class NormalizedField(LedgerModel):
    name: str
    type_: Any = Field(alias="type")


class NormalizedStruct(LedgerModel):
    abilities: AbilitySet
    type_parameters: list[StructTypeParameter] = Field(default_factory=list)
    fields: list[NormalizedField] = Field(default_factory=list)


class NormalizedFunction(LedgerModel):
    visibility: Literal["Private", "Public", "Friend"]
    is_entry: bool
    type_parameters: list[AbilitySet] = Field(default_factory=list)
    parameters: list[Any] = Field(default_factory=list)
    return_: list[Any] = Field(default_factory=list, alias="return")


class NormalizedModule(LedgerModel):
    file_format_version: int
    address: str
    name: str
    friends: list[MoveModuleId] = Field(default_factory=list)
    structs: dict[str, NormalizedStruct] = Field(default_factory=dict)
    exposed_functions: dict[str, NormalizedFunction] = Field(default_factory=dict)


__all__ = [
    "AddressOwner",
    "Argument",
    "Balance",
    "BalanceChange",
    "ChangeEpochKind",
    "Checkpoint",
    "Coin",
    "CoinMetadata",
    "Command",
    "ConsensusCommitPrologueKind",
    "DelegatedStake",
    "DynamicFieldInfo",
    "EndOfEpochData",
    "EpochInfo",
    "Event",
    "EventId",
    "GasCoinArgument",
    "GasCostSummary",
    "GenesisKind",
    "ImmutableOwner",
    "InputArgument",
    "MakeMoveVecCommand",
    "MergeCoinsCommand",
    "MoveCallCommand",
    "NestedResultArgument",
    "NormalizedFunction",
    "NormalizedModule",
    "NormalizedStruct",
    "ObjectChange",
    "ObjectData",
    "ObjectOwner",
    "ObjectRef",
    "ObjectResponse",
    "OwnedObjectInput",
    "Owner",
    "Page",
    "PastObjectResponse",
    "ProgrammableTransactionKind",
    "ProtocolConfig",
    "PublishCommand",
    "PureInput",
    "ReceivingObjectInput",
    "ResultArgument",
    "SharedObjectInput",
    "SharedOwner",
    "SplitCoinsCommand",
    "Stake",
    "TransactionBlock",
    "TransactionEffects",
    "TransactionInput",
    "TransactionKind",
    "TransferObjectsCommand",
    "UpgradeCommand",
    "Validator",
]
