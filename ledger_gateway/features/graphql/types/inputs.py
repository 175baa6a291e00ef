"""GraphQL input types and their translation to upstream filters.

The upstream transaction and event queries accept exactly one filter
criterion, so the translators below pick the first criterion present in a
fixed order and ignore the rest:

- transactions: checkpoint, input object, changed object, sent/sign
  address, received address, paid address, Move function, kind
- events: transaction digest, sender, emitting module, event type,
  time range, otherwise all events

Owned-object filters can be combined upstream and are joined with
``MatchAll``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

import strawberry

from ledger_gateway.core.exceptions import BadRequestException
from ledger_gateway.features.graphql.types.scalars import BigInt, SuiAddress

SYSTEM_TRANSACTION_KINDS = [
    "Genesis",
    "ChangeEpoch",
    "ConsensusCommitPrologue",
    "AuthenticatorStateUpdate",
    "RandomnessStateUpdate",
    "EndOfEpochTransaction",
]


@strawberry.enum(name="TransactionBlockKindInput", description="Broad class of transaction")
class TransactionBlockKindInput(Enum):
    SYSTEM_TX = "SYSTEM_TX"
    PROGRAMMABLE_TX = "PROGRAMMABLE_TX"


@strawberry.enum(
    name="AddressTransactionBlockRelationship",
    description="How an address relates to a transaction",
)
class AddressTransactionBlockRelationship(Enum):
    SIGN = "SIGN"
    SENT = "SENT"
    RECV = "RECV"
    PAID = "PAID"


@strawberry.input(name="CheckpointId", description="Identify a checkpoint by digest or sequence number")
class CheckpointIdInput:
    digest: str | None = None
    sequence_number: BigInt | None = None

    def key(self) -> str:
        """Return the single key this input names.

        Raises:
            BadRequestException: Both or neither of the fields are set.
        """
        if (self.digest is None) == (self.sequence_number is None):
            raise BadRequestException(
                detail="CheckpointId needs exactly one of 'digest' or 'sequenceNumber'",
            )
        return self.digest if self.digest is not None else str(self.sequence_number)


@strawberry.input(name="TransactionBlockFilter")
class TransactionBlockFilterInput:
    package: SuiAddress | None = None
    module: str | None = None
    function: str | None = None
    kind: TransactionBlockKindInput | None = None
    checkpoint: BigInt | None = None
    sign_address: SuiAddress | None = None
    sent_address: SuiAddress | None = None
    recv_address: SuiAddress | None = None
    paid_address: SuiAddress | None = None
    input_object: SuiAddress | None = None
    changed_object: SuiAddress | None = None


@strawberry.input(name="EventFilter")
class EventFilterInput:
    sender: SuiAddress | None = None
    transaction_digest: str | None = None
    emitting_package: SuiAddress | None = None
    emitting_module: str | None = None
    event_package: SuiAddress | None = None
    event_module: str | None = None
    event_type: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


@strawberry.input(name="ObjectFilter")
class ObjectFilterInput:
    package: SuiAddress | None = None
    module: str | None = None
    type: str | None = None
    owner: SuiAddress | None = None
    object_id: SuiAddress | None = None
    version: BigInt | None = None


def transaction_filter_to_upstream(
    filter: TransactionBlockFilterInput | None,
) -> dict[str, Any] | None:
    """Translate a transaction filter; None means "all transactions"."""
    if filter is None:
        return None
    if filter.checkpoint is not None:
        return {"Checkpoint": str(filter.checkpoint)}
    if filter.input_object:
        return {"InputObject": filter.input_object}
    if filter.changed_object:
        return {"ChangedObject": filter.changed_object}
    if filter.sent_address or filter.sign_address:
        return {"FromAddress": filter.sent_address or filter.sign_address}
    if filter.recv_address:
        return {"ToAddress": filter.recv_address}
    if filter.paid_address:
        return {"FromAddress": filter.paid_address}
    if filter.package:
        move_function: dict[str, Any] = {"package": filter.package}
        if filter.module:
            move_function["module"] = filter.module
            if filter.function:
                move_function["function"] = filter.function
        return {"MoveFunction": move_function}
    if filter.module or filter.function:
        raise BadRequestException(detail="'module' and 'function' filters require 'package'")
    if filter.kind is TransactionBlockKindInput.PROGRAMMABLE_TX:
        return {"TransactionKind": "ProgrammableTransaction"}
    if filter.kind is TransactionBlockKindInput.SYSTEM_TX:
        return {"TransactionKindIn": SYSTEM_TRANSACTION_KINDS}
    return None


def address_relation_filter(
    address: str,
    relation: AddressTransactionBlockRelationship | None,
) -> dict[str, Any]:
    """Filter for transactions related to ``address``; no relation means either direction."""
    if relation is None:
        return {"FromOrToAddress": {"addr": address}}
    if relation is AddressTransactionBlockRelationship.RECV:
        return {"ToAddress": address}
    # SIGN, SENT and PAID all resolve to the sender for single-signer transactions
    return {"FromAddress": address}


def _millis(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return str(int(value.timestamp() * 1000))


def event_filter_to_upstream(filter: EventFilterInput | None) -> dict[str, Any]:
    if filter is None:
        return {"All": []}
    if filter.transaction_digest:
        return {"Transaction": filter.transaction_digest}
    if filter.sender:
        return {"Sender": filter.sender}
    if filter.emitting_package:
        if filter.emitting_module:
            return {
                "MoveModule": {"package": filter.emitting_package, "module": filter.emitting_module}
            }
        return {"Package": filter.emitting_package}
    if filter.event_type:
        if filter.event_package and filter.event_module and "::" not in filter.event_type:
            return {
                "MoveEventType": f"{filter.event_package}::{filter.event_module}::{filter.event_type}"
            }
        return {"MoveEventType": filter.event_type}
    if filter.event_package and filter.event_module:
        return {"MoveEventModule": {"package": filter.event_package, "module": filter.event_module}}
    if filter.start_time or filter.end_time:
        start = _millis(filter.start_time) if filter.start_time else "0"
        end = _millis(filter.end_time or datetime.now(tz=UTC))
        return {"TimeRange": {"startTime": start, "endTime": end}}
    return {"All": []}


def object_filter_to_upstream(filter: ObjectFilterInput | None) -> dict[str, Any] | None:
    if filter is None:
        return None

    criteria: list[dict[str, Any]] = []
    if filter.type:
        criteria.append({"StructType": filter.type})
    if filter.package and filter.module:
        criteria.append({"MoveModule": {"package": filter.package, "module": filter.module}})
    elif filter.package:
        criteria.append({"Package": filter.package})
    elif filter.module:
        raise BadRequestException(detail="'module' object filter requires 'package'")
    if filter.owner:
        criteria.append({"AddressOwner": filter.owner})
    if filter.object_id:
        criteria.append({"ObjectId": filter.object_id})
    if filter.version is not None:
        criteria.append({"Version": str(filter.version)})

    if not criteria:
        return None
    if len(criteria) == 1:
        return criteria[0]
    return {"MatchAll": criteria}


__all__ = [
    "AddressTransactionBlockRelationship",
    "CheckpointIdInput",
    "EventFilterInput",
    "ObjectFilterInput",
    "TransactionBlockFilterInput",
    "TransactionBlockKindInput",
    "address_relation_filter",
    "event_filter_to_upstream",
    "object_filter_to_upstream",
    "transaction_filter_to_upstream",
]
