"""GraphQL type definitions.

This package contains Strawberry types for:
- Custom scalars (BigInt, Base64, SuiAddress)
- Base types (Node interface, PageInfo, connection arguments)
- Ledger types: checkpoints, epochs, transactions, events, objects,
  owners, Move packages and protocol configuration
"""

from __future__ import annotations

from ledger_gateway.features.graphql.types.base import Node, PageInfoType
from ledger_gateway.features.graphql.types.checkpoints import CheckpointConnection, CheckpointType
from ledger_gateway.features.graphql.types.epochs import EpochType
from ledger_gateway.features.graphql.types.events import EventConnection, EventType
from ledger_gateway.features.graphql.types.move import (
    MoveFunctionType,
    MoveModuleType,
    MovePackageType,
)
from ledger_gateway.features.graphql.types.objects import ObjectConnection, ObjectType
from ledger_gateway.features.graphql.types.owners import AddressType, OwnerType
from ledger_gateway.features.graphql.types.scalars import Base64, BigInt, SuiAddress
from ledger_gateway.features.graphql.types.transactions import (
    TransactionBlockConnection,
    TransactionBlockType,
)

__all__ = [
    # Scalars
    "Base64",
    "BigInt",
    "SuiAddress",
    # Base types
    "Node",
    "PageInfoType",
    # Ledger types
    "AddressType",
    "CheckpointConnection",
    "CheckpointType",
    "EpochType",
    "EventConnection",
    "EventType",
    "MoveFunctionType",
    "MoveModuleType",
    "MovePackageType",
    "ObjectConnection",
    "ObjectType",
    "OwnerType",
    "TransactionBlockConnection",
    "TransactionBlockType",
]
