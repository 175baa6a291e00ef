"""Loader container and factory.

Loaders batch and cache upstream lookups within a single GraphQL request,
so resolving the same reference from many places costs one upstream call.

Each request gets its own ``DataLoaders`` instance; nothing cached here
outlives the request. The epoch loader reads through the process-wide
``EpochIndex``, which does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.features.graphql.dataloaders.checkpoints import CheckpointLoader
from ledger_gateway.features.graphql.dataloaders.epochs import EpochLoader
from ledger_gateway.features.graphql.dataloaders.move import (
    MoveFunctionLoader,
    MoveFunctionRecord,
    MoveModuleLoader,
)
from ledger_gateway.features.graphql.dataloaders.objects import ObjectLoader
from ledger_gateway.features.graphql.dataloaders.transactions import TransactionBlockLoader

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.epochs import EpochIndex
    from ledger_gateway.infra.ledger.client import LedgerClient


@dataclass
class DataLoaders:
    """Container for all loader instances.

    Usage in resolver:
        ctx = info.context
        checkpoint = await ctx.loaders.checkpoints.load(sequence_number)
    """

    checkpoints: CheckpointLoader
    transaction_blocks: TransactionBlockLoader
    objects: ObjectLoader
    epochs: EpochLoader
    move_modules: MoveModuleLoader
    move_functions: MoveFunctionLoader


def create_dataloaders(
    client: LedgerClient,
    epochs: EpochIndex,
    max_batch_size: int | None = None,
) -> DataLoaders:
    """Factory for request-scoped loaders.

    Args:
        client: Shared upstream client.
        epochs: Process-wide epoch index.
        max_batch_size: Upper bound on keys per upstream batch.
    """
    return DataLoaders(
        checkpoints=CheckpointLoader(client, max_batch_size),
        transaction_blocks=TransactionBlockLoader(client, max_batch_size),
        objects=ObjectLoader(client, max_batch_size),
        epochs=EpochLoader(epochs, max_batch_size),
        move_modules=MoveModuleLoader(client, max_batch_size),
        move_functions=MoveFunctionLoader(client, max_batch_size),
    )


__all__ = [
    "CheckpointLoader",
    "DataLoaders",
    "EntityLoader",
    "EpochLoader",
    "MoveFunctionLoader",
    "MoveFunctionRecord",
    "MoveModuleLoader",
    "ObjectLoader",
    "TransactionBlockLoader",
    "create_dataloaders",
]
