"""Loader for checkpoints keyed by digest or sequence number."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.infra.ledger.exceptions import LedgerRPCError
from ledger_gateway.infra.ledger.models import Checkpoint

if TYPE_CHECKING:
    from ledger_gateway.infra.ledger.client import LedgerClient


class CheckpointLoader(EntityLoader[Checkpoint]):
    """Batch-load checkpoints with one JSON-RPC batch request.

    A key is either a digest or a decimal sequence number. Responses are
    aligned with the request by id, and each result is accepted only if its
    digest or sequence number equals the key that asked for it.
    """

    name = "checkpoint"

    def __init__(self, client: LedgerClient, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self._client = client

    async def fetch(self, keys: list[str]) -> dict[str, Checkpoint | Exception]:
        results = await self._client.get_checkpoints_by_ids(keys)
        found: dict[str, Checkpoint | Exception] = {}
        for key, result in zip(keys, results, strict=True):
            if isinstance(result, LedgerRPCError):
                found[key] = self.not_found(key, result.rpc_message)
            elif key in (result.digest, result.sequence_number):
                found[key] = result
        return found
