"""Loader for transaction blocks keyed by digest."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.infra.ledger.models import TransactionBlock

if TYPE_CHECKING:
    from ledger_gateway.infra.ledger.client import LedgerClient


class TransactionBlockLoader(EntityLoader[TransactionBlock]):
    """Batch-load transaction blocks with one ``multiGetTransactionBlocks`` call.

    The node may omit digests or reorder them, so results are matched back
    by their ``digest`` field.
    """

    name = "transaction_block"

    def __init__(self, client: LedgerClient, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self._client = client

    async def fetch(self, keys: list[str]) -> dict[str, TransactionBlock | Exception]:
        blocks = await self._client.multi_get_transaction_blocks(keys)
        return {block.digest: block for block in blocks}
