"""Loader for objects keyed by object id."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.infra.ledger.addresses import normalize_address
from ledger_gateway.infra.ledger.models import ObjectData

if TYPE_CHECKING:
    from ledger_gateway.infra.ledger.client import LedgerClient


class ObjectLoader(EntityLoader[ObjectData]):
    """Batch-load objects with one ``multiGetObjects`` call.

    Matching is done on the normalized object id, so ``0x5`` finds the
    object the node reports as ``0x000...005``.
    """

    name = "object"

    def __init__(self, client: LedgerClient, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self._client = client

    async def fetch(self, keys: list[str]) -> dict[str, ObjectData | Exception]:
        objects = await self._client.multi_get_objects(keys)
        by_id = {normalize_address(obj.object_id): obj for obj in objects}
        found: dict[str, ObjectData | Exception] = {}
        for key in keys:
            obj = by_id.get(normalize_address(key))
            if obj is not None:
                found[key] = obj
        return found
