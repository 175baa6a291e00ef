"""Loader for epochs, served from the process-wide ``EpochIndex``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.infra.ledger.models import EpochInfo

if TYPE_CHECKING:
    from ledger_gateway.features.graphql.epochs import EpochIndex


class EpochLoader(EntityLoader[EpochInfo]):
    name = "epoch"

    def __init__(self, index: EpochIndex, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self._index = index

    async def fetch(self, keys: list[str]) -> dict[str, EpochInfo | Exception]:
        return dict(zip(keys, await self._index.load(keys), strict=True))
