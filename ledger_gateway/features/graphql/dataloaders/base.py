"""Base class for request-scoped entity loaders.

Every ``load(key)`` issued during one event-loop tick is coalesced by the
strawberry ``DataLoader`` into a single call of ``fetch``, which in turn
makes one upstream call (or a bounded number when ``max_batch_size`` splits
the batch). Repeated keys share one in-flight future.

Per-key outcomes:

- found: the entity
- missing: a ``NotFoundException`` instance handed back in place of the
  entity, so a missing key never fails its siblings
- upstream failure: the exception raised by ``fetch`` rejects every key in
  that batch
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import logging
from typing import TYPE_CHECKING, Generic, TypeVar

from strawberry.dataloader import DataLoader

from ledger_gateway.core.exceptions import NotFoundException
from ledger_gateway.infra.metrics.tracking import track_loader_batch

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityLoader(ABC, Generic[T]):
    """Batched, deduplicating loader for one entity type keyed by strings.

    Subclasses set ``name`` (used in metrics and error types) and implement
    ``fetch``.

    Usage:
        checkpoint = await loaders.checkpoints.load("1000")
        objects = await loaders.objects.load_many(["0x5", "0x6"])
    """

    name: str = "entity"

    def __init__(self, max_batch_size: int | None = None) -> None:
        """Initialize the loader.

        Args:
            max_batch_size: Upper bound on keys per ``fetch`` call; larger
                batches are split. None means unbounded.
        """
        self._loader: DataLoader[str, T] = DataLoader(
            load_fn=self._batch_load,
            max_batch_size=max_batch_size,
        )

    @abstractmethod
    async def fetch(self, keys: list[str]) -> dict[str, T | Exception]:
        """Fetch unique, non-empty ``keys`` with one upstream call.

        Return a mapping for the keys that were resolved; keys absent from
        the mapping are reported as not found. Raise to fail the whole batch.
        """

    def not_found(self, key: str, reason: str | None = None) -> NotFoundException:
        detail = f"{self.name.replace('_', ' ').capitalize()} '{key}' not found"
        if reason:
            detail = f"{detail}: {reason}"
        return NotFoundException(
            detail=detail,
            type=f"{self.name.replace('_', '-')}-not-found",
            extra={"key": key},
        )

    async def _batch_load(self, keys: list[str]) -> list[T | Exception]:
        unique = list(dict.fromkeys(key for key in keys if key))
        found: dict[str, T | Exception] = await self.fetch(unique) if unique else {}

        results: list[T | Exception] = []
        missing = 0
        for key in keys:
            value = found.get(key) if key else None
            if value is None:
                value = self.not_found(key) if key else self.not_found(key, "empty key")
            if isinstance(value, NotFoundException):
                missing += 1
            results.append(value)

        track_loader_batch(self.name, len(unique), missing)
        logger.debug(
            "Loader batch resolved",
            extra={"loader": self.name, "keys": len(keys), "not_found": missing},
        )
        return results

    async def load(self, key: str) -> T:
        """Load one entity.

        Raises:
            NotFoundException: No entity has this key.
            UpstreamServiceException: The batch this key joined failed.
        """
        return await self._loader.load(key)

    async def load_many(self, keys: Sequence[str]) -> list[T | NotFoundException]:
        """Load several entities, in order, with missing keys as ``NotFoundException``.

        Raises:
            UpstreamServiceException: A batch serving these keys failed.
        """
        results = await asyncio.gather(
            *(self._loader.load(key) for key in keys),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, NotFoundException):
                raise result
        return list(results)

    def prime(self, key: str, value: T) -> None:
        """Seed the cache with an entity fetched by other means."""
        self._loader.prime(key, value)


__all__ = ["EntityLoader"]
