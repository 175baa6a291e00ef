"""Process-wide index of epoch records.

The upstream has no "get epoch by number" call, only a forward-paged
listing. ``EpochIndex`` walks that listing lazily: a request for epoch N
fetches pages from wherever the previous scan stopped until N has been seen
(or the listing runs out), folding every record it passes into an in-memory
map. Earlier epochs are then answered from memory.

Records are never evicted, and an epoch that was still in progress when it
was folded in keeps its in-progress fields (no end timestamp) for the life
of the process.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, Protocol

from ledger_gateway.core.exceptions import NotFoundException
from ledger_gateway.infra.metrics.tracking import track_epoch_page

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ledger_gateway.infra.ledger.models import EpochInfo, Page

logger = logging.getLogger(__name__)

_EPOCH_KEY = re.compile(r"[0-9]+")


class EpochSource(Protocol):
    async def get_epochs(
        self,
        cursor: str | None = None,
        limit: int | None = None,
        descending_order: bool = False,
    ) -> Page[EpochInfo]: ...


class EpochIndex:
    """Lazily grown ``epoch number -> EpochInfo`` map.

    Scans are serialized with an ``asyncio.Lock`` so concurrent requests
    never fetch the same page twice; a request that waited on the lock finds
    its epochs already folded in and returns without another upstream call.

    Example:
        ```python
        index = EpochIndex(client, page_size=50)
        [epoch_3, missing] = await index.load(["3", "abc"])
        ```
    """

    def __init__(self, client: EpochSource, page_size: int | None = None) -> None:
        self._client = client
        self._page_size = page_size
        self._epochs: dict[int, EpochInfo] = {}
        self._latest_epoch = -1
        self._cursor: str | None = None
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return len(self._epochs)

    @property
    def latest_epoch(self) -> int:
        """Highest epoch number folded in so far, or -1 before the first scan."""
        return self._latest_epoch

    @property
    def cursor(self) -> str | None:
        """Upstream cursor the next scan resumes from."""
        return self._cursor

    def get(self, number: int) -> EpochInfo | None:
        return self._epochs.get(number)

    async def load(self, keys: Sequence[str]) -> list[EpochInfo | NotFoundException]:
        """Resolve epoch-number keys, scanning forward only as far as needed.

        Returns one entry per key, in order: the record, or a
        ``NotFoundException`` for non-numeric keys and epochs the upstream
        does not (yet) have.

        Raises:
            UpstreamServiceException: A page fetch failed. Pages folded in
                before the failure are kept.
        """
        numbers = [int(key) if _EPOCH_KEY.fullmatch(key) else None for key in keys]
        wanted = [number for number in numbers if number is not None]

        if wanted:
            target = max(wanted)
            async with self._lock:
                await self._scan_until(target)

        results: list[EpochInfo | NotFoundException] = []
        for key, number in zip(keys, numbers):
            record = self._epochs.get(number) if number is not None else None
            if record is None:
                results.append(
                    NotFoundException(
                        detail=f"Epoch '{key}' not found",
                        type="epoch-not-found",
                        extra={"key": key},
                    )
                )
            else:
                results.append(record)
        return results

    async def _scan_until(self, target: int) -> None:
        pages = 0
        while target > self._latest_epoch:
            page = await self._client.get_epochs(cursor=self._cursor, limit=self._page_size)
            pages += 1

            if page.next_cursor is not None:
                self._cursor = str(page.next_cursor)
            for epoch in page.data:
                number = epoch.epoch_number
                self._epochs[number] = epoch
                self._latest_epoch = max(self._latest_epoch, number)
            track_epoch_page(len(self._epochs))

            if not page.has_next_page:
                break

        if pages:
            logger.info(
                "Epoch index advanced",
                extra={
                    "target_epoch": target,
                    "latest_epoch": self._latest_epoch,
                    "pages_fetched": pages,
                    "index_size": len(self._epochs),
                },
            )


__all__ = ["EpochIndex", "EpochSource"]
