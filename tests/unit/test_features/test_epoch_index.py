"""Tests for the process-wide epoch index."""

from __future__ import annotations

import asyncio

import pytest

from ledger_gateway.core.exceptions import NotFoundException
from ledger_gateway.features.graphql.epochs import EpochIndex
from ledger_gateway.infra.ledger.exceptions import LedgerTransportError
from ledger_gateway.infra.ledger.models import EpochInfo
from tests.fixtures.ledger import FakeLedgerClient, make_epoch


def chain_with_epochs(count: int) -> FakeLedgerClient:
    client = FakeLedgerClient()
    for number in range(count):
        client.add_epoch(make_epoch(number, first_checkpoint=number * 10, last_checkpoint=number * 10 + 9))
    return client


@pytest.mark.unit
class TestEpochIndex:
    """Tests for ``EpochIndex.load``."""

    @pytest.mark.asyncio
    async def test_scan_stops_once_target_is_seen(self) -> None:
        """Only the pages up to the requested epoch are fetched."""
        client = chain_with_epochs(10)
        index = EpochIndex(client, page_size=2)

        [epoch] = await index.load(["3"])

        assert isinstance(epoch, EpochInfo)
        assert epoch.epoch == "3"
        assert len(client.calls_to("get_epochs")) == 2
        assert index.size == 4
        assert index.latest_epoch == 3

    @pytest.mark.asyncio
    async def test_earlier_epochs_served_from_memory(self) -> None:
        client = chain_with_epochs(10)
        index = EpochIndex(client, page_size=2)
        await index.load(["5"])
        calls_before = len(client.calls)

        results = await index.load(["0", "2", "5"])

        assert [result.epoch for result in results] == ["0", "2", "5"]
        assert len(client.calls) == calls_before

    @pytest.mark.asyncio
    async def test_scan_resumes_from_cursor(self) -> None:
        """A later request continues where the previous scan stopped."""
        client = chain_with_epochs(10)
        index = EpochIndex(client, page_size=2)
        await index.load(["1"])

        await index.load(["4"])

        cursors = [args[0] for args in client.calls_to("get_epochs")]
        assert cursors == [None, "1", "3"]
        assert index.cursor == "5"

    @pytest.mark.asyncio
    async def test_non_numeric_key_is_not_found_without_scan(self) -> None:
        client = chain_with_epochs(3)
        index = EpochIndex(client, page_size=2)

        [result] = await index.load(["abc"])

        assert isinstance(result, NotFoundException)
        assert result.type == "epoch-not-found"
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_future_epoch_is_not_found_after_exhausting_listing(self) -> None:
        client = chain_with_epochs(3)
        index = EpochIndex(client, page_size=2)

        results = await index.load(["1", "99"])

        assert isinstance(results[0], EpochInfo)
        assert isinstance(results[1], NotFoundException)
        assert index.size == 3
        calls = len(client.calls_to("get_epochs"))
        await index.load(["0"])
        assert len(client.calls_to("get_epochs")) == calls

    @pytest.mark.asyncio
    async def test_concurrent_loads_fetch_each_page_once(self) -> None:
        client = chain_with_epochs(6)
        index = EpochIndex(client, page_size=2)

        await asyncio.gather(index.load(["5"]), index.load(["4"]), index.load(["5"]))

        cursors = [args[0] for args in client.calls_to("get_epochs")]
        assert cursors == [None, "1", "3"]

    @pytest.mark.asyncio
    async def test_failed_page_keeps_earlier_pages(self) -> None:
        client = chain_with_epochs(6)
        index = EpochIndex(client, page_size=2)
        await index.load(["1"])
        client.fail("get_epochs", LedgerTransportError("suix_getEpochs", "connection reset"))

        with pytest.raises(LedgerTransportError):
            await index.load(["5"])

        assert index.size == 2
        assert index.get(1) is not None

    @pytest.mark.asyncio
    async def test_empty_keys(self) -> None:
        client = chain_with_epochs(2)
        index = EpochIndex(client)

        assert await index.load([]) == []
        assert client.calls == []
