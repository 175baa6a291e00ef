"""Tests for request-scoped entity loaders."""

from __future__ import annotations

import asyncio

import pytest

from ledger_gateway.core.exceptions import NotFoundException
from ledger_gateway.features.graphql.dataloaders import create_dataloaders
from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.features.graphql.epochs import EpochIndex
from ledger_gateway.infra.ledger.exceptions import LedgerTransportError
from ledger_gateway.infra.ledger.models import Checkpoint, ObjectData, TransactionBlock
from tests.fixtures.ledger import FRAMEWORK, GAS_COIN_ID, FakeLedgerClient, build_chain


class StubLoader(EntityLoader[str]):
    """Upper-cases keys; keys starting with ``missing`` are absent."""

    name = "stub"

    def __init__(self, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self.batches: list[list[str]] = []

    async def fetch(self, keys: list[str]) -> dict[str, str | Exception]:
        self.batches.append(keys)
        return {key: key.upper() for key in keys if not key.startswith("missing")}


@pytest.fixture
def loaders():
    client = build_chain()
    return client, create_dataloaders(client, EpochIndex(client, page_size=2))


@pytest.mark.unit
class TestEntityLoader:
    """Batching and per-key outcome rules of the base loader."""

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_fetch(self) -> None:
        loader = StubLoader()

        results = await asyncio.gather(loader.load("a"), loader.load("b"), loader.load("c"))

        assert results == ["A", "B", "C"]
        assert loader.batches == [["a", "b", "c"]]

    @pytest.mark.asyncio
    async def test_duplicate_keys_fetched_once(self) -> None:
        loader = StubLoader()

        results = await loader.load_many(["a", "b", "a", "a"])

        assert results == ["A", "B", "A", "A"]
        assert loader.batches == [["a", "b"]]

    @pytest.mark.asyncio
    async def test_missing_key_does_not_fail_siblings(self) -> None:
        loader = StubLoader()

        results = await loader.load_many(["a", "missing-1", "b"])

        assert results[0] == "A"
        assert isinstance(results[1], NotFoundException)
        assert results[1].type == "stub-not-found"
        assert results[1].extra == {"key": "missing-1"}
        assert results[2] == "B"

    @pytest.mark.asyncio
    async def test_load_raises_not_found_for_missing_key(self) -> None:
        loader = StubLoader()

        with pytest.raises(NotFoundException):
            await loader.load("missing-2")

    @pytest.mark.asyncio
    async def test_empty_key_is_not_found_without_fetch(self) -> None:
        loader = StubLoader()

        [result] = await loader.load_many([""])

        assert isinstance(result, NotFoundException)
        assert "empty key" in result.detail
        assert loader.batches == []

    @pytest.mark.asyncio
    async def test_max_batch_size_splits_fetches(self) -> None:
        loader = StubLoader(max_batch_size=2)

        results = await loader.load_many(["a", "b", "c", "d", "e"])

        assert results == ["A", "B", "C", "D", "E"]
        assert [len(batch) for batch in loader.batches] == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_results_cached_within_loader(self) -> None:
        loader = StubLoader()
        await loader.load("a")

        await loader.load("a")

        assert loader.batches == [["a"]]

    @pytest.mark.asyncio
    async def test_primed_key_skips_fetch(self) -> None:
        loader = StubLoader()
        loader.prime("p", "PRIMED")

        assert await loader.load("p") == "PRIMED"
        assert loader.batches == []

    @pytest.mark.asyncio
    async def test_fetch_failure_rejects_whole_batch(self) -> None:
        class FailingLoader(StubLoader):
            async def fetch(self, keys: list[str]) -> dict[str, str | Exception]:
                raise LedgerTransportError("stub", "connection reset")

        loader = FailingLoader()

        results = await asyncio.gather(loader.load("a"), loader.load("b"), return_exceptions=True)

        assert all(isinstance(result, LedgerTransportError) for result in results)

    def test_subclass_without_fetch_cannot_be_built(self) -> None:
        class IncompleteLoader(EntityLoader[str]):
            name = "incomplete"

        with pytest.raises(TypeError, match="fetch"):
            IncompleteLoader()

    @pytest.mark.asyncio
    async def test_load_many_raises_upstream_failure(self) -> None:
        class FailingLoader(StubLoader):
            async def fetch(self, keys: list[str]) -> dict[str, str | Exception]:
                raise LedgerTransportError("stub", "connection reset")

        with pytest.raises(LedgerTransportError):
            await FailingLoader().load_many(["a", "b"])


@pytest.mark.unit
class TestCheckpointLoader:
    """Checkpoints by sequence number or digest, one batch call."""

    @pytest.mark.asyncio
    async def test_mixed_keys_in_one_batch(self, loaders) -> None:
        client, dl = loaders

        results = await dl.checkpoints.load_many(["3", "CheckpointDigest5", "404"])

        assert isinstance(results[0], Checkpoint)
        assert results[0].sequence_number == "3"
        assert isinstance(results[1], Checkpoint)
        assert results[1].sequence_number == "5"
        assert isinstance(results[2], NotFoundException)
        assert "not found" in results[2].detail
        assert len(client.calls_to("get_checkpoints_by_ids")) == 1

    @pytest.mark.asyncio
    async def test_upstream_failure_fails_every_key(self, loaders) -> None:
        client, dl = loaders
        client.fail("get_checkpoints_by_ids", LedgerTransportError("sui_getCheckpoint", "HTTP 503"))

        results = await asyncio.gather(
            dl.checkpoints.load("1"), dl.checkpoints.load("2"), return_exceptions=True
        )

        assert all(isinstance(result, LedgerTransportError) for result in results)


@pytest.mark.unit
class TestTransactionBlockLoader:
    @pytest.mark.asyncio
    async def test_matches_by_digest_not_position(self, loaders) -> None:
        """The fake returns blocks reversed; results still line up with keys."""
        client, dl = loaders

        results = await dl.transaction_blocks.load_many(["TxDigestA", "TxDigestNope", "TxDigestB"])

        assert isinstance(results[0], TransactionBlock)
        assert results[0].digest == "TxDigestA"
        assert isinstance(results[1], NotFoundException)
        assert results[1].type == "transaction-block-not-found"
        assert results[2].digest == "TxDigestB"
        assert len(client.calls_to("multi_get_transaction_blocks")) == 1


@pytest.mark.unit
class TestObjectLoader:
    @pytest.mark.asyncio
    async def test_short_and_long_ids_match(self, loaders) -> None:
        _, dl = loaders

        short, full = await dl.objects.load_many(["0x2", FRAMEWORK])

        assert isinstance(short, ObjectData)
        assert short.object_id == FRAMEWORK
        assert full.object_id == FRAMEWORK

    @pytest.mark.asyncio
    async def test_missing_object(self, loaders) -> None:
        _, dl = loaders

        found, missing = await dl.objects.load_many([GAS_COIN_ID, "0xdead"])

        assert isinstance(found, ObjectData)
        assert isinstance(missing, NotFoundException)
        assert missing.type == "object-not-found"


@pytest.mark.unit
class TestEpochLoader:
    @pytest.mark.asyncio
    async def test_reads_through_index(self, loaders) -> None:
        client, dl = loaders

        epoch_one, bogus = await dl.epochs.load_many(["1", "x"])

        assert epoch_one.epoch == "1"
        assert isinstance(bogus, NotFoundException)
        assert len(client.calls_to("get_epochs")) == 1


@pytest.mark.unit
class TestMoveLoaders:
    @pytest.mark.asyncio
    async def test_module_batch(self, loaders) -> None:
        client, dl = loaders

        coin, balance, missing = await dl.move_modules.load_many(
            ["0x2,coin", "0x2,balance", "0x2,nope"]
        )

        assert coin.name == "coin"
        assert balance.name == "balance"
        assert isinstance(missing, NotFoundException)
        assert client.calls_to("get_normalized_move_modules") == [
            ([("0x2", "coin"), ("0x2", "balance"), ("0x2", "nope")],)
        ]

    @pytest.mark.asyncio
    async def test_malformed_module_key_skips_upstream(self, loaders) -> None:
        client, dl = loaders

        [result] = await dl.move_modules.load_many(["just-a-package"])

        assert isinstance(result, NotFoundException)
        assert client.calls_to("get_normalized_move_modules") == []

    @pytest.mark.asyncio
    async def test_function_record(self, loaders) -> None:
        _, dl = loaders

        record = await dl.move_functions.load("0x2,coin,split")

        assert record.package == "0x2"
        assert record.module == "coin"
        assert record.name == "split"
        assert record.key == "0x2,coin,split"
        assert record.function.visibility == "Public"


@pytest.mark.unit
def test_loaders_are_per_request() -> None:
    client = FakeLedgerClient()
    index = EpochIndex(client)

    first = create_dataloaders(client, index)  # type: ignore[arg-type]
    second = create_dataloaders(client, index)  # type: ignore[arg-type]

    assert first.checkpoints is not second.checkpoints
    assert first.epochs is not second.epochs
