"""Tests for the JSON-RPC client against an in-process mock transport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from ledger_gateway.infra.ledger import LedgerClient, LedgerRPCError, LedgerTransportError
from ledger_gateway.infra.ledger.models import Checkpoint
from tests.fixtures.ledger import make_checkpoint

ENDPOINT = "http://ledger.test:9000"


def checkpoint_payload(sequence_number: int) -> dict[str, Any]:
    return make_checkpoint(sequence_number).model_dump(by_alias=True)


class RecordingHandler:
    """Mock transport handler; ``respond`` builds the body from the request JSON."""

    def __init__(self, respond) -> None:
        self.respond = respond
        self.requests: list[Any] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        return self.respond(payload)


def make_client(handler, max_retries: int = 1) -> LedgerClient:
    return LedgerClient(
        ENDPOINT,
        max_retries=max_retries,
        retry_initial_delay=0.0,
        retry_max_delay=0.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestCall:
    """Tests for single requests."""

    @pytest.mark.asyncio
    async def test_returns_result(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": "4c78adac"})
        )
        async with make_client(handler) as client:
            assert await client.get_chain_identifier() == "4c78adac"

        [request] = handler.requests
        assert request["jsonrpc"] == "2.0"
        assert request["method"] == "sui_getChainIdentifier"
        assert request["params"] == []

    @pytest.mark.asyncio
    async def test_request_ids_increase(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": "1"})
        )
        async with make_client(handler) as client:
            await client.get_latest_checkpoint_sequence_number()
            await client.get_latest_checkpoint_sequence_number()

        assert [request["id"] for request in handler.requests] == [1, 2]

    @pytest.mark.asyncio
    async def test_decodes_into_models(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(
                200, json={"jsonrpc": "2.0", "id": req["id"], "result": checkpoint_payload(7)}
            )
        )
        async with make_client(handler) as client:
            checkpoint = await client.get_checkpoint("7")

        assert isinstance(checkpoint, Checkpoint)
        assert checkpoint.sequence_number == "7"
        assert handler.requests[0]["params"] == ["7"]

    @pytest.mark.asyncio
    async def test_error_object_raises_rpc_error(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(
                200,
                json={
                    "jsonrpc": "2.0",
                    "id": req["id"],
                    "error": {"code": -32602, "message": "Invalid params"},
                },
            )
        )
        async with make_client(handler) as client:
            with pytest.raises(LedgerRPCError) as exc_info:
                await client.get_checkpoint("x")

        assert exc_info.value.rpc_code == -32602
        assert exc_info.value.rpc_message == "Invalid params"
        assert exc_info.value.code == "UPSTREAM_ERROR"

    @pytest.mark.asyncio
    async def test_http_error_raises_transport_error(self) -> None:
        handler = RecordingHandler(lambda req: httpx.Response(503, text="unavailable"))
        async with make_client(handler) as client:
            with pytest.raises(LedgerTransportError) as exc_info:
                await client.get_chain_identifier()

        assert "HTTP 503" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_invalid_json_raises_transport_error(self) -> None:
        handler = RecordingHandler(lambda req: httpx.Response(200, text="<html>oops</html>"))
        async with make_client(handler) as client:
            with pytest.raises(LedgerTransportError):
                await client.get_chain_identifier()

    @pytest.mark.asyncio
    async def test_missing_result_raises_transport_error(self) -> None:
        handler = RecordingHandler(lambda req: httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"]}))
        async with make_client(handler) as client:
            with pytest.raises(LedgerTransportError):
                await client.get_chain_identifier()

    @pytest.mark.asyncio
    async def test_malformed_payload_raises_transport_error(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(
                200, json={"jsonrpc": "2.0", "id": req["id"], "result": {"sequenceNumber": "1"}}
            )
        )
        async with make_client(handler) as client:
            with pytest.raises(LedgerTransportError) as exc_info:
                await client.get_checkpoint("1")

        assert "malformed response" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_transport_failures_are_retried(self) -> None:
        attempts = 0

        def respond(req: dict[str, Any]) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                raise httpx.ConnectError("connection refused")
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": "4c78adac"})

        async with make_client(RecordingHandler(respond), max_retries=3) as client:
            assert await client.get_chain_identifier() == "4c78adac"

        assert attempts == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_transport_error(self) -> None:
        attempts = 0

        def respond(req: dict[str, Any]) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            raise httpx.ConnectError("connection refused")

        async with make_client(RecordingHandler(respond), max_retries=2) as client:
            with pytest.raises(LedgerTransportError) as exc_info:
                await client.get_chain_identifier()

        assert attempts == 2
        assert "connection refused" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_rpc_errors_are_not_retried(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(
                200, json={"jsonrpc": "2.0", "id": req["id"], "error": {"code": -32000, "message": "boom"}}
            )
        )
        async with make_client(handler, max_retries=3) as client:
            with pytest.raises(LedgerRPCError):
                await client.get_chain_identifier()

        assert len(handler.requests) == 1


@pytest.mark.unit
class TestBatchCall:
    """Tests for JSON-RPC batch arrays."""

    @pytest.mark.asyncio
    async def test_reassociates_out_of_order_responses(self) -> None:
        def respond(batch: list[dict[str, Any]]) -> httpx.Response:
            body = [
                {"jsonrpc": "2.0", "id": req["id"], "result": checkpoint_payload(int(req["params"][0]))}
                for req in reversed(batch)
            ]
            return httpx.Response(200, json=body)

        handler = RecordingHandler(respond)
        async with make_client(handler) as client:
            results = await client.get_checkpoints_by_ids(["1", "2", "3"])

        assert [result.sequence_number for result in results] == ["1", "2", "3"]
        [batch] = handler.requests
        assert isinstance(batch, list)
        assert [req["method"] for req in batch] == ["sui_getCheckpoint"] * 3

    @pytest.mark.asyncio
    async def test_entry_error_is_returned_in_place(self) -> None:
        def respond(batch: list[dict[str, Any]]) -> httpx.Response:
            body = []
            for req in batch:
                if req["params"][0] == "2":
                    body.append({"jsonrpc": "2.0", "id": req["id"], "error": {"code": -32602, "message": "not found"}})
                else:
                    body.append({"jsonrpc": "2.0", "id": req["id"], "result": checkpoint_payload(int(req["params"][0]))})
            return httpx.Response(200, json=body)

        async with make_client(RecordingHandler(respond)) as client:
            first, second, third = await client.get_checkpoints_by_ids(["1", "2", "3"])

        assert first.sequence_number == "1"
        assert isinstance(second, LedgerRPCError)
        assert second.rpc_message == "not found"
        assert third.sequence_number == "3"

    @pytest.mark.asyncio
    async def test_missing_entry_fails_batch(self) -> None:
        def respond(batch: list[dict[str, Any]]) -> httpx.Response:
            req = batch[0]
            return httpx.Response(200, json=[{"jsonrpc": "2.0", "id": req["id"], "result": checkpoint_payload(1)}])

        async with make_client(RecordingHandler(respond)) as client:
            with pytest.raises(LedgerTransportError) as exc_info:
                await client.get_checkpoints_by_ids(["1", "2"])

        assert "missing id" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_whole_batch_error_object(self) -> None:
        handler = RecordingHandler(
            lambda batch: httpx.Response(
                200, json={"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "batch too large"}}
            )
        )
        async with make_client(handler) as client:
            with pytest.raises(LedgerRPCError):
                await client.get_checkpoints_by_ids(["1", "2"])

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_request(self) -> None:
        handler = RecordingHandler(lambda batch: httpx.Response(500))
        async with make_client(handler) as client:
            assert await client.get_checkpoints_by_ids([]) == []

        assert handler.requests == []


@pytest.mark.unit
class TestObjectCalls:
    @pytest.mark.asyncio
    async def test_multi_get_objects_drops_error_entries(self) -> None:
        found = {
            "objectId": "0x" + "5" * 64,
            "version": "3",
            "digest": "ObjDigest",
            "type": "0x2::clock::Clock",
        }

        def respond(req: dict[str, Any]) -> httpx.Response:
            result = [{"data": found}, {"error": {"code": "notExists", "object_id": "0x6"}}]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": result})

        handler = RecordingHandler(respond)
        async with make_client(handler) as client:
            objects = await client.multi_get_objects(["0x5", "0x6"])

        assert [obj.object_id for obj in objects] == [found["objectId"]]
        method, (ids, options) = handler.requests[0]["method"], handler.requests[0]["params"]
        assert method == "sui_multiGetObjects"
        assert ids == ["0x5", "0x6"]
        assert options["showContent"] is True

    @pytest.mark.asyncio
    async def test_past_object_not_found_is_none(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": req["id"], "result": {"status": "VersionNotFound", "details": ["0x5", 9]}},
            )
        )
        async with make_client(handler) as client:
            assert await client.try_get_past_object("0x5", 9) is None

    @pytest.mark.asyncio
    async def test_coin_metadata_null_is_none(self) -> None:
        handler = RecordingHandler(
            lambda req: httpx.Response(200, json={"jsonrpc": "2.0", "id": req["id"], "result": None})
        )
        async with make_client(handler) as client:
            assert await client.get_coin_metadata("0x2::nope::NOPE") is None
