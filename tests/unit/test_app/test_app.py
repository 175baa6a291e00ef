"""Tests for the FastAPI application surface."""

from __future__ import annotations

import pytest

from ledger_gateway.infra.ledger.exceptions import LedgerTransportError


@pytest.mark.integration
class TestOperationalRoutes:
    async def test_health(self, client) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "ledger-gateway"
        assert body["epochs_indexed"] == 0

    async def test_ready_reaches_upstream(self, client, ledger) -> None:
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "chain_identifier": "4c78adac"}
        assert ledger.calls_to("get_chain_identifier") == [()]

    async def test_ready_upstream_down_is_problem_response(self, client, ledger) -> None:
        ledger.fail("get_chain_identifier", LedgerTransportError("sui_getChainIdentifier", "HTTP 503"))

        response = await client.get("/health/ready", headers={"X-Correlation-ID": "probe-1"})

        assert response.status_code == 502
        assert response.headers["content-type"].startswith("application/problem+json")
        problem = response.json()
        assert problem["title"] == "Bad Gateway"
        assert problem["status"] == 502
        assert problem["correlation_id"] == "probe-1"

    async def test_metrics_exposition(self, client) -> None:
        await client.post("/graphql", json={"query": "{ chainIdentifier }"})

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]
        assert "ledger_rpc_requests_total" in response.text


@pytest.mark.integration
class TestCorrelationID:
    async def test_echoes_incoming_header(self, client) -> None:
        response = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["x-correlation-id"] == "abc-123"

    async def test_generates_when_missing(self, client) -> None:
        response = await client.get("/health")

        assert len(response.headers["x-correlation-id"]) == 36


@pytest.mark.integration
class TestGraphQLEndpoint:
    async def test_post_query(self, client) -> None:
        response = await client.post(
            "/graphql",
            json={"query": "query ($n: BigInt) { checkpoint(id: {sequenceNumber: $n}) { digest epoch { epochId } } }",
                  "variables": {"n": "7"}},
        )

        assert response.status_code == 200
        assert response.json() == {"data": {"checkpoint": {"digest": "CheckpointDigest7", "epoch": {"epochId": 1}}}}

    async def test_errors_carry_codes(self, client) -> None:
        response = await client.post(
            "/graphql", json={"query": '{ transactionBlock(digest: "Nope") { digest } }'}
        )

        body = response.json()
        assert body["data"] == {"transactionBlock": None}
        assert body["errors"][0]["extensions"]["code"] == "NOT_FOUND"

    async def test_epoch_index_shared_across_requests(self, app, client, ledger) -> None:
        await client.post("/graphql", json={"query": "{ epoch(id: 1) { epochId } }"})
        await client.post("/graphql", json={"query": "{ epoch(id: 0) { epochId } }"})

        assert app.state.epoch_index.size >= 2
        # The second request is answered from the index without a rescan
        assert len(ledger.calls_to("get_epochs")) == 1
