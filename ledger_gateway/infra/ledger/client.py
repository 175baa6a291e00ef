"""Async JSON-RPC 2.0 client for a ledger fullnode.

Provides:
- Connection pooling over one ``httpx.AsyncClient``
- Retries with exponential backoff for transport failures only
- JSON-RPC batch arrays, re-associated by request id
- Decoding of every result into the models in ``models``
- Per-call DEBUG logs and Prometheus metrics

Nothing above this client retries; a failure that survives the retry
policy surfaces as ``LedgerTransportError``.
"""

from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from ledger_gateway.infra.ledger.exceptions import LedgerRPCError, LedgerTransportError
from ledger_gateway.infra.ledger.models import (
    Balance,
    Checkpoint,
    Coin,
    CoinMetadata,
    DelegatedStake,
    DynamicFieldInfo,
    EpochInfo,
    Event,
    NormalizedFunction,
    NormalizedModule,
    ObjectData,
    ObjectResponse,
    Page,
    PastObjectResponse,
    ProtocolConfig,
    TransactionBlock,
)
from ledger_gateway.infra.metrics.tracking import track_rpc_call
from ledger_gateway.utils.retry import RetryError, retry

if TYPE_CHECKING:
    from ledger_gateway.core.settings.ledger import LedgerSettings

logger = logging.getLogger(__name__)

M = TypeVar("M")

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)

# Options requested for every transaction block so any GraphQL field can be served
TRANSACTION_BLOCK_OPTIONS: dict[str, bool] = {
    "showInput": True,
    "showRawInput": True,
    "showEffects": True,
    "showEvents": True,
    "showObjectChanges": True,
    "showBalanceChanges": True,
}

OBJECT_OPTIONS: dict[str, bool] = {
    "showType": True,
    "showOwner": True,
    "showPreviousTransaction": True,
    "showDisplay": True,
    "showContent": True,
    "showBcs": True,
    "showStorageRebate": True,
}

_adapters: dict[Any, TypeAdapter[Any]] = {}


def _adapter(model: Any) -> TypeAdapter[Any]:
    if model not in _adapters:
        _adapters[model] = TypeAdapter(model)
    return _adapters[model]


class LedgerClient:
    """Client for the ledger fullnode JSON-RPC API.

    Use as an async context manager, or call ``close()`` when done.

    Example:
        ```python
        async with LedgerClient("https://fullnode.devnet.sui.io:443") as client:
            checkpoint = await client.get_checkpoint("1000")
            found = await client.multi_get_objects(["0x5", "0x6"])
        ```
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_initial_delay: float = 0.5,
        retry_max_delay: float = 10.0,
        max_connections: int = 100,
        max_keepalive_connections: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: JSON-RPC URL of the fullnode.
            timeout: Per-request timeout in seconds.
            max_retries: Attempts for transport failures (1 disables retry).
            retry_initial_delay: First backoff delay in seconds.
            retry_max_delay: Upper bound for any backoff delay.
            max_connections: Connection pool size.
            max_keepalive_connections: Idle connections kept open.
            transport: Custom httpx transport (tests use ``httpx.MockTransport``).
        """
        self.endpoint = endpoint
        self._ids = itertools.count(1)
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
            limits=httpx.Limits(
                max_keepalive_connections=max_keepalive_connections,
                max_connections=max_connections,
            ),
            transport=transport,
        )
        self._post = retry(
            max_attempts=max_retries,
            initial_delay=retry_initial_delay,
            max_delay=retry_max_delay,
            exceptions=RETRYABLE_EXCEPTIONS,
            operation="ledger_rpc",
        )(self._post_once)

    @classmethod
    def from_settings(
        cls,
        settings: LedgerSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> LedgerClient:
        return cls(
            endpoint=settings.endpoint,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            retry_initial_delay=settings.retry_initial_delay,
            retry_max_delay=settings.retry_max_delay,
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        await self.client.aclose()

    async def __aenter__(self) -> LedgerClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # JSON-RPC primitives
    # ------------------------------------------------------------------

    async def _post_once(self, payload: Any) -> httpx.Response:
        return await self.client.post(self.endpoint, json=payload)

    async def _send(self, method: str, payload: Any) -> Any:
        """POST a request or batch and return the decoded JSON body."""
        try:
            response = await self._post(payload)
            response.raise_for_status()
            return response.json()
        except RetryError as e:
            raise LedgerTransportError(method, str(e.last_exception)) from e
        except httpx.HTTPStatusError as e:
            raise LedgerTransportError(
                method, f"HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise LedgerTransportError(method, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise LedgerTransportError(method, f"invalid JSON response: {e}") from e

    def _request(self, method: str, params: list[Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

    @staticmethod
    def _error_from(method: str, body: dict[str, Any]) -> LedgerRPCError:
        error = body.get("error") or {}
        return LedgerRPCError(
            method,
            code=int(error.get("code", -32603)),
            message=str(error.get("message", "unknown error")),
            data=error.get("data"),
        )

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Send one JSON-RPC request and return its ``result``.

        Raises:
            LedgerRPCError: The response carried an error object.
            LedgerTransportError: No usable response was received.
        """
        request = self._request(method, params or [])
        with track_rpc_call(method):
            body = await self._send(method, request)
            if not isinstance(body, dict):
                raise LedgerTransportError(method, "response is not a JSON object")
            if "error" in body:
                raise self._error_from(method, body)
            if "result" not in body:
                raise LedgerTransportError(method, "response has neither result nor error")

        logger.debug("Ledger RPC call completed", extra={"method": method})
        return body["result"]

    async def batch_call(
        self,
        method: str,
        params_list: list[list[Any]],
    ) -> list[Any | LedgerRPCError]:
        """Send one HTTP request carrying a JSON-RPC batch of ``method`` calls.

        Returns one entry per element of ``params_list``, in the same order:
        the ``result`` of that call, or a ``LedgerRPCError`` when the node
        answered that entry with an error object. Responses are matched to
        requests by id, so their order on the wire does not matter.

        Raises:
            LedgerTransportError: The batch as a whole failed, or an entry
                is missing from the response.
        """
        if not params_list:
            return []

        requests = [self._request(method, params) for params in params_list]
        with track_rpc_call(method):
            body = await self._send(method, requests)
            if isinstance(body, dict) and "error" in body:
                # Some nodes reject a whole batch with a single error object
                raise self._error_from(method, body)
            if not isinstance(body, list):
                raise LedgerTransportError(method, "batch response is not a JSON array")

        by_id = {entry.get("id"): entry for entry in body if isinstance(entry, dict)}
        results: list[Any | LedgerRPCError] = []
        for request in requests:
            entry = by_id.get(request["id"])
            if entry is None:
                raise LedgerTransportError(
                    method, f"batch response is missing id {request['id']}"
                )
            if "error" in entry:
                results.append(self._error_from(method, entry))
            else:
                results.append(entry.get("result"))

        logger.debug(
            "Ledger RPC batch completed",
            extra={"method": method, "batch_size": len(requests)},
        )
        return results

    @staticmethod
    def _decode(method: str, model: Any, value: Any) -> Any:
        try:
            return _adapter(model).validate_python(value)
        except ValidationError as e:
            logger.warning(
                "Malformed ledger response",
                extra={"method": method, "errors": e.error_count()},
            )
            raise LedgerTransportError(method, f"malformed response: {e}") from e

    async def _batch_decode(
        self,
        method: str,
        model: Any,
        params_list: list[list[Any]],
    ) -> list[Any | LedgerRPCError]:
        raw = await self.batch_call(method, params_list)
        return [
            entry if isinstance(entry, LedgerRPCError) else self._decode(method, model, entry)
            for entry in raw
        ]

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    async def get_chain_identifier(self) -> str:
        return str(await self.call("sui_getChainIdentifier"))

    async def get_latest_checkpoint_sequence_number(self) -> str:
        return str(await self.call("sui_getLatestCheckpointSequenceNumber"))

    async def get_protocol_config(self, version: str | None = None) -> ProtocolConfig:
        method = "sui_getProtocolConfig"
        result = await self.call(method, [version])
        return self._decode(method, ProtocolConfig, result)

    # ------------------------------------------------------------------
    # Checkpoints and epochs
    # ------------------------------------------------------------------

    async def get_checkpoint(self, checkpoint_id: str) -> Checkpoint:
        """Fetch one checkpoint by digest or sequence number."""
        method = "sui_getCheckpoint"
        return self._decode(method, Checkpoint, await self.call(method, [checkpoint_id]))

    async def get_checkpoints_by_ids(
        self, checkpoint_ids: list[str]
    ) -> list[Checkpoint | LedgerRPCError]:
        """Fetch many checkpoints in one batch, aligned with ``checkpoint_ids``."""
        return await self._batch_decode(
            "sui_getCheckpoint", Checkpoint, [[cid] for cid in checkpoint_ids]
        )

    async def get_checkpoints(
        self,
        cursor: str | None = None,
        limit: int | None = None,
        descending_order: bool = False,
    ) -> Page[Checkpoint]:
        method = "sui_getCheckpoints"
        result = await self.call(method, [cursor, limit, descending_order])
        return self._decode(method, Page[Checkpoint], result)

    async def get_epochs(
        self,
        cursor: str | None = None,
        limit: int | None = None,
        descending_order: bool = False,
    ) -> Page[EpochInfo]:
        method = "suix_getEpochs"
        result = await self.call(method, [cursor, limit, descending_order])
        return self._decode(method, Page[EpochInfo], result)

    # ------------------------------------------------------------------
    # Transactions and events
    # ------------------------------------------------------------------

    async def multi_get_transaction_blocks(self, digests: list[str]) -> list[TransactionBlock]:
        """Fetch transaction blocks by digest.

        The node may omit unknown digests or return them in another order;
        callers re-associate by ``digest``.
        """
        if not digests:
            return []
        method = "sui_multiGetTransactionBlocks"
        result = await self.call(method, [digests, TRANSACTION_BLOCK_OPTIONS])
        return self._decode(method, list[TransactionBlock], result or [])

    async def query_transaction_blocks(
        self,
        filter: dict[str, Any] | None = None,
        cursor: str | None = None,
        limit: int | None = None,
        descending_order: bool = False,
    ) -> Page[TransactionBlock]:
        method = "suix_queryTransactionBlocks"
        query = {"filter": filter, "options": TRANSACTION_BLOCK_OPTIONS}
        result = await self.call(method, [query, cursor, limit, descending_order])
        return self._decode(method, Page[TransactionBlock], result)

    async def query_events(
        self,
        query: dict[str, Any],
        cursor: dict[str, str] | None = None,
        limit: int | None = None,
        descending_order: bool = False,
    ) -> Page[Event]:
        """Page through events; ``cursor`` is an ``{"txDigest", "eventSeq"}`` object."""
        method = "suix_queryEvents"
        result = await self.call(method, [query, cursor, limit, descending_order])
        return self._decode(method, Page[Event], result)

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    async def multi_get_objects(self, object_ids: list[str]) -> list[ObjectData]:
        """Fetch objects by id, dropping entries the node reports as missing."""
        if not object_ids:
            return []
        method = "sui_multiGetObjects"
        result = await self.call(method, [object_ids, OBJECT_OPTIONS])
        responses: list[ObjectResponse] = self._decode(method, list[ObjectResponse], result or [])
        return [response.data for response in responses if response.data is not None]

    async def try_get_past_object(self, object_id: str, version: int) -> ObjectData | None:
        """Fetch an object at a specific version, or None when that version is unavailable."""
        method = "sui_tryGetPastObject"
        result = await self.call(method, [object_id, version, OBJECT_OPTIONS])
        response: PastObjectResponse = self._decode(method, PastObjectResponse, result)
        if response.status != "VersionFound":
            return None
        return self._decode(method, ObjectData, response.details)

    async def get_owned_objects(
        self,
        owner: str,
        filter: dict[str, Any] | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[ObjectData]:
        method = "suix_getOwnedObjects"
        query = {"filter": filter, "options": OBJECT_OPTIONS}
        result = await self.call(method, [owner, query, cursor, limit])
        page: Page[ObjectResponse] = self._decode(method, Page[ObjectResponse], result)
        return Page[ObjectData](
            data=[response.data for response in page.data if response.data is not None],
            next_cursor=page.next_cursor,
            has_next_page=page.has_next_page,
        )

    async def get_dynamic_fields(
        self,
        parent_id: str,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[DynamicFieldInfo]:
        method = "suix_getDynamicFields"
        result = await self.call(method, [parent_id, cursor, limit])
        return self._decode(method, Page[DynamicFieldInfo], result)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def get_balance(self, owner: str, coin_type: str | None = None) -> Balance:
        method = "suix_getBalance"
        return self._decode(method, Balance, await self.call(method, [owner, coin_type]))

    async def get_all_balances(self, owner: str) -> list[Balance]:
        method = "suix_getAllBalances"
        return self._decode(method, list[Balance], await self.call(method, [owner]))

    async def get_coins(
        self,
        owner: str,
        coin_type: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> Page[Coin]:
        method = "suix_getCoins"
        result = await self.call(method, [owner, coin_type, cursor, limit])
        return self._decode(method, Page[Coin], result)

    async def get_stakes(self, owner: str) -> list[DelegatedStake]:
        method = "suix_getStakes"
        return self._decode(method, list[DelegatedStake], await self.call(method, [owner]))

    async def get_coin_metadata(self, coin_type: str) -> CoinMetadata | None:
        method = "suix_getCoinMetadata"
        result = await self.call(method, [coin_type])
        if result is None:
            return None
        return self._decode(method, CoinMetadata, result)

    # ------------------------------------------------------------------
    # Move packages
    # ------------------------------------------------------------------

    async def get_normalized_move_modules(
        self, modules: list[tuple[str, str]]
    ) -> list[NormalizedModule | LedgerRPCError]:
        """Fetch ``(package, module)`` pairs in one batch, aligned with the input."""
        return await self._batch_decode(
            "sui_getNormalizedMoveModule",
            NormalizedModule,
            [[package, module] for package, module in modules],
        )

    async def get_normalized_move_modules_by_package(
        self, package: str
    ) -> dict[str, NormalizedModule]:
        method = "sui_getNormalizedMoveModulesByPackage"
        result = await self.call(method, [package])
        return self._decode(method, dict[str, NormalizedModule], result)

    async def get_normalized_move_functions(
        self, functions: list[tuple[str, str, str]]
    ) -> list[NormalizedFunction | LedgerRPCError]:
        """Fetch ``(package, module, function)`` triples in one batch, aligned with the input."""
        return await self._batch_decode(
            "sui_getNormalizedMoveFunction",
            NormalizedFunction,
            [list(triple) for triple in functions],
        )


__all__ = ["LedgerClient", "OBJECT_OPTIONS", "TRANSACTION_BLOCK_OPTIONS"]
