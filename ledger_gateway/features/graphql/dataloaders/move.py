"""Loaders for normalized Move modules and functions.

Keys are composite: ``package,module`` for modules and
``package,module,function`` for functions. Each batch is one JSON-RPC batch
request with results aligned to the keys by request id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ledger_gateway.core.exceptions import BadRequestException
from ledger_gateway.features.graphql.dataloaders.base import EntityLoader
from ledger_gateway.features.graphql.pagination import composite_cursor, split_composite_cursor
from ledger_gateway.infra.ledger.exceptions import LedgerRPCError
from ledger_gateway.infra.ledger.models import NormalizedFunction, NormalizedModule

if TYPE_CHECKING:
    from ledger_gateway.infra.ledger.client import LedgerClient


@dataclass(frozen=True)
class MoveFunctionRecord:
    """A normalized function together with where it lives."""

    package: str
    module: str
    name: str
    function: NormalizedFunction

    @property
    def key(self) -> str:
        return composite_cursor(self.package, self.module, self.name)


def _split_keys(
    keys: list[str], parts: int
) -> tuple[list[tuple[str, list[str]]], dict[str, BadRequestException]]:
    valid: list[tuple[str, list[str]]] = []
    malformed: dict[str, BadRequestException] = {}
    for key in keys:
        try:
            valid.append((key, split_composite_cursor(key, parts)))
        except BadRequestException as e:
            malformed[key] = e
    return valid, malformed


class MoveModuleLoader(EntityLoader[NormalizedModule]):
    name = "move_module"

    def __init__(self, client: LedgerClient, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self._client = client

    async def fetch(self, keys: list[str]) -> dict[str, NormalizedModule | Exception]:
        valid, malformed = _split_keys(keys, 2)
        found: dict[str, NormalizedModule | Exception] = {
            key: self.not_found(key, error.detail) for key, error in malformed.items()
        }
        if not valid:
            return found

        results = await self._client.get_normalized_move_modules(
            [(package, module) for _, (package, module) in valid]
        )
        for (key, _), result in zip(valid, results, strict=True):
            if isinstance(result, LedgerRPCError):
                found[key] = self.not_found(key, result.rpc_message)
            else:
                found[key] = result
        return found


class MoveFunctionLoader(EntityLoader[MoveFunctionRecord]):
    name = "move_function"

    def __init__(self, client: LedgerClient, max_batch_size: int | None = None) -> None:
        super().__init__(max_batch_size)
        self._client = client

    async def fetch(self, keys: list[str]) -> dict[str, MoveFunctionRecord | Exception]:
        valid, malformed = _split_keys(keys, 3)
        found: dict[str, MoveFunctionRecord | Exception] = {
            key: self.not_found(key, error.detail) for key, error in malformed.items()
        }
        if not valid:
            return found

        results = await self._client.get_normalized_move_functions(
            [(package, module, function) for _, (package, module, function) in valid]
        )
        for (key, (package, module, function)), result in zip(valid, results, strict=True):
            if isinstance(result, LedgerRPCError):
                found[key] = self.not_found(key, result.rpc_message)
            else:
                found[key] = MoveFunctionRecord(
                    package=package, module=module, name=function, function=result
                )
        return found


__all__ = ["MoveFunctionLoader", "MoveFunctionRecord", "MoveModuleLoader"]
