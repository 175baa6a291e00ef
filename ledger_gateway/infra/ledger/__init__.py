"""Upstream ledger fullnode access (JSON-RPC over httpx)."""

from __future__ import annotations

from ledger_gateway.infra.ledger.client import LedgerClient
from ledger_gateway.infra.ledger.exceptions import LedgerRPCError, LedgerTransportError

__all__ = ["LedgerClient", "LedgerRPCError", "LedgerTransportError"]
