"""Prometheus metrics for the gateway."""

from __future__ import annotations

from ledger_gateway.infra.metrics.registry import REGISTRY

__all__ = ["REGISTRY"]
