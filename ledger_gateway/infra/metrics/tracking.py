"""Helper functions for recording gateway metrics."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import time
from typing import TYPE_CHECKING

from ledger_gateway.infra.metrics import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def track_rpc_call(method: str) -> Iterator[None]:
    """Time one upstream request and count its outcome.

    Outcome is ``ok`` unless the body raises. The ledger client's own error
    classes report themselves as ``rpc_error``; anything else counts as
    ``transport_error``.

    Example:
            with track_rpc_call("sui_getCheckpoint"):
            response = await http.post(...)
    """
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except Exception as exc:
        outcome = getattr(exc, "metric_outcome", "transport_error")
        raise
    finally:
        duration = time.perf_counter() - start
        registry.ledger_rpc_duration_seconds.labels(method=method).observe(duration)
        registry.ledger_rpc_requests_total.labels(method=method, outcome=outcome).inc()


def track_loader_batch(loader: str, size: int, not_found: int = 0) -> None:
    """Record one entity loader batch and how many keys came back missing."""
    registry.dataloader_batches_total.labels(loader=loader).inc()
    registry.dataloader_batch_size.labels(loader=loader).observe(size)
    if not_found:
        registry.dataloader_not_found_total.labels(loader=loader).inc(not_found)


def track_epoch_page(index_size: int) -> None:
    """Record one page folded into the epoch index."""
    registry.epoch_index_pages_fetched_total.inc()
    registry.epoch_index_size.set(index_size)


def track_graphql_error(code: str) -> None:
    registry.graphql_errors_total.labels(code=code).inc()


def track_retry_attempt(operation: str, attempt_number: int) -> None:
    """Track a retry attempt.

    Example:
            track_retry_attempt("sui_getCheckpoint", 2)
    """
    registry.retry_attempts_total.labels(
        operation=operation,
        attempt=str(attempt_number),
    ).inc()


def track_retry_exhausted(operation: str) -> None:
    registry.retry_exhausted_total.labels(operation=operation).inc()


def track_retry_success(operation: str, attempts_needed: int) -> None:
    registry.retry_success_after_failure_total.labels(
        operation=operation,
        attempts_needed=str(attempts_needed),
    ).inc()
    logger.debug(
        "Operation succeeded after retry",
        extra={"operation": operation, "attempts_needed": attempts_needed},
    )
