"""Prometheus metrics for the gateway.

All collectors live on a dedicated registry that ``GET /metrics`` renders.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

REGISTRY = CollectorRegistry()

# Upstream round trips, 5ms to 10s
RPC_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

# Keys per loader batch
BATCH_SIZE_BUCKETS = (1, 2, 5, 10, 20, 50, 100, 250)

# Upstream ledger RPC
ledger_rpc_requests_total = Counter(
    "ledger_rpc_requests_total",
    "Total JSON-RPC requests sent to the ledger fullnode, by method and outcome "
    "(ok, rpc_error, transport_error). A batch counts once per HTTP request.",
    ["method", "outcome"],
    registry=REGISTRY,
)

ledger_rpc_duration_seconds = Histogram(
    "ledger_rpc_duration_seconds",
    "Ledger JSON-RPC round trip duration in seconds",
    ["method"],
    buckets=RPC_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# Batched entity loaders
dataloader_batches_total = Counter(
    "dataloader_batches_total",
    "Total batch loads dispatched by each entity loader",
    ["loader"],
    registry=REGISTRY,
)

dataloader_batch_size = Histogram(
    "dataloader_batch_size",
    "Distinct keys per entity loader batch",
    ["loader"],
    buckets=BATCH_SIZE_BUCKETS,
    registry=REGISTRY,
)

dataloader_not_found_total = Counter(
    "dataloader_not_found_total",
    "Keys a loader answered with a not-found error",
    ["loader"],
    registry=REGISTRY,
)

# Epoch-index accumulator
epoch_index_pages_fetched_total = Counter(
    "epoch_index_pages_fetched_total",
    "Upstream epoch pages folded into the process-wide epoch index",
    registry=REGISTRY,
)

epoch_index_size = Gauge(
    "epoch_index_size",
    "Epoch records held by the epoch index. Entries are never evicted, "
    "so this only grows for the lifetime of the process.",
    registry=REGISTRY,
)

# Retry decorator
retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total number of retry attempts",
    ["operation", "attempt"],
    registry=REGISTRY,
)

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Total number of operations that exhausted all retry attempts",
    ["operation"],
    registry=REGISTRY,
)

retry_success_after_failure_total = Counter(
    "retry_success_after_failure_total",
    "Total number of operations that succeeded after retry",
    ["operation", "attempts_needed"],
    registry=REGISTRY,
)

# GraphQL
graphql_errors_total = Counter(
    "graphql_errors_total",
    "GraphQL errors returned to clients, by extensions.code",
    ["code"],
    registry=REGISTRY,
)
