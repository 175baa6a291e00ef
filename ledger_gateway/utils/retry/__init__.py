from __future__ import annotations

from ledger_gateway.utils.retry.decorator import retry
from ledger_gateway.utils.retry.exceptions import RetryError, RetryStatistics
from ledger_gateway.utils.retry.strategies import RetryStrategy

__all__ = ["RetryError", "RetryStatistics", "RetryStrategy", "retry"]
