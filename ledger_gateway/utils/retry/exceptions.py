"""Exception types and statistics helpers for retry utilities."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RetryStatistics:
    """Statistics captured during a retry session."""

    attempts: int = 0
    total_delay: float = 0.0
    exceptions: list[str] = field(default_factory=list)


class RetryError(Exception):
    """Raised once every attempt of a retried operation has failed."""

    def __init__(
        self,
        operation: str,
        last_exception: Exception,
        attempts: int,
        statistics: RetryStatistics | None = None,
    ) -> None:
        self.operation = operation
        self.last_exception = last_exception
        self.attempts = attempts
        self.statistics = statistics
        super().__init__(
            f"{operation} failed after {attempts} attempts. Last error: {last_exception}"
        )
