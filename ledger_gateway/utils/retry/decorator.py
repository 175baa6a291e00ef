from __future__ import annotations

import asyncio
from functools import wraps
import logging
from typing import TYPE_CHECKING, ParamSpec, TypeVar

from ledger_gateway.infra.metrics.tracking import (
    track_retry_attempt,
    track_retry_exhausted,
    track_retry_success,
)

from .exceptions import RetryError, RetryStatistics
from .strategies import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def retry(
    max_attempts: int = 3,
    initial_delay: float = 0.5,
    max_delay: float = 10.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Callable[[Exception], bool] | None = None,
    operation: str | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry an async callable with exponential backoff and jitter.

    Exceptions that are not retryable propagate immediately. When every
    attempt fails, ``RetryError`` is raised from the last exception.

    Args:
        max_attempts: Total attempts including the first call.
        initial_delay: Delay before the second attempt, in seconds.
        max_delay: Upper bound for any single delay.
        exponential_base: Growth factor per attempt.
        jitter: Multiply each delay by a random factor in [0.5, 1.5).
        exceptions: Exception classes eligible for retry.
        retry_if: Extra predicate an eligible exception must satisfy.
        operation: Name used in logs and metrics; defaults to the function name.

    Example:
        @retry(max_attempts=3, exceptions=(httpx.TransportError,))
        async def post(payload): ...
    """
    strategy = RetryStrategy(
        max_attempts=max_attempts,
        initial_delay=initial_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        exceptions=exceptions,
        retry_if=retry_if,
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        name = operation or func.__name__

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            statistics = RetryStatistics()

            for attempt in range(max_attempts):
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    if not strategy.should_retry(e):
                        raise

                    statistics.exceptions.append(type(e).__name__)
                    if attempt >= max_attempts - 1:
                        track_retry_exhausted(name)
                        logger.error(
                            "All retry attempts exhausted",
                            extra={
                                "operation": name,
                                "attempts": attempt + 1,
                                "last_exception": str(e),
                                "total_delay": statistics.total_delay,
                            },
                        )
                        raise RetryError(name, e, attempt + 1, statistics) from e

                    delay = strategy.calculate_delay(attempt)
                    statistics.attempts += 1
                    statistics.total_delay += delay
                    track_retry_attempt(name, attempt + 2)
                    logger.warning(
                        f"Retrying {name} after {delay:.2f}s (attempt {attempt + 1}/{max_attempts})",
                        extra={
                            "operation": name,
                            "attempt": attempt + 1,
                            "delay": delay,
                            "exception": str(e),
                        },
                    )
                    await asyncio.sleep(delay)
                else:
                    if statistics.attempts > 0:
                        track_retry_success(name, statistics.attempts + 1)
                    return result

            msg = "Retry logic error: exhausted all attempts"
            raise RuntimeError(msg)

        return async_wrapper

    return decorator
