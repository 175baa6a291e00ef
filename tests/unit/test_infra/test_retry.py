"""Unit tests for the retry decorator used by the ledger client."""

from __future__ import annotations

import httpx
import pytest

from ledger_gateway.utils.retry import RetryError, RetryStrategy, retry


@pytest.mark.unit
class TestRetryDecorator:
    """Tests for retry decorator."""

    @pytest.mark.asyncio
    async def test_succeeds_first_try(self):
        """Test that successful calls don't retry."""
        call_count = 0

        @retry(max_attempts=3, initial_delay=0.01)
        async def succeed():
            nonlocal call_count
            call_count += 1
            return "ok"

        assert await succeed() == "ok"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        """Test that eligible exceptions are retried until success."""
        call_count = 0

        @retry(max_attempts=3, initial_delay=0.0, jitter=False, exceptions=(httpx.NetworkError,))
        async def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise httpx.ConnectError("refused")
            return "ok"

        assert await flaky() == "ok"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_raises_retry_error(self):
        """Test that RetryError carries the last exception and attempt count."""

        @retry(max_attempts=2, initial_delay=0.0, exceptions=(httpx.TimeoutException,), operation="ledger_rpc")
        async def always_times_out():
            raise httpx.ReadTimeout("slow")

        with pytest.raises(RetryError) as exc_info:
            await always_times_out()

        error = exc_info.value
        assert error.operation == "ledger_rpc"
        assert error.attempts == 2
        assert isinstance(error.last_exception, httpx.ReadTimeout)
        assert error.statistics.exceptions == ["ReadTimeout", "ReadTimeout"]

    @pytest.mark.asyncio
    async def test_non_retryable_propagates_immediately(self):
        """Test that exceptions outside ``exceptions`` are not retried."""
        call_count = 0

        @retry(max_attempts=5, initial_delay=0.0, exceptions=(httpx.NetworkError,))
        async def bad_value():
            nonlocal call_count
            call_count += 1
            raise ValueError("not retryable")

        with pytest.raises(ValueError):
            await bad_value()

        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retry_if_predicate(self):
        """Test that retry_if can veto an otherwise eligible exception."""
        call_count = 0

        @retry(
            max_attempts=3,
            initial_delay=0.0,
            exceptions=(RuntimeError,),
            retry_if=lambda e: "transient" in str(e),
        )
        async def permanent():
            nonlocal call_count
            call_count += 1
            raise RuntimeError("permanent")

        with pytest.raises(RuntimeError):
            await permanent()

        assert call_count == 1


@pytest.mark.unit
class TestRetryStrategy:
    """Tests for delay calculation."""

    def test_exponential_backoff(self):
        strategy = RetryStrategy(initial_delay=0.5, exponential_base=2.0, max_delay=10.0, jitter=False)

        assert [strategy.calculate_delay(n) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_delay_is_capped(self):
        strategy = RetryStrategy(initial_delay=1.0, max_delay=3.0, jitter=False)

        assert strategy.calculate_delay(10) == 3.0

    def test_jitter_stays_in_range(self):
        strategy = RetryStrategy(initial_delay=1.0, max_delay=10.0, jitter=True)

        for _ in range(20):
            assert 0.5 <= strategy.calculate_delay(0) <= 1.5

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            RetryStrategy(max_attempts=0)
