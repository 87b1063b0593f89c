"""Tests for retry with backoff."""

import pytest

from cleaner_api.errors.exceptions import (
    ConflictError,
    InvalidArgumentError,
    RetriesExhaustedError,
    TransientError,
)
from cleaner_api.services.retry import RetryPolicy, retry_async, run_transaction


class TestRetryPolicy:
    """Tests for backoff delays."""

    def test_exponential_backoff(self):
        policy = RetryPolicy(
            base_backoff_seconds=0.1,
            backoff_multiplier=2.0,
            max_backoff_seconds=10.0,
            jitter_seconds=0.0,
        )
        assert policy.delay_for(1) == pytest.approx(0.1)
        assert policy.delay_for(2) == pytest.approx(0.2)
        assert policy.delay_for(3) == pytest.approx(0.4)

    def test_backoff_capped(self):
        policy = RetryPolicy(
            base_backoff_seconds=0.5,
            backoff_multiplier=10.0,
            max_backoff_seconds=1.0,
            jitter_seconds=0.0,
        )
        assert policy.delay_for(5) == pytest.approx(1.0)

    def test_jitter_bounded(self):
        policy = RetryPolicy(base_backoff_seconds=0.0, jitter_seconds=0.05)
        for _ in range(20):
            assert 0.0 <= policy.delay_for(1) <= 0.05


class TestRetryAsync:
    """Tests for retry_async."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self, fast_retry):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise TransientError()
            return "ok"

        assert await retry_async(flaky, fast_retry, "flaky") == "ok"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_terminal_errors_not_retried(self, fast_retry):
        """Test that non-retryable errors surface on the first attempt."""
        calls = []

        async def invalid():
            calls.append(1)
            raise InvalidArgumentError()

        with pytest.raises(InvalidArgumentError):
            await retry_async(invalid, fast_retry, "invalid")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_exhaustion(self):
        """Test that persistent conflicts end in RetriesExhaustedError."""
        policy = RetryPolicy(max_attempts=3, base_backoff_seconds=0.0, jitter_seconds=0.0)
        calls = []

        async def always_conflicts():
            calls.append(1)
            raise ConflictError()

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await retry_async(always_conflicts, policy, "conflicting")

        assert len(calls) == 3
        assert isinstance(exc_info.value.last_error, ConflictError)
        assert exc_info.value.details["attempts"] == 3
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_run_transaction_retries_whole_body(self, store, fast_retry):
        """Test that a conflict re-runs the read-check-write body."""
        await store.set("counters", "c", {"value": 0})
        runs = []

        async def increment(tx):
            data = await tx.get("counters", "c")
            if not runs:
                # Concurrent writer sneaks in after the first read
                await store.update("counters", "c", {"value": 10})
            runs.append(1)
            tx.update("counters", "c", {"value": data["value"] + 1})
            return data["value"] + 1

        result = await run_transaction(store, increment, fast_retry, "increment")

        assert result == 11
        assert len(runs) == 2
        assert (await store.get("counters", "c")).data == {"value": 11}
