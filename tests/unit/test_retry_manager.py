"""Unit tests for RetryManager."""

import pytest

from static_translator.core.exceptions import (
    LLMConnectionError,
    LLMRateLimitError,
    LLMResponseError,
    TranslationFailedError,
)
from static_translator.core.retry_manager import RetryConfig, RetryManager


class TestCalculateDelay:
    """Test backoff delays."""

    def test_exponential_delays_are_capped(self):
        manager = RetryManager(RetryConfig(initial_delay=1, max_delay=10, backoff_factor=2))
        assert [manager.calculate_delay(n) for n in range(1, 6)] == [1, 2, 4, 8, 10]

    def test_retry_after_raises_delay(self):
        manager = RetryManager(RetryConfig(initial_delay=1, max_delay=10))
        assert manager.calculate_delay(1, LLMRateLimitError("x", retry_after=5)) == 5
        assert manager.calculate_delay(1, LLMRateLimitError("x", retry_after=30)) == 10

    def test_jitter_stays_within_bounds(self):
        manager = RetryManager(RetryConfig(initial_delay=4, max_delay=10, jitter=0.5))
        for _ in range(20):
            assert 4 <= manager.calculate_delay(1) <= 6


class TestExecuteWithRetry:
    """Test the bounded retry loop."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, recording_sleep):
        manager = RetryManager(RetryConfig(), sleep=recording_sleep)

        async def operation(value):
            return value * 2

        assert await manager.execute_with_retry(operation, 21) == 42
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_retryable_errors_then_success(self, recording_sleep):
        manager = RetryManager(RetryConfig(max_attempts=3), sleep=recording_sleep)
        errors = [LLMResponseError("bad json"), LLMRateLimitError("429")]
        retries = []

        async def operation():
            if errors:
                raise errors.pop(0)
            return "ok"

        result = await manager.execute_with_retry(
            operation, on_retry=lambda error, attempt: retries.append(attempt)
        )
        assert result == "ok"
        assert retries == [1, 2]
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_carries_last_error(self, recording_sleep):
        manager = RetryManager(RetryConfig(max_attempts=2), sleep=recording_sleep)
        error = LLMRateLimitError("429")

        async def operation():
            raise error

        with pytest.raises(TranslationFailedError) as exc_info:
            await manager.execute_with_retry(operation)
        assert exc_info.value.original_error is error
        assert exc_info.value.attempts == 2
        assert recording_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_wrapped_at_once(self, recording_sleep):
        manager = RetryManager(RetryConfig(max_attempts=5), sleep=recording_sleep)
        calls = []

        async def operation():
            calls.append(1)
            raise LLMConnectionError("refused")

        with pytest.raises(TranslationFailedError) as exc_info:
            await manager.execute_with_retry(operation)
        assert len(calls) == 1
        assert isinstance(exc_info.value.original_error, LLMConnectionError)

    @pytest.mark.asyncio
    async def test_single_attempt_never_retries(self, recording_sleep):
        manager = RetryManager(RetryConfig(max_attempts=1), sleep=recording_sleep)

        async def operation():
            raise LLMResponseError("bad json")

        with pytest.raises(TranslationFailedError) as exc_info:
            await manager.execute_with_retry(operation)
        assert exc_info.value.attempts == 1
        assert recording_sleep.delays == []
