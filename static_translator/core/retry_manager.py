"""
Retry manager with exponential backoff.

Retries are driven by a bounded loop with an explicit attempt counter:
- only error types listed as retryable are retried
- the delay doubles per attempt and is capped at max_delay
- a provider supplied Retry-After raises the delay (still capped)
- exhaustion raises TranslationFailedError carrying the last error
"""

import asyncio
import random
from typing import Optional, Callable, Any, Tuple, Type, Awaitable
from dataclasses import dataclass

from .exceptions import (
    LLMRateLimitError,
    LLMResponseError,
    TranslationFailedError,
)
from static_translator.utils.unified_logger import get_logger


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (first try included)
        initial_delay: Delay before the second attempt, in seconds
        max_delay: Maximum delay in seconds
        backoff_factor: Multiplier for exponential backoff
        jitter: Add random jitter to delays (0.0-1.0)
    """
    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    jitter: float = 0.0


# Rate limiting and malformed responses share one retry budget
RETRYABLE_ERRORS: Tuple[Type[Exception], ...] = (LLMRateLimitError, LLMResponseError)


class RetryManager:
    """Runs an async operation under a RetryConfig."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        retryable: Tuple[Type[Exception], ...] = RETRYABLE_ERRORS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Args:
            config: Retry configuration
            retryable: Exception types that consume an attempt and are retried
            sleep: Awaitable used to wait between attempts
        """
        self.config = config or RetryConfig()
        self.retryable = retryable
        self._sleep = sleep
        self.logger = get_logger()

    def calculate_delay(self, attempt: int, error: Optional[Exception] = None) -> float:
        """Calculate the delay after the given (1-based) failed attempt."""
        config = self.config
        delay = config.initial_delay * (config.backoff_factor ** (attempt - 1))

        retry_after = getattr(error, 'retry_after', None)
        if retry_after:
            delay = max(delay, float(retry_after))

        delay = min(delay, config.max_delay)

        if config.jitter > 0:
            delay += delay * config.jitter * random.random()

        return delay

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[Any]],
        *args,
        operation_id: Optional[str] = None,
        on_retry: Optional[Callable[[Exception, int], None]] = None,
        **kwargs
    ) -> Any:
        """Execute an async function with retry logic.

        Args:
            func: Async function to execute
            *args: Positional arguments for func
            operation_id: Label used in log messages
            on_retry: Callback called before each retry (error, attempt_number)
            **kwargs: Keyword arguments for func

        Returns:
            Result of func

        Raises:
            TranslationFailedError: If the error is not retryable or all
                attempts are exhausted
        """
        op_id = operation_id or getattr(func, '__name__', 'operation')
        max_attempts = max(1, self.config.max_attempts)
        attempt = 0

        while True:
            attempt += 1
            try:
                result = await func(*args, **kwargs)
                if attempt > 1:
                    self.logger.info(f"Operation {op_id} succeeded after {attempt} attempts")
                return result

            except self.retryable as error:
                if attempt >= max_attempts:
                    self.logger.error(
                        f"Retry exhausted for {op_id} after {attempt} attempts: {error}"
                    )
                    raise TranslationFailedError(
                        f"Translation failed after {attempt} attempts: {error.message}",
                        original_error=error,
                        attempts=attempt
                    ) from error

                delay = self.calculate_delay(attempt, error)
                self.logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed for {op_id}: "
                    f"{type(error).__name__}: {error.message}. "
                    f"Retrying in {delay:.2f}s..."
                )
                if on_retry:
                    on_retry(error, attempt)
                if delay > 0:
                    await self._sleep(delay)

            except TranslationFailedError:
                raise

            except Exception as error:
                self.logger.error(f"Non-retryable error in {op_id}: {error}")
                raise TranslationFailedError(
                    f"Translation failed: {getattr(error, 'message', str(error))}",
                    original_error=error,
                    attempts=attempt
                ) from error
