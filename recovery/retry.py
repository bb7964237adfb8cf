"""Retry wrapper with exponential backoff for structured failures."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional, TypeVar

from config import DEFAULT_BACKOFF_MULTIPLIER, RetryPolicy, RuntimeConfig
from errors import ErrorCategory, ErrorContext, StructuredError

from .factory import create_structured_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, StructuredError], None]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class RetryOptions:
    """How many times to retry and how long to wait between attempts."""

    max_retries: int
    delay_ms: int
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER
    on_retry: Optional[RetryCallback] = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("backoff_multiplier must be > 0")

    @classmethod
    def from_error(
        cls,
        error: StructuredError,
        config: Optional[RuntimeConfig] = None,
        *,
        on_retry: Optional[RetryCallback] = None,
    ) -> "RetryOptions":
        """Options seeded from the advisory defaults carried by *error* (no retries if none).

        The backoff multiplier comes from *config* when one is given.
        """
        return cls(
            max_retries=error.max_retries or 0,
            delay_ms=error.retry_delay_ms or 0,
            backoff_multiplier=config.backoff_multiplier if config else DEFAULT_BACKOFF_MULTIPLIER,
            on_retry=on_retry,
        )

    def delay_for_attempt(self, attempt: int) -> float:
        """Milliseconds to wait after failed *attempt* (1-indexed)."""
        return self.delay_ms * (self.backoff_multiplier ** (attempt - 1))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    options: RetryOptions,
    context: Optional[ErrorContext] = None,
    *,
    retry_policies: Optional[Mapping[ErrorCategory, RetryPolicy]] = None,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Run *operation*, retrying retryable failures with exponential backoff.

    Raises the final ``StructuredError`` (chained to the original exception)
    once the failure is not retryable or ``options.max_retries`` retries have
    been spent. ``asyncio.CancelledError`` is never caught, so cancelling the
    calling task during an attempt or a backoff wait stops the loop.
    """

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            error = create_structured_error(exc, context, retry_policies=retry_policies)

            if not error.retryable or attempt > options.max_retries:
                raise error from exc

            wait_ms = options.delay_for_attempt(attempt)
            logger.warning(
                "Retrying after error: attempt=%d max_retries=%d wait_ms=%.0f code=%s category=%s",
                attempt,
                options.max_retries,
                wait_ms,
                error.code.value,
                error.category.value,
            )

            if options.on_retry is not None:
                try:
                    options.on_retry(attempt, error)
                except Exception:
                    logger.exception("on_retry callback failed; continuing retry loop")

            await sleep(wait_ms / 1000)
            attempt += 1


__all__ = ["RetryCallback", "RetryOptions", "with_retry"]
