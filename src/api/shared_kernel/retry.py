"""Bounded in-call retry with exponential backoff.

Used by adapters that talk to throttled cloud services. Retries happen
inside a single worker invocation only; nothing here persists retry state.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

RetryCallback = Callable[[int, float, Exception], None]


class RetryConfig(BaseModel):
    """Tuneable parameters for retry behaviour."""

    max_retries: int = Field(
        default=3,
        ge=0,
        description="Maximum number of retry attempts before re-raising.",
    )
    base_delay: float = Field(
        default=0.5,
        gt=0.0,
        description="Base delay in seconds for exponential backoff.",
    )
    max_delay: float = Field(
        default=8.0,
        gt=0.0,
        description="Upper bound on delay in seconds.",
    )
    jitter: bool = Field(
        default=True,
        description="When enabled, randomise the delay within [0.5x, 1.5x].",
    )


def compute_delay(attempt: int, config: RetryConfig) -> float:
    """Return the backoff delay for *attempt* given *config*."""
    delay: float = min(config.base_delay * (2**attempt), config.max_delay)
    if config.jitter:
        delay *= random.uniform(0.5, 1.5)  # noqa: S311
    return delay


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    config: RetryConfig,
    retryable_exceptions: tuple[type[Exception], ...],
    on_retry: RetryCallback | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await *fn* with retry and exponential backoff.

    Args:
        fn: Zero-argument coroutine factory. It is invoked from scratch on
            every attempt and must be safe to call repeatedly.
        config: Retry parameters.
        retryable_exceptions: Exception types that trigger a retry. Anything
            else propagates immediately.
        on_retry: Optional callback receiving (attempt, delay, error) before
            each backoff sleep.
        sleep: Awaitable sleep function, injectable for tests.

    Returns:
        The result of the first successful attempt.

    Raises:
        Exception: The last retryable exception once attempts are exhausted.
    """
    last_exception: Exception | None = None

    for attempt in range(config.max_retries + 1):
        try:
            return await fn()
        except retryable_exceptions as exc:
            last_exception = exc
            if attempt >= config.max_retries:
                break
            delay = compute_delay(attempt, config)
            if on_retry is not None:
                on_retry(attempt + 1, delay, exc)
            await sleep(delay)

    assert last_exception is not None  # noqa: S101
    raise last_exception
