"""
Bounded exponential backoff for flaky outbound calls.

    result = await retry_with_backoff(
        lambda: service.generate(prompt),
        is_retryable=lambda e: isinstance(e, ServiceOverloadedError),
    )
    if result is RETRY_EXHAUSTED:
        ...  # degrade

Attempt states: Attempting -> Done (value returned), Backoff -> Attempting
(retryable error, attempts left), Degraded (retryable error, budget spent:
``RETRY_EXHAUSTED`` returned) or Failed (any other error, re-raised as is).
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _RetryExhausted:
    """Sentinel type; use the ``RETRY_EXHAUSTED`` singleton."""

    def __repr__(self) -> str:
        return "RETRY_EXHAUSTED"


RETRY_EXHAUSTED = _RetryExhausted()


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    is_retryable: Callable[[Exception], bool],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Union[T, _RetryExhausted]:
    """
    Run ``operation`` up to ``max_attempts`` times.

    After the n-th failed attempt (n starting at 1) the wait is
    ``base_delay * 2 ** (n - 1)``; there is no wait after the last attempt.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        is_retryable: Decides whether an error is transient
        max_attempts: Total attempts, at least 1
        base_delay: First wait in seconds
        sleep: Awaitable used to wait (injectable for tests)

    Returns:
        The operation's result, or ``RETRY_EXHAUSTED`` if every attempt failed
        with a retryable error.

    Raises:
        Exception: the first non-retryable error, unchanged
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            if attempt == max_attempts:
                logger.warning(f"Giving up after {attempt} attempts: {e}")
                break
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(f"Attempt {attempt}/{max_attempts} failed ({e}); retrying in {delay:.1f}s")
            await sleep(delay)

    return RETRY_EXHAUSTED
