"""Exponential backoff around fallible async operations.

retry_with_backoff invokes an operation up to `max_attempts` times. After a
failed attempt n (1-based) that is not the last, it waits
min(base_delay * 2 ** (n - 1), max_delay) before retrying: 1s, 2s, 4s, ...
capped at 10s with the defaults. The last failure is re-raised.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from argo_assistant.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and delay bounds (milliseconds)."""
    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay_ms=settings.RETRY_BASE_DELAY_MS,
            max_delay_ms=settings.RETRY_MAX_DELAY_MS,
        )

    def delay_ms(self, attempt: int) -> int:
        """Delay after failed attempt number `attempt` (1-based)."""
        return min(self.base_delay_ms * 2 ** (attempt - 1), self.max_delay_ms)


@dataclass
class RetryAttempt:
    """A failed attempt, as reported to the optional on_retry hook."""
    attempt: int
    delay_ms: int
    error: BaseException


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_retry: Optional[Callable[[RetryAttempt], None]] = None,
) -> T:
    """Await fn(), retrying with exponential backoff on any exception.

    Args:
        fn: Zero-argument coroutine factory; called once per attempt.
        policy: Attempt/delay configuration (defaults to RetryPolicy()).
        sleep: Awaitable sleep taking seconds (injectable for tests).
        on_retry: Optional hook invoked before each backoff sleep.

    Returns:
        The first successful result.

    Raises:
        Exception: Whatever the final attempt raised.
    """
    policy = policy or RetryPolicy()
    attempts = max(1, policy.max_attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except Exception as e:
            if attempt == attempts:
                raise
            delay = policy.delay_ms(attempt)
            logger.warning("Attempt %d failed, retrying in %dms... Error: %s", attempt, delay, e)
            if on_retry is not None:
                on_retry(RetryAttempt(attempt=attempt, delay_ms=delay, error=e))
            await sleep(delay / 1000.0)
    raise RuntimeError("unreachable")  # pragma: no cover
