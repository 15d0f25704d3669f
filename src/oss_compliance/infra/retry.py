from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: ``base_delay * 2**attempt`` seconds after attempt ``attempt``."""

    max_retries: int = 2
    base_delay: float = 1.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: tuple[type[BaseException], ...] = (),
    should_retry: Optional[Callable[[T], bool]] = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    on_retry: Optional[Callable[[int, float, Any], None]] = None,
) -> T:
    """Call ``fn`` until it succeeds or the policy is exhausted.

    Args:
        fn: Zero-argument coroutine factory, called once per attempt
        policy: Retry count and backoff
        retry_on: Exception types that trigger a retry; the last one is
            re-raised when attempts run out
        should_retry: Predicate on a returned value; when it still holds on
            the final attempt that value is returned as-is
        sleep: Awaitable sleep, injectable for tests
        on_retry: Called as ``on_retry(attempt, delay, outcome)`` before each wait

    Returns:
        The first accepted result, or the last result once retries run out
    """
    attempt = 0
    while True:
        try:
            result = await fn()
        except retry_on as e:
            if attempt >= policy.max_retries:
                raise
            outcome: Any = e
        else:
            if should_retry is None or attempt >= policy.max_retries or not should_retry(result):
                return result
            outcome = result

        delay = policy.delay(attempt)
        if on_retry is not None:
            on_retry(attempt, delay, outcome)
        await sleep(delay)
        attempt += 1
