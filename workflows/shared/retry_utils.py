"""Retry utilities for async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Type, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)

Sleep = Callable[[float], Awaitable[None]]

logger = logging.getLogger(__name__)


def linear_delay(base_delay: float) -> Callable[[BaseException, int], float]:
    """Delay of base_delay x attempt, or the error's retry_after if it has one."""

    def delay(error: BaseException, attempt: int) -> float:
        retry_after = getattr(error, "retry_after", None)
        if retry_after is not None:
            return float(retry_after)
        return base_delay * attempt

    return delay


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    retry_on: Type[E],
    max_retries: int = 3,
    delay: Callable[[BaseException, int], float] = linear_delay(5.0),
    sleep: Optional[Sleep] = None,
    label: str = "operation",
) -> T:
    """Execute an async function, retrying only on retry_on.

    The first call plus up to max_retries retries. Attempt numbers passed to
    delay start at 1. When retries are exhausted the last error is re-raised
    unchanged; any other exception propagates immediately.
    """
    sleep = sleep or asyncio.sleep
    attempt = 0
    while True:
        try:
            return await fn()
        except retry_on as e:
            attempt += 1
            if attempt > max_retries:
                logger.warning(f"{label} failed after {max_retries} retries: {e}")
                raise
            wait_time = delay(e, attempt)
            logger.info(
                f"{label} retry {attempt}/{max_retries} in {wait_time:.1f}s: {e}"
            )
            await sleep(wait_time)
