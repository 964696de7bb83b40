"""Retry with backoff for the quote and news fetchers."""

import asyncio
import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterator
from typing import Any, TypeVar

logger = logging.getLogger("stockpulse.utils.retry")

R = TypeVar("R")


def backoff_delays(
    retries: int, base_delay: float, max_delay: float, exponential: bool
) -> Iterator[float]:
    """Yield the sleep before each retry, doubling from *base_delay* when exponential."""
    delay = base_delay
    for _ in range(retries):
        yield min(delay, max_delay)
        if exponential:
            delay *= 2


def with_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential: bool = True,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """Retry a coroutine function when it raises one of *exceptions*.

    The function runs at most ``max_retries + 1`` times. Each failure but the
    last is logged at WARNING before sleeping; the last one propagates.

    Raises:
        TypeError: If the decorated function is not a coroutine function.
    """

    def decorate(func: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(
                f"@with_retry can only decorate async functions, got {func.__name__!r}"
            )
        total = max_retries + 1

        @functools.wraps(func)
        async def retrying(*args: Any, **kwargs: Any) -> R:
            delays = backoff_delays(max_retries, base_delay, max_delay, exponential)
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as exc:
                    delay = next(delays, None)
                    if delay is None:
                        raise
                    logger.warning(
                        "%s failed (attempt %d/%d): %s. Retrying in %.1fs...",
                        func.__name__, attempt, total, exc, delay,
                    )
                await asyncio.sleep(delay)
                attempt += 1

        return retrying

    return decorate
