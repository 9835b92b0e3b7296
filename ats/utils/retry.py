"""Async retry decorator with exponential backoff.

Only for idempotent outbound reads (LLM prompts, lookups). Database writes
are never wrapped in this.
"""

import asyncio
import functools
import logging
import random
from typing import Any, Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_async(
    *,
    max_attempts: int | Callable[[], int] = 3,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator: retries the wrapped coroutine function with exponential backoff.

    ``max_attempts`` may be a callable so the limit can follow runtime
    settings.
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempts = max_attempts() if callable(max_attempts) else max_attempts
            attempts = max(1, attempts)
            for attempt in range(1, attempts + 1):
                try:
                    return await fn(*args, **kwargs)
                except retryable as exc:
                    if attempt == attempts:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            fn.__qualname__,
                            attempts,
                            exc,
                        )
                        raise
                    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__,
                        attempt,
                        attempts,
                        exc,
                        delay,
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError("unreachable")

        return wrapper

    return decorator
