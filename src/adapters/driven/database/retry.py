"""Backoff for transient database connection failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

from sqlalchemy import exc as sa_exc

__all__ = ["RETRYABLE_ERRORS", "backoff_delay", "retry"]

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    sa_exc.OperationalError,  # server gone away, refused, too many connections
    sa_exc.InterfaceError,  # driver dropped the connection
    ConnectionError,
    TimeoutError,
)

T = TypeVar("T")
AsyncFn = Callable[..., Awaitable[T]]


def backoff_delay(failed_attempts: int, delay_sec: tuple[float, ...]) -> float:
    """Delay before the next attempt; the last entry repeats once exhausted."""
    if not delay_sec:
        return 0.0
    return delay_sec[min(failed_attempts, len(delay_sec)) - 1]


def retry(
    times: int = 3,
    delay_sec: tuple[float, ...] = (0.5, 1.0, 2.0),
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_ERRORS,
) -> Callable[[AsyncFn[T]], AsyncFn[T]]:
    """Retry an async database call on connection-level failures.

    Syntax errors and unknown tables propagate at once. Bad credentials also
    surface as OperationalError, so keep `times` small.

    Only used for the startup ping; scrapers never retry their queries.

    Args:
        times: Number of attempts (1 = no retry).
        delay_sec: Delays between attempts in seconds.
        retry_on: Exception types worth another attempt.

    Returns:
        Decorator function.

    Example:
        @retry(times=3)
        async def ping(self):
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    """
    if times < 1:
        raise ValueError(f"times must be at least 1 (got: {times})")

    def decorator(func: AsyncFn[T]) -> AsyncFn[T]:
        name = getattr(func, "__qualname__", "database call")

        @wraps(func)
        async def wrapper(*args: object, **kwargs: object) -> T:
            failed = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    failed += 1
                    if failed >= times:
                        logger.debug(f"{name} gave up after {times} attempts: {e}")
                        raise
                    delay = backoff_delay(failed, delay_sec)
                    logger.debug(f"{name} attempt {failed}/{times} failed, retrying in {delay}s: {e}")
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
