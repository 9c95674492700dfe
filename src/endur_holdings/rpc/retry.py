"""Retry logic with backoff for asynchronous holdings lookups."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig:
    """
    Configuration for retry behavior.

    With ``exponential_base=1.0`` every retry waits ``base_delay`` seconds
    (fixed backoff).

    Parameters
    ----------
    max_retries : int
        Maximum number of retry attempts after the first call
    base_delay : float
        Delay in seconds before the first retry
    max_delay : float
        Maximum delay between retries
    exponential_base : float
        Base for exponential backoff calculation

    """

    def __init__(
        self,
        max_retries: int = 1,
        base_delay: float = 10.0,
        max_delay: float = 30.0,
        exponential_base: float = 1.0,
    ) -> None:
        if max_retries < 0:
            msg = "max_retries must be >= 0"
            raise ValueError(msg)
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base

    def get_delay(self, attempt: int) -> float:
        """
        Calculate delay for a given retry attempt.

        Parameters
        ----------
        attempt : int
            Current attempt number (0-indexed)

        Returns
        -------
        float
            Delay in seconds

        """
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig | None = None,
    **kwargs: Any,
) -> T:
    """
    Await ``func(*args, **kwargs)``, retrying on exceptions.

    Parameters
    ----------
    func : Callable[..., Awaitable[T]]
        Coroutine function to call
    config : RetryConfig | None
        Retry configuration. Uses default config if None.

    Returns
    -------
    T
        Result of the first successful call

    Raises
    ------
    Exception
        The last exception once all attempts are exhausted

    """
    if config is None:
        config = RetryConfig()

    last_exception: Exception | None = None

    for attempt in range(config.max_retries + 1):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            last_exception = e

            # Don't retry on last attempt
            if attempt == config.max_retries:
                break

            delay = config.get_delay(attempt)
            logger.debug(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                getattr(func, "__name__", repr(func)),
                attempt + 1,
                config.max_retries + 1,
                delay,
                e,
            )
            await asyncio.sleep(delay)

    raise last_exception  # type: ignore[misc]

