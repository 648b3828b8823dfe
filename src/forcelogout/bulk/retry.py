"""Exponential backoff retry for identity provider calls."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..exceptions import RemoteError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryHandler:
    """Retries a failing coroutine with exponential backoff.

    Every exception is retried; after the final attempt the last exception is
    re-raised unchanged.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 60.0,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """Initialize retry handler.

        Args:
            max_attempts: Total number of attempts, including the first one
            base_delay: Delay in seconds after the first failed attempt
            max_delay: Maximum delay in seconds between attempts
            sleep: Coroutine used to wait between attempts (defaults to asyncio.sleep)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep or asyncio.sleep

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for exponential backoff.

        Args:
            attempt: Index of the attempt that just failed (0-based)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (2**attempt)
        return min(delay, self.max_delay)

    async def execute_with_retry(
        self, operation: Callable[..., Awaitable[T]], *args, **kwargs
    ) -> T:
        """Await ``operation(*args, **kwargs)``, retrying on failure.

        Args:
            operation: Coroutine function to call
            *args: Positional arguments for the operation
            **kwargs: Keyword arguments for the operation

        Returns:
            Result of the first successful attempt

        Raises:
            Exception: The last exception once all attempts are exhausted
        """
        last_exception: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                last_exception = e

                if attempt == self.max_attempts - 1:
                    break

                delay = self.calculate_delay(attempt)
                quota = isinstance(e, RemoteError) and e.is_quota_error
                log = logger.debug if quota else logger.warning
                log(
                    "Retry attempt %d/%d for %s after %.1fs: %s",
                    attempt + 1,
                    self.max_attempts - 1,
                    getattr(operation, "__name__", "operation"),
                    delay,
                    e,
                )
                await self._sleep(delay)

        raise last_exception
