"""
Bounded retry queue for wallet operations.

Retries an awaitable with exponential backoff. A return value (including
None) ends the retrying; only raised exceptions are retried.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5


class RetryQueue:
    """Runs a coroutine function until it returns or the attempt budget is spent"""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        wait: Optional[Any] = None,
    ) -> None:
        self._max_attempts = max_attempts
        self._wait = wait if wait is not None else wait_exponential(multiplier=1, min=1, max=10)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def add_to_queue(self, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        """
        Call ``fn(*args)`` with retries.

        Args:
            fn: Coroutine function to run
            *args: Positional arguments for fn

        Returns:
            fn's return value

        Raises:
            The last exception raised by fn once attempts are exhausted
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await fn(*args)
        raise RuntimeError("RetryQueue exited without a result")
