"""
Bounded fixed-delay retry policies built on tenacity.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Tuple, Type

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .errors import RetryableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry up to `attempts` times in total, sleeping `delay` seconds in between."""
    attempts: int
    delay: float = 0.0
    retry_on: Tuple[Type[BaseException], ...] = (RetryableError,)

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    def retrying(self, log: logging.Logger = logger) -> AsyncRetrying:
        """Create a tenacity controller for this policy. The last error is re-raised."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.delay),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=before_sleep_log(log, logging.DEBUG),
            reraise=True,
        )

    async def call(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """Await `func(*args, **kwargs)` under this policy."""
        return await self.retrying()(func, *args, **kwargs)


@dataclass(frozen=True)
class EmptyPagePolicy:
    """How often an empty signature page is re-requested at the same cursor."""
    max_retries: int = 10
    delay: float = 0.0

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
