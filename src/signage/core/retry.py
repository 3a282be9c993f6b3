"""Backoff retries for calls that leave the process.

Only transport failures (refused connections, timeouts, dropped sockets)
are retried. An HTTP error status is a real answer from the other side
and goes straight back to the caller.
"""

import asyncio
import functools
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, ParamSpec, TypeVar

import httpx

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """How many times to try and how long to wait in between.

    The wait before retry ``n`` is ``base_delay * 2**n`` capped at
    ``max_delay``; with ``jitter`` it is scaled into the upper half of
    that range so several players do not hammer the server in step.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: bool = True
    retry_on: tuple[type[BaseException], ...] = field(
        default_factory=lambda: (httpx.TransportError, ConnectionError, TimeoutError)
    )

    def delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay * 2**attempt, self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.5, 1.0)
        return delay


# Weather API, snowfall page and the player's display fetch
UPSTREAM_RETRY_CONFIG = RetryConfig(max_attempts=2, base_delay=1.0, max_delay=5.0)


def _next_delay(cfg: RetryConfig, name: str, attempt: int, exc: BaseException) -> float | None:
    """Seconds to wait before the next attempt, or None when out of attempts."""
    if attempt + 1 >= cfg.max_attempts:
        logger.error("%s gave up after %d attempts: %s", name, cfg.max_attempts, exc)
        return None
    delay = cfg.delay_for(attempt)
    logger.warning(
        "%s failed (%s), attempt %d/%d, retrying in %.1fs",
        name,
        type(exc).__name__,
        attempt + 1,
        cfg.max_attempts,
        delay,
    )
    return delay


def retry(config: RetryConfig | None = None) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Retry a blocking function, sleeping between attempts."""
    cfg = config or RetryConfig()

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except cfg.retry_on as exc:
                    delay = _next_delay(cfg, func.__qualname__, attempt, exc)
                    if delay is None:
                        raise
                time.sleep(delay)
                attempt += 1

        return wrapper

    return decorator


def async_retry(
    config: RetryConfig | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Coroutine flavour of :func:`retry`; waits with ``asyncio.sleep``."""
    cfg = config or RetryConfig()

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except cfg.retry_on as exc:
                    delay = _next_delay(cfg, func.__qualname__, attempt, exc)
                    if delay is None:
                        raise
                await asyncio.sleep(delay)
                attempt += 1

        return wrapper

    return decorator
