"""Fixed-window rate limiting for the MCP tools.

The limiter counts requests per key in fixed windows over a pluggable store:
an in-memory store for a single process and a Redis store shared between
server instances.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable

import redis.asyncio as redis
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from accounthealth_mcp.core.config import HealthEngineSettings, RateLimitBackend
from accounthealth_mcp.core.exceptions import RateLimitError

logger = logging.getLogger(__name__)


class RateLimitStore(ABC):
    """Abstract base class for rate limit counters."""

    @abstractmethod
    async def increment(self, key: str, window_seconds: int) -> tuple[int, float]:
        """Count one request for ``key`` in the current window.

        Returns:
            (requests in the current window including this one,
             seconds until the window resets)
        """
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Drop all counters."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is usable."""
        pass


class InMemoryRateLimitStore(RateLimitStore):
    """In-memory counters (single process only)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, tuple[int, int]] = {}
        self._lock = asyncio.Lock()

    async def increment(self, key: str, window_seconds: int) -> tuple[int, float]:
        async with self._lock:
            now = self._clock()
            window = int(now // window_seconds)
            current, count = self._windows.get(key, (window, 0))
            if current != window:
                count = 0
            count += 1
            self._windows[key] = (window, count)
            retry_after = (window + 1) * window_seconds - now
            return count, retry_after

    async def reset(self) -> None:
        async with self._lock:
            self._windows.clear()

    async def health_check(self) -> bool:
        return True


class RedisRateLimitStore(RateLimitStore):
    """Redis-backed counters shared by every server instance."""

    def __init__(self, redis_url: str, key_prefix: str = "accounthealth:ratelimit:"):
        """Initialize Redis store.

        Args:
            redis_url: Redis connection URL (e.g., "redis://localhost:6379/0")
            key_prefix: Prefix for every counter key
        """
        self.redis = redis.Redis.from_url(redis_url)
        self.key_prefix = key_prefix
        logger.info(f"Redis rate limit store initialized with prefix {key_prefix}")

    @retry(
        retry=retry_if_exception_type((redis.RedisError, ConnectionError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=0.5, max=5),
        reraise=True,
    )
    async def increment(self, key: str, window_seconds: int) -> tuple[int, float]:
        now = time.time()
        window = int(now // window_seconds)
        redis_key = f"{self.key_prefix}{key}:{window}"
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, window_seconds)
            count, _ = await pipe.execute()
        return int(count), (window + 1) * window_seconds - now

    async def reset(self) -> None:
        keys = [key async for key in self.redis.scan_iter(f"{self.key_prefix}*")]
        if keys:
            await self.redis.delete(*keys)

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except (redis.RedisError, ConnectionError) as e:
            logger.error(f"Redis rate limit store health check failed: {e}")
            return False


class RateLimiter:
    """Allow at most ``max_requests`` per key in each window."""

    def __init__(
        self,
        store: RateLimitStore | None = None,
        max_requests: int = 30,
        window_seconds: int = 60,
    ):
        self.store = store or InMemoryRateLimitStore()
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @classmethod
    def from_settings(cls, settings: HealthEngineSettings) -> "RateLimiter":
        """Build a limiter with the configured backend."""
        if settings.rate_limit_backend == RateLimitBackend.REDIS:
            store: RateLimitStore = RedisRateLimitStore(settings.redis_url)
        else:
            store = InMemoryRateLimitStore()
        return cls(
            store,
            max_requests=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )

    async def _hit(self, key: str) -> tuple[bool, float]:
        count, retry_after = await self.store.increment(key, self.window_seconds)
        return count <= self.max_requests, retry_after

    async def check(self, key: str) -> bool:
        """Count a request for ``key``; False once the window is exhausted."""
        allowed, _ = await self._hit(key)
        return allowed

    async def enforce(self, key: str) -> None:
        """Count a request for ``key`` and raise when over the limit.

        Raises:
            RateLimitError: If the current window is exhausted
        """
        allowed, retry_after = await self._hit(key)
        if not allowed:
            logger.warning(
                f"Rate limit exceeded for '{key}'", extra={"request_key": key}
            )
            raise RateLimitError(key, retry_after)

    async def reset(self) -> None:
        await self.store.reset()
