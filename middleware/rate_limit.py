"""
Rate Limiting

Protects the public product listing from scraping and abuse with a fixed
window counter per client IP.

Features:
- In-memory backend guarded by an asyncio lock (single instance deployments)
- Redis backend using INCR + EXPIRE (works across multiple app instances)
- Limiter object lives on app.state and is injected per request
- Retry-After reported in whole seconds until the window resets

Configuration:
- LISTING_RATE_LIMIT_MAX_REQUESTS: Requests allowed per window (default 60)
- LISTING_RATE_LIMIT_WINDOW_SECONDS: Window length in seconds (default 60)
- RATE_LIMIT_BACKEND: memory | redis
- TRUST_PROXY_HEADERS: key on X-Forwarded-For / X-Real-IP (only behind a proxy that sets them)
"""

import asyncio
import logging
import math
import time
from typing import Callable

from fastapi import Request
from redis.asyncio import Redis

import config
from enums.rate_limit_backend import RateLimitBackend
from exceptions.rate_limit import RateLimitExceededException

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """
    In-memory fixed window rate limiter.

    Each key gets a window that starts with its first request. Counters are
    kept in a plain dict guarded by an asyncio lock, so one instance must be
    shared by all requests of the process (see app.state).

    Usage:
        limiter = FixedWindowRateLimiter(max_requests=60, window_seconds=60)
        is_limited, current, retry_after = await limiter.hit("203.0.113.7")
    """

    # Expired windows are swept once the map grows past this size
    PRUNE_THRESHOLD = 10_000

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str) -> tuple[bool, int, int]:
        """
        Count one request for key.

        Returns:
            Tuple of (is_limited, current_count, retry_after_seconds)
            - retry_after_seconds is 0 unless the request is limited
        """
        async with self._lock:
            now = self._clock()
            window_start, count = self._windows.get(key, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0

            count += 1
            self._windows[key] = (window_start, count)

            if len(self._windows) > self.PRUNE_THRESHOLD:
                self._prune(now)

            if count <= self.max_requests:
                return False, count, 0

            remaining = window_start + self.window_seconds - now
            retry_after = max(1, math.ceil(remaining))
            return True, count, retry_after

    async def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key when None."""
        async with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

    def _prune(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for k in expired:
            del self._windows[k]

    async def close(self) -> None:
        return None


class RedisRateLimiter:
    """
    Redis-based fixed window rate limiter for multi-instance deployments.

    The first INCR of a window sets the key's TTL, so the key itself marks the
    window. If Redis is unreachable the request is let through (fail open).
    """

    def __init__(self, redis: Redis, max_requests: int, window_seconds: int, prefix: str = "rate_limit:listing"):
        self.redis = redis
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def hit(self, key: str) -> tuple[bool, int, int]:
        redis_key = self._key(key)
        try:
            current_count = await self.redis.incr(redis_key)
            if current_count == 1:
                await self.redis.expire(redis_key, self.window_seconds)

            if current_count <= self.max_requests:
                return False, current_count, 0

            ttl = await self.redis.ttl(redis_key)
            if ttl < 0:
                # Key lost its expiry (e.g. crash between INCR and EXPIRE)
                await self.redis.expire(redis_key, self.window_seconds)
                ttl = self.window_seconds
            logger.warning(f"Rate limit exceeded: key={key}, count={current_count}/{self.max_requests}, resets_in={ttl}s")
            return True, current_count, max(1, ttl)

        except Exception as e:
            logger.error(f"Rate limiter error: {e}")
            return False, 0, 0

    async def reset(self, key: str | None = None) -> None:
        if key is None:
            async for redis_key in self.redis.scan_iter(match=f"{self.prefix}:*"):
                await self.redis.delete(redis_key)
        else:
            await self.redis.delete(self._key(key))

    async def close(self) -> None:
        await self.redis.aclose()


def build_listing_rate_limiter() -> FixedWindowRateLimiter | RedisRateLimiter:
    """Create the product listing limiter for the configured backend."""
    if config.RATE_LIMIT_BACKEND == RateLimitBackend.REDIS:
        logger.info(f"Listing rate limiter: redis ({config.LISTING_RATE_LIMIT_MAX_REQUESTS}/"
                    f"{config.LISTING_RATE_LIMIT_WINDOW_SECONDS}s)")
        return RedisRateLimiter(
            Redis.from_url(config.REDIS_URL),
            max_requests=config.LISTING_RATE_LIMIT_MAX_REQUESTS,
            window_seconds=config.LISTING_RATE_LIMIT_WINDOW_SECONDS,
        )
    logger.info(f"Listing rate limiter: memory ({config.LISTING_RATE_LIMIT_MAX_REQUESTS}/"
                f"{config.LISTING_RATE_LIMIT_WINDOW_SECONDS}s)")
    return FixedWindowRateLimiter(
        max_requests=config.LISTING_RATE_LIMIT_MAX_REQUESTS,
        window_seconds=config.LISTING_RATE_LIMIT_WINDOW_SECONDS,
    )


def get_client_ip(request: Request) -> str:
    """
    Client address used as the rate limit key.

    Proxy headers are client-controlled unless a trusted proxy overwrites
    them, so they are only read when TRUST_PROXY_HEADERS is enabled.
    """
    if config.TRUST_PROXY_HEADERS:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


async def enforce_listing_rate_limit(request: Request) -> None:
    """FastAPI dependency for GET /api/products."""
    limiter = request.app.state.listing_rate_limiter
    client_ip = get_client_ip(request)
    is_limited, current_count, retry_after = await limiter.hit(client_ip)
    if is_limited:
        logger.warning(f"Listing rate limit hit: ip={client_ip}, count={current_count}, retry_after={retry_after}s")
        raise RateLimitExceededException(retry_after=retry_after, limit=limiter.max_requests)
