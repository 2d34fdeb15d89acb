import time
from collections import defaultdict
from threading import Lock
from typing import AbstractSet, Any, Dict, Optional

from fastapi import Request

from school_mgmt.core.logging import logger


def client_address(request: Request, trusted_proxies: AbstractSet[str] = frozenset()) -> str:
    """
    Source address of a request.

    X-Forwarded-For is only read when the direct peer is one of
    ``trusted_proxies``; the nearest hop that is not itself a trusted proxy
    is taken as the client.
    """
    peer = request.client.host if request.client else "unknown"
    if peer not in trusted_proxies:
        return peer

    forwarded_for = request.headers.get('X-Forwarded-For')
    if not forwarded_for:
        return peer

    hops = [hop.strip() for hop in forwarded_for.split(',') if hop.strip()]
    for hop in reversed(hops):
        if hop not in trusted_proxies:
            return hop
    return hops[0] if hops else peer


class RateLimiter:
    """
    Thread-safe fixed-window rate limiter kept in process memory.
    """

    def __init__(
        self,
        max_requests: int = 100,
        time_window: int = 900,
        cleanup_interval: int = 3600
    ):
        """
        Args:
            max_requests (int): Maximum number of requests allowed in the time window
            time_window (int): Time window in seconds
            cleanup_interval (int): How often to clean up expired entries (seconds)
        """
        if max_requests <= 0 or time_window <= 0:
            raise ValueError("max_requests and time_window must be positive")

        self.max_requests = max_requests
        self.time_window = time_window
        self._buckets: Dict[str, Dict[str, Any]] = defaultdict(dict)
        self._last_cleanup = time.time()
        self._cleanup_interval = cleanup_interval
        self._lock = Lock()

    def _cleanup_expired(self, current_time: float) -> None:
        """Remove expired buckets so idle clients do not accumulate."""
        if current_time - self._last_cleanup < self._cleanup_interval:
            return

        with self._lock:
            expired_keys = [
                key for key, bucket in self._buckets.items()
                if bucket.get('reset_time', 0) < current_time
            ]
            for key in expired_keys:
                del self._buckets[key]

            self._last_cleanup = current_time

    async def check_rate_limit(self, key: str, now: Optional[float] = None) -> bool:
        """
        Count one request against ``key``.

        Returns:
            bool: True if request is allowed, False if rate limit exceeded
        """
        current_time = time.time() if now is None else now
        self._cleanup_expired(current_time)

        with self._lock:
            bucket = self._buckets[key]

            # New key, or the previous window has passed
            if not bucket or current_time >= bucket['reset_time']:
                bucket.update({
                    'count': 0,
                    'reset_time': current_time + self.time_window
                })

            if bucket['count'] >= self.max_requests:
                logger.warning(f"Rate limit exceeded for {key}")
                return False

            bucket['count'] += 1
            return True

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one key, or every key when none is given."""
        with self._lock:
            if key is None:
                self._buckets.clear()
            elif key in self._buckets:
                del self._buckets[key]


class RedisRateLimiter:
    """
    Fixed-window limiter whose counters live in Redis, shared by every
    worker process.
    """

    def __init__(self, redis_client, max_requests: int = 100, time_window: int = 900, prefix: str = "ratelimit"):
        if max_requests <= 0 or time_window <= 0:
            raise ValueError("max_requests and time_window must be positive")
        self.redis = redis_client
        self.max_requests = max_requests
        self.time_window = time_window
        self.prefix = prefix

    async def check_rate_limit(self, key: str, now: Optional[float] = None) -> bool:
        redis_key = f"{self.prefix}:{key}"
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.incr(redis_key)
                pipe.ttl(redis_key)
                count, ttl = await pipe.execute()
            # First hit of the window, or a key left without expiry
            if count == 1 or ttl == -1:
                await self.redis.expire(redis_key, self.time_window)
        except Exception as e:
            logger.error(f"Rate limit check error: {str(e)}", exc_info=True)
            # On error, allow the request but log the issue
            return True

        if count > self.max_requests:
            logger.warning(f"Rate limit exceeded for {key}")
            return False
        return True

    async def reset(self, key: str) -> None:
        await self.redis.delete(f"{self.prefix}:{key}")
