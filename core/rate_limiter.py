# core/rate_limiter.py
"""
Windowed rate limiting keyed by client address

Counters live in an injectable store:
- MemoryCounterStore for a single process, with a pluggable clock
- RedisCounterStore when several workers must share the same counters
"""

import math
import time
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import redis

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    """Outcome of a single counter hit"""
    allowed: bool
    limit: int
    current: int
    remaining: int
    reset_in: int


class MemoryCounterStore:
    """
    Process-local fixed-window counters

    Each key holds (count, expires_at). A key is created on its first hit and
    starts a fresh window once its expiry has passed.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, purge_interval: float = 60):
        self.clock = clock
        self.purge_interval = purge_interval
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._next_purge = clock() + purge_interval

    def __len__(self):
        return len(self._counters)

    def incr(self, key: str, window_seconds: int) -> Tuple[int, float]:
        """Increment ``key`` and return (count, seconds until reset)"""
        with self._lock:
            now = self.clock()
            if now >= self._next_purge:
                self._purge(now)
            count, expires_at = self._counters.get(key, (0, 0.0))
            if expires_at <= now:
                count, expires_at = 0, now + window_seconds
            count += 1
            self._counters[key] = (count, expires_at)
            return count, expires_at - now

    def purge_expired(self) -> int:
        """Drop expired keys, returns how many were removed"""
        with self._lock:
            return self._purge(self.clock())

    def _purge(self, now: float) -> int:
        # Caller holds the lock
        expired = [key for key, (_, expires_at) in self._counters.items() if expires_at <= now]
        for key in expired:
            del self._counters[key]
        self._next_purge = now + self.purge_interval
        if expired:
            logger.debug(f"Purged {len(expired)} expired rate limit counters")
        return len(expired)


class RedisCounterStore:
    """Fixed-window counters shared through Redis"""

    def __init__(self, redis_client: redis.Redis, prefix: str = 'rate_limit'):
        self.redis_client = redis_client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> 'RedisCounterStore':
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return cls(client, **kwargs)

    def incr(self, key: str, window_seconds: int) -> Tuple[int, float]:
        redis_key = f"{self.prefix}:{key}"

        # INCR and EXPIRE NX run in one MULTI/EXEC so concurrent hits serialize
        pipe = self.redis_client.pipeline(transaction=True)
        pipe.incr(redis_key)
        pipe.expire(redis_key, window_seconds, nx=True)
        pipe.ttl(redis_key)
        count, _, ttl = pipe.execute()

        if ttl is None or ttl < 0:
            ttl = window_seconds
        return int(count), float(ttl)


class RateLimiter:
    """
    A named limit of ``limit`` hits per ``window_seconds`` for each key

    Keys are namespaced by limiter name so that two limiters sharing a store
    keep independent windows.
    """

    def __init__(self, name: str, limit: int, window_seconds: int, message: str, store):
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self.store = store

    def hit(self, key: str) -> RateLimitResult:
        """
        Count one request for ``key``

        Args:
            key: Client identifier, usually the remote address

        Returns:
            RateLimitResult describing whether the request is allowed
        """
        current, reset_in = self.store.incr(f"{self.name}:{key}", self.window_seconds)
        return RateLimitResult(
            allowed=current <= self.limit,
            limit=self.limit,
            current=current,
            remaining=max(0, self.limit - current),
            reset_in=max(0, math.ceil(reset_in)),
        )


def create_counter_store(storage_url: str = None):
    """Build the counter store named by ``storage_url`` (memory when empty)"""
    if storage_url:
        logger.info("Rate limit counters stored in Redis")
        return RedisCounterStore.from_url(storage_url)
    logger.info("Rate limit counters stored in process memory")
    return MemoryCounterStore()
