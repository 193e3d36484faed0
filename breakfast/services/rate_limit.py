"""Fixed-window rate limiting for login and QR issuance.

A window opens on the first request of a key and lasts ``window_ms``. Up to
``max_requests`` requests are allowed inside it. Across a window seam a
client can get up to twice the budget.
"""
import math
import threading
from dataclasses import dataclass
from typing import Optional

import redis

from ..errors import RateLimited
from ..logging_config import get_logger
from .clock import Clock

logger = get_logger(__name__)

DEFAULT_WINDOW_MS = 60 * 1000
DEFAULT_MAX_REQUESTS = 30
CLEANUP_THRESHOLD = 500


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: Optional[int] = None


def _retry_after(remaining_ms) -> int:
    return max(1, math.ceil(remaining_ms / 1000))


@dataclass
class _Entry:
    window_start_ms: int
    count: int
    window_ms: int


class MemoryRateLimitStore:
    """Process-local table. Lost on restart."""

    def __init__(self, cleanup_threshold: int = CLEANUP_THRESHOLD):
        self.cleanup_threshold = cleanup_threshold
        self._entries = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._entries)

    def _cleanup(self, now_ms):
        if len(self._entries) <= self.cleanup_threshold:
            return
        # window ended more than two windows ago
        stale = [k for k, e in self._entries.items()
                 if now_ms - (e.window_start_ms + e.window_ms) > 2 * e.window_ms]
        for k in stale:
            del self._entries[k]

    def hit(self, key: str, window_ms: int, max_requests: int, now_ms: int) -> RateLimitDecision:
        with self._lock:
            self._cleanup(now_ms)
            entry = self._entries.get(key)
            if entry is None or now_ms - entry.window_start_ms >= window_ms:
                self._entries[key] = _Entry(now_ms, 1, window_ms)
                return RateLimitDecision(True)
            if entry.count < max_requests:
                entry.count += 1
                return RateLimitDecision(True)
            return RateLimitDecision(False, _retry_after(entry.window_start_ms + window_ms - now_ms))

    def reset(self):
        with self._lock:
            self._entries.clear()


class RedisRateLimitStore:
    """Shared counter for deployments running several worker processes.

    Windows are timed by the Redis server, so ``now_ms`` is not used.
    Requests are allowed while Redis is unreachable.
    """

    def __init__(self, client, prefix: str = 'rl:'):
        self._client = client
        self.prefix = prefix

    def hit(self, key: str, window_ms: int, max_requests: int, now_ms: int) -> RateLimitDecision:
        k = f'{self.prefix}{key}'
        pipe = self._client.pipeline(transaction=True)
        pipe.set(k, 0, px=window_ms, nx=True)
        pipe.incr(k)
        pipe.pttl(k)
        try:
            _, count, ttl_ms = pipe.execute()
        except redis.RedisError as exc:
            logger.warning('rate_limit.redis_unavailable', key=key, error=str(exc))
            return RateLimitDecision(True)
        if int(count) <= max_requests:
            return RateLimitDecision(True)
        ttl_ms = int(ttl_ms)
        return RateLimitDecision(False, _retry_after(ttl_ms if ttl_ms > 0 else window_ms))

    def reset(self):
        for k in self._client.scan_iter(match=f'{self.prefix}*'):
            self._client.delete(k)


def build_rate_limit_store(config):
    backend = (config.get('RATE_LIMIT_BACKEND') or 'memory').lower()
    if backend != 'redis':
        return MemoryRateLimitStore()
    url = config.get('REDIS_URL')
    try:
        client = redis.from_url(url, decode_responses=True)
        # Test connection once; fallback to memory on failure
        client.ping()
        return RedisRateLimitStore(client)
    except redis.RedisError as exc:
        logger.warning('rate_limit.redis_unavailable', error=str(exc))
        return MemoryRateLimitStore()


class RateLimiter:
    def __init__(self, store, clock: Clock):
        self.store = store
        self.clock = clock

    def check(self, client_key, namespace: str = 'default', window_ms: int = DEFAULT_WINDOW_MS,
              max_requests: int = DEFAULT_MAX_REQUESTS) -> RateLimitDecision:
        namespace = (namespace or 'default').strip() or 'default'
        client_key = str(client_key or 'unknown').strip() or 'unknown'
        return self.store.hit(f'{namespace}:{client_key}', window_ms, max_requests, self.clock.now_ms())

    def enforce(self, client_key, namespace: str, window_ms: int, max_requests: int, message=None):
        decision = self.check(client_key, namespace, window_ms, max_requests)
        if not decision.allowed:
            logger.info('rate_limit.denied', namespace=namespace, client=client_key,
                        retry_after=decision.retry_after_seconds)
            raise RateLimited(decision.retry_after_seconds, message)
        return decision
