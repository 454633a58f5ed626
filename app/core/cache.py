"""
Key-value cache backends with TTL support.

This module provides the cache collaborator used by the roster read-through
cache. Two interchangeable backends expose the same surface
(``get`` / ``set`` / ``delete`` / ``scan_prefix`` / ``get_stats``):

- TTLCache: in-memory OrderedDict storage with per-entry expiry and LRU
  eviction (single-server deployment, tests)
- RedisCache: thin adapter over redis-py, selected when REDIS_URL is set

Design decisions:
- Each entry carries its own expiry timestamp, set at write time
- Expired entries are dropped lazily on read and during prefix scans
- Reentrant threading lock (RLock) so sync endpoints running in the threadpool
  and async endpoints on the event loop can share one instance
- Size limit with LRU eviction to prevent unbounded growth
- Hit/miss metrics for monitoring cache effectiveness
- Redis errors are re-raised as CacheUnavailable; callers decide whether to
  degrade
"""

import json
import threading
import time
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import redis

from app.core.config import settings
from app.core.exceptions import CacheUnavailable


class TTLCache:
    """
    Time-To-Live cache with thread-safe synchronous operations and LRU eviction.

    Storage format: OrderedDict[cache_key: (data, stored_at, expires_at)]

    Features:
    - Per-entry TTL (``expires_at`` is None for entries that never expire)
    - Size limit with LRU eviction (oldest entries removed when cache is full)
    - Prefix scan for group invalidation
    - Hit/miss tracking for monitoring
    """

    def __init__(self, max_size: int = 100):
        """
        Initialize TTL cache.

        Args:
            max_size: Maximum number of entries to store (default: 100)
        """
        self._cache: OrderedDict[str, Tuple[Any, float, Optional[float]]] = OrderedDict()
        self._lock = threading.RLock()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    def _is_expired(self, key: str, now: float) -> bool:
        _, _, expires_at = self._cache[key]
        return expires_at is not None and now >= expires_at

    def get(self, key: str) -> Optional[Any]:
        """Get cached value if it exists and has not expired."""
        with self._lock:
            if key in self._cache:
                if self._is_expired(key, time.time()):
                    del self._cache[key]
                else:
                    data, _, _ = self._cache[key]
                    # Move to end to mark as recently used (LRU)
                    self._cache.move_to_end(key)
                    self._hits += 1
                    return data
            self._misses += 1
            return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """
        Store value in cache, expiring after ``ttl_seconds`` if given.

        Implements LRU eviction: if cache is full, removes oldest entry.
        """
        with self._lock:
            # Remove if exists (to update order)
            if key in self._cache:
                del self._cache[key]

            now = time.time()
            expires_at = now + ttl_seconds if ttl_seconds is not None else None
            self._cache[key] = (value, now, expires_at)

            # Evict oldest entries if over limit
            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def delete(self, keys: Iterable[str]) -> int:
        """Remove the given keys. Returns how many were present."""
        removed = 0
        with self._lock:
            for key in keys:
                if key in self._cache:
                    del self._cache[key]
                    removed += 1
        return removed

    def scan_prefix(self, prefix: str) -> List[str]:
        """Return every live key starting with ``prefix``."""
        with self._lock:
            now = time.time()
            expired = [key for key in self._cache if self._is_expired(key, now)]
            for key in expired:
                del self._cache[key]
            return [key for key in self._cache if key.startswith(prefix)]

    def clear(self) -> None:
        """Clear entire cache and reset counters."""
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with cache metrics including:
            - backend: "memory"
            - size: Number of entries in cache
            - max_size: Maximum cache capacity
            - hits: Number of cache hits
            - misses: Number of cache misses
            - hit_rate_percent: Percentage of requests served from cache
            - entries: Details of each cached entry (age, timestamp)
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0

            entries = {}
            for key, (_, stored_at, expires_at) in self._cache.items():
                age = time.time() - stored_at
                entries[key] = {
                    "age_seconds": round(age, 2),
                    "cached_at": datetime.fromtimestamp(stored_at).isoformat(),
                    "expires_in_seconds": (
                        round(expires_at - time.time(), 2) if expires_at is not None else None
                    ),
                }

            return {
                "backend": "memory",
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 2),
                "entries": entries
            }


class RedisCache:
    """
    Redis-backed cache with the same surface as TTLCache.

    Values are stored as JSON so that a hit returns the same structure the
    caller stored (timestamps must already be serialized to strings).
    """

    def __init__(self, client: "redis.Redis"):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        client = redis.Redis.from_url(
            url,
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
            decode_responses=True,
        )
        return cls(client)

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self._client.get(key)
        except redis.RedisError as exc:
            raise CacheUnavailable(str(exc)) from exc
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        payload = json.dumps(value, default=str)
        try:
            if ttl_seconds is None:
                self._client.set(key, payload)
            else:
                self._client.setex(key, int(ttl_seconds), payload)
        except redis.RedisError as exc:
            raise CacheUnavailable(str(exc)) from exc

    def delete(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not keys:
            return 0
        try:
            return self._client.delete(*keys)
        except redis.RedisError as exc:
            raise CacheUnavailable(str(exc)) from exc

    def scan_prefix(self, prefix: str) -> List[str]:
        # SCAN instead of KEYS so large keyspaces don't block the server
        try:
            return list(self._client.scan_iter(match=f"{prefix}*"))
        except redis.RedisError as exc:
            raise CacheUnavailable(str(exc)) from exc

    def get_stats(self) -> Dict[str, Any]:
        try:
            self._client.ping()
        except redis.RedisError as exc:
            return {"backend": "redis", "ok": False, "error": str(exc)}
        return {"backend": "redis", "ok": True}


def create_cache():
    """Build the cache backend selected by settings."""
    if settings.REDIS_URL:
        return RedisCache.from_url(settings.REDIS_URL)
    return TTLCache(max_size=settings.CACHE_MAX_SIZE)


# Global cache instance shared across all requests
global_cache = create_cache()


def get_cache():
    """Return the process-wide cache backend."""
    return global_cache
