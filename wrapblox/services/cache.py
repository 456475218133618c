"""
CacheManager - Async-compatible response cache keyed by request fingerprint.

Features:
- Memory-based cache with oldest-first eviction at capacity
- TTL (Time To Live) for cache entries, checked at read time
- Invalidation by exact fingerprint or by fingerprint prefix
- Safe for concurrent async access
"""

import asyncio
import copy
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Generic, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """
    A single cache entry. Entries are replaced, never updated.

    Values are copied on the way in and out, so callers never share them.
    """

    fingerprint: str
    data: T
    stored_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if entry is past its TTL."""
        return now >= self.expires_at


class CacheManager:
    """
    Async-compatible cache manager with a single default TTL.

    Usage:
        cache = CacheManager(max_size=1000)

        # Try to get from cache
        hit, data = await cache.get(fingerprint)
        if hit:
            return data

        # Fetch fresh data and cache it
        data = await fetch_data()
        await cache.put(fingerprint, data)
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: timedelta = timedelta(minutes=5),
        debug: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._debug = debug
        self._clock = clock
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    @property
    def default_ttl(self) -> timedelta:
        return self._default_ttl

    async def get(self, fingerprint: str) -> tuple[bool, Any]:
        """
        Get value from cache.

        Returns (True, value) for a live entry and (False, None) otherwise.
        An expired entry counts as a miss and is dropped.
        """
        async with self._lock:
            entry = self._memory.get(fingerprint)
            if entry is None:
                self._stats.misses += 1
                self._log(f"MISS: {fingerprint[:80]}")
                return False, None

            if entry.is_expired(self._clock()):
                del self._memory[fingerprint]
                self._stats.misses += 1
                self._log(f"EXPIRED: {fingerprint[:80]}")
                return False, None

            self._stats.hits += 1
            self._log(f"HIT: {fingerprint[:80]}")
            return True, copy.deepcopy(entry.data)

    async def put(
        self,
        fingerprint: str,
        data: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """
        Store a value, replacing any existing entry for the fingerprint.

        Args:
            fingerprint: Request fingerprint
            data: Decoded response to cache
            ttl: Time to live (uses default if not specified)
        """
        if ttl is None:
            ttl = self._default_ttl
        now = self._clock()
        entry = CacheEntry(
            fingerprint=fingerprint,
            data=copy.deepcopy(data),
            stored_at=now,
            expires_at=now + ttl.total_seconds(),
        )

        async with self._lock:
            if len(self._memory) >= self._max_size and fingerprint not in self._memory:
                self._evict_oldest()

            self._memory[fingerprint] = entry
            self._log(f"SET: {fingerprint[:80]} (TTL: {ttl.total_seconds()}s)")

    async def delete(self, fingerprint: str) -> bool:
        """Delete a specific fingerprint from cache."""
        async with self._lock:
            if fingerprint in self._memory:
                del self._memory[fingerprint]
                self._log(f"DELETE: {fingerprint[:80]}")
                return True
            return False

    async def invalidate(self, prefix: str) -> int:
        """
        Invalidate the entry for a fingerprint and every entry it prefixes.

        Args:
            prefix: Exact fingerprint or fingerprint prefix

        Returns:
            Number of entries invalidated
        """
        async with self._lock:
            keys_to_delete = [k for k in self._memory if k.startswith(prefix)]
            for key in keys_to_delete:
                del self._memory[key]

            if keys_to_delete:
                self._log(
                    f"INVALIDATE: {len(keys_to_delete)} entries matching '{prefix}'"
                )

            return len(keys_to_delete)

    async def clear(self) -> None:
        """Clear all cache entries."""
        async with self._lock:
            count = len(self._memory)
            self._memory.clear()
            self._log(f"CLEAR: {count} entries removed")

    async def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns count of removed entries."""
        async with self._lock:
            now = self._clock()
            expired_keys = [k for k, v in self._memory.items() if v.is_expired(now)]
            for key in expired_keys:
                del self._memory[key]

            if expired_keys:
                self._log(f"CLEANUP: {len(expired_keys)} expired entries removed")

            return len(expired_keys)

    def _evict_oldest(self) -> None:
        """Evict the oldest entry. Caller holds the lock."""
        if not self._memory:
            return

        now = self._clock()
        expired = [k for k, v in self._memory.items() if v.is_expired(now)]
        if expired:
            for key in expired:
                del self._memory[key]
            self._stats.evictions += len(expired)
            return

        oldest_key = min(
            self._memory.keys(),
            key=lambda k: self._memory[k].stored_at,
        )
        del self._memory[oldest_key]
        self._stats.evictions += 1
        self._log(f"EVICT: {oldest_key[:80]}")

    def __len__(self) -> int:
        return len(self._memory)

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._memory)
        self._stats.max_size = self._max_size
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[CacheManager] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
