"""
In-memory cache implementation with TTL support.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Optional

from streamwaves.cache.base import CacheBackend, CacheConfig

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A single cache entry with metadata."""
    key: str
    value: Any
    expires_at: float

    @property
    def is_expired(self) -> bool:
        """Check if entry has expired."""
        return time.time() >= self.expires_at


class MemoryCache(CacheBackend):
    """
    Thread-safe in-memory cache with TTL support.

    Entries are never evicted for size, only for age: an expired entry
    is dropped when it is next read, or by the background sweep started
    with start(). A set() always replaces the previous entry and restarts
    its TTL, so simultaneous writers resolve as last-writer-wins.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        super().__init__(config)
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._cleanup_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start background cleanup task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        """Stop background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        """Periodically clean up expired entries."""
        while True:
            await asyncio.sleep(self.config.cleanup_interval)
            removed = await self.cleanup_expired()
            if removed:
                logger.debug(f"Cache sweep removed {removed} expired entries")

    async def cleanup_expired(self) -> int:
        """Remove expired entries."""
        with self._lock:
            expired_keys = [
                key for key, entry in self._cache.items()
                if entry.is_expired
            ]
            for key in expired_keys:
                del self._cache[key]
            if self.config.enable_stats:
                self.stats.expirations += len(expired_keys)
                self.stats.entry_count = len(self._cache)

        return len(expired_keys)

    async def get(self, key: str) -> Optional[Any]:
        """Get a value from cache."""
        with self._lock:
            entry = self._cache.get(key)

            if entry is None:
                if self.config.enable_stats:
                    self.stats.misses += 1
                return None

            if entry.is_expired:
                del self._cache[key]
                if self.config.enable_stats:
                    self.stats.misses += 1
                    self.stats.expirations += 1
                    self.stats.entry_count = len(self._cache)
                return None

            if self.config.enable_stats:
                self.stats.hits += 1
            return entry.value

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set a value in cache."""
        if ttl is None:
            ttl = self.config.default_ttl

        entry = CacheEntry(key=key, value=value, expires_at=time.time() + ttl)

        with self._lock:
            self._cache[key] = entry
            if self.config.enable_stats:
                self.stats.sets += 1
                self.stats.entry_count = len(self._cache)

        return True

    async def delete(self, key: str) -> bool:
        """Delete a value from cache."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                if self.config.enable_stats:
                    self.stats.deletes += 1
                    self.stats.entry_count = len(self._cache)
                return True
            return False

    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return False
            if entry.is_expired:
                del self._cache[key]
                return False
            return True

    async def clear(self) -> int:
        """Clear all cache entries."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            if self.config.enable_stats:
                self.stats.entry_count = 0
            return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
