"""
Cache backend interface and configuration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class CacheConfig:
    """Cache configuration settings."""

    # Default TTL for entries set without an explicit ttl (seconds)
    default_ttl: int = 300

    # How often the background sweep purges expired entries (seconds)
    cleanup_interval: int = 60

    # Whether to enable cache statistics
    enable_stats: bool = True


@dataclass
class CacheStats:
    """Cache statistics."""
    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    expirations: int = 0
    entry_count: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "deletes": self.deletes,
            "expirations": self.expirations,
            "hit_rate": round(self.hit_rate, 2),
            "entry_count": self.entry_count,
        }


class CacheBackend(ABC):
    """Abstract cache backend interface."""

    def __init__(self, config: Optional[CacheConfig] = None):
        self.config = config or CacheConfig()
        self.stats = CacheStats()

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get a value from cache, None on a miss."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set a value in cache."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a value from cache."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        pass

    @abstractmethod
    async def clear(self) -> int:
        """Clear all cache entries."""
        pass

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        return self.stats


def build_cache_key(
    url: str,
    username: Optional[str] = None,
    password: Optional[str] = None,
    action: Optional[str] = None,
    stream_id: Optional[str] = None,
    limit: Optional[str] = None,
    dns: Optional[str] = None,
) -> str:
    """
    Build the memoization key for a proxied IPTV request.

    Fields are joined positionally, so identical parameter sets always
    produce the same key. Absent fields serialize as an empty string.
    """
    parts = [url, username, password, action, stream_id, limit, dns]
    return "-".join("" if part is None else str(part) for part in parts)
