"""
StreamWaves Caching Layer

Provides a time-bounded response cache for proxied IPTV API calls.
"""

from streamwaves.cache.base import CacheBackend, CacheConfig, CacheStats, build_cache_key
from streamwaves.cache.memory import CacheEntry, MemoryCache

__all__ = [
    "CacheBackend",
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "MemoryCache",
    "build_cache_key",
]
