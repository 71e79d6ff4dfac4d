"""Article content cache package.

This package provides:
- Gzip codec for cached content
- Cache store contract with lazy TTL expiry
- In-memory and SQLite store backends
"""

from full_feed.cache.codec import compress, decompress
from full_feed.cache.sqlite_store import SQLiteCacheStore
from full_feed.cache.store import CacheEntry, CacheStore, MemoryCacheStore, cache_key
from full_feed.config import ProxyConfig


def create_cache_store(config: ProxyConfig) -> CacheStore:
    """Create the cache store selected by configuration.

    Args:
        config: ProxyConfig with ``cache_backend``, ``cache_path`` and ``cache_max_size``

    Raises:
        ValueError: If the backend name is unknown
    """
    if config.cache_backend == "memory":
        return MemoryCacheStore(max_size=config.cache_max_size)
    if config.cache_backend == "sqlite":
        return SQLiteCacheStore(config.cache_path)
    raise ValueError(f"Unknown cache backend: {config.cache_backend}")


__all__ = [
    "CacheEntry",
    "CacheStore",
    "MemoryCacheStore",
    "SQLiteCacheStore",
    "cache_key",
    "compress",
    "create_cache_store",
    "decompress",
]
