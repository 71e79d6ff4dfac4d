"""Content cache store for the full feed proxy.

This module provides the cache store contract used by the content fetcher:
- Keys are SHA-256 fingerprints of article URLs
- Values are compressed content bytes with a per-entry expiry
- Expired entries behave exactly like missing ones (lazy expiry)
"""

import hashlib
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from cachetools import TLRUCache


def cache_key(url: str) -> str:
    """Derive the cache key for an article URL.

    Returns:
        Hex encoded SHA-256 digest of the URL
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    """A single cache entry.

    Attributes:
        key: Cache key (URL fingerprint)
        content: Compressed content bytes
        expires_at: Epoch seconds after which the entry is treated as absent
    """

    key: str
    content: bytes
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheStore(ABC):
    """Key-value store of compressed article content with expiry."""

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key``, or None when missing or expired."""

    @abstractmethod
    async def put(self, key: str, content: bytes, ttl: float) -> None:
        """Store ``content`` under ``key``, replacing any existing entry.

        The expiry is reset to ``ttl`` seconds from the call time.
        """

    async def close(self) -> None:
        """Release any resources held by the store."""


class MemoryCacheStore(CacheStore):
    """Thread-safe in-process store with per-entry TTL and LRU eviction.

    Entries live in a ``cachetools.TLRUCache`` whose time-to-use is taken from
    each entry's own expiry, so different puts may carry different TTLs.
    """

    def __init__(self, max_size: int = 1024, timer: Callable[[], float] = time.time) -> None:
        """Initialize the memory store.

        Args:
            max_size: Maximum number of entries before LRU eviction
            timer: Clock returning epoch seconds
        """
        self._timer = timer
        self._cache: TLRUCache = TLRUCache(
            maxsize=max_size,
            ttu=lambda _key, entry, _now: entry.expires_at,
            timer=timer,
        )
        self._lock = threading.RLock()

    async def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._cache.get(key)
            # TLRUCache expires lazily on its own, but the boundary is checked
            # here too so that now == expires_at is a miss
            if entry is None or entry.is_expired(self._timer()):
                return None
            return entry

    async def put(self, key: str, content: bytes, ttl: float) -> None:
        with self._lock:
            self._cache[key] = CacheEntry(
                key=key, content=bytes(content), expires_at=self._timer() + ttl
            )

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

