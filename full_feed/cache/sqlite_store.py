"""SQLite cache store for article content."""
import asyncio
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Optional

import structlog

from full_feed.cache.store import CacheEntry, CacheStore
from full_feed.errors import CacheStoreError

logger = structlog.get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS content_cache (
    key TEXT PRIMARY KEY,
    content BLOB NOT NULL,
    expires_at REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_content_cache_expires_at ON content_cache (expires_at);
"""


class SQLiteCacheStore(CacheStore):
    """On-disk cache store backed by a single SQLite table.

    Each get and put is one statement, so readers never observe a partially
    written entry. Blocking sqlite calls run in a worker thread.
    """

    def __init__(self, db_path: str, timer: Callable[[], float] = time.time):
        """Initialize SQLite store.

        Args:
            db_path: Path of the database file, or ":memory:"
            timer: Clock returning epoch seconds
        """
        self.db_path = db_path
        self._timer = timer
        self._lock = threading.Lock()

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        with self._conn:
            self._conn.executescript(SCHEMA)
        logger.debug("sqlite_cache_opened", db_path=db_path)

    def _get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            row = self._conn.execute(
                "SELECT content, expires_at FROM content_cache WHERE key = ? AND expires_at > ?",
                (key, self._timer()),
            ).fetchone()
        if row is None:
            return None
        return CacheEntry(key=key, content=bytes(row[0]), expires_at=row[1])

    def _put(self, key: str, content: bytes, ttl: float) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO content_cache (key, content, expires_at) VALUES (?, ?, ?)",
                (key, sqlite3.Binary(content), self._timer() + ttl),
            )

    def purge_expired(self) -> int:
        """Delete expired rows.

        Returns:
            Number of rows removed
        """
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "DELETE FROM content_cache WHERE expires_at <= ?", (self._timer(),)
            )
        return cursor.rowcount

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            return await asyncio.to_thread(self._get, key)
        except sqlite3.Error as e:
            logger.error("sqlite_cache_read_failed", key=key, error=str(e))
            raise CacheStoreError(f"Failed to read cache entry: {e}", {"key": key}) from e

    async def put(self, key: str, content: bytes, ttl: float) -> None:
        try:
            await asyncio.to_thread(self._put, key, content, ttl)
        except sqlite3.Error as e:
            logger.error("sqlite_cache_write_failed", key=key, error=str(e))
            raise CacheStoreError(f"Failed to write cache entry: {e}", {"key": key}) from e

    async def close(self) -> None:
        removed = await asyncio.to_thread(self.purge_expired)
        with self._lock:
            self._conn.close()
        logger.debug("sqlite_cache_closed", db_path=self.db_path, purged=removed)
