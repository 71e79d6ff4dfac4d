"""Tests for the cache store backends."""

import asyncio
import hashlib

import pytest

from full_feed.cache import create_cache_store
from full_feed.cache.sqlite_store import SQLiteCacheStore
from full_feed.cache.store import CacheEntry, MemoryCacheStore, cache_key
from full_feed.config import ProxyConfig

TTL = 60.0


def test_cache_key_is_sha256_hex():
    url = "https://a.test/1"
    key = cache_key(url)
    assert key == hashlib.sha256(url.encode("utf-8")).hexdigest()
    assert len(key) == 64


def test_cache_key_is_deterministic_and_distinct():
    assert cache_key("https://a.test/1") == cache_key("https://a.test/1")
    assert cache_key("https://a.test/1") != cache_key("https://a.test/2")


@pytest.fixture(params=["memory", "sqlite"])
def store(request, clock, tmp_path):
    if request.param == "memory":
        return MemoryCacheStore(max_size=10, timer=clock)
    return SQLiteCacheStore(str(tmp_path / "cache" / "content.db"), timer=clock)


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(store):
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_put_then_get(store, clock):
    await store.put("k", b"payload", TTL)
    entry = await store.get("k")

    assert isinstance(entry, CacheEntry)
    assert entry.key == "k"
    assert entry.content == b"payload"
    assert entry.expires_at == pytest.approx(clock.now + TTL)


@pytest.mark.asyncio
async def test_entry_expires_at_ttl(store, clock):
    await store.put("k", b"payload", TTL)

    clock.advance(TTL - 1)
    assert await store.get("k") is not None

    clock.advance(1)
    assert await store.get("k") is None


@pytest.mark.asyncio
async def test_put_overwrites_and_resets_expiry(store, clock):
    await store.put("k", b"old", TTL)
    clock.advance(TTL - 10)
    await store.put("k", b"new", TTL)
    clock.advance(30)

    entry = await store.get("k")
    assert entry is not None
    assert entry.content == b"new"


@pytest.mark.asyncio
async def test_expired_entry_can_be_rewritten(store, clock):
    await store.put("k", b"old", TTL)
    clock.advance(TTL + 1)
    assert await store.get("k") is None

    await store.put("k", b"fresh", TTL)
    entry = await store.get("k")
    assert entry.content == b"fresh"


@pytest.mark.asyncio
async def test_memory_store_evicts_least_recently_used(clock):
    store = MemoryCacheStore(max_size=2, timer=clock)
    await store.put("a", b"1", TTL)
    await store.put("b", b"2", TTL)
    await store.get("a")
    await store.put("c", b"3", TTL)

    assert await store.get("a") is not None
    assert await store.get("b") is None
    assert len(store) == 2


@pytest.mark.asyncio
async def test_sqlite_store_persists_across_instances(tmp_path, clock):
    path = str(tmp_path / "content.db")
    first = SQLiteCacheStore(path, timer=clock)
    await first.put("k", b"kept", TTL)
    await first.close()

    second = SQLiteCacheStore(path, timer=clock)
    entry = await second.get("k")
    await second.close()

    assert entry is not None
    assert entry.content == b"kept"


@pytest.mark.asyncio
async def test_sqlite_store_purges_expired_rows(tmp_path, clock):
    store = SQLiteCacheStore(str(tmp_path / "content.db"), timer=clock)
    await store.put("old", b"1", 10)
    await store.put("new", b"2", TTL)
    clock.advance(20)

    assert store.purge_expired() == 1
    assert await store.get("new") is not None
    await store.close()


def test_create_cache_store_selects_backend(tmp_path):
    memory = create_cache_store(ProxyConfig(cache_backend="memory"))
    sqlite = create_cache_store(
        ProxyConfig(cache_backend="sqlite", cache_path=str(tmp_path / "c.db"))
    )

    assert isinstance(memory, MemoryCacheStore)
    assert isinstance(sqlite, SQLiteCacheStore)


@pytest.mark.asyncio
async def test_concurrent_puts_and_gets_see_whole_entries(store):
    payloads = [bytes([i]) * 65536 for i in range(20)]

    async def write(payload):
        await store.put("shared", payload, TTL)

    async def read():
        entry = await store.get("shared")
        return entry.content if entry is not None else None

    operations = []
    for payload in payloads:
        operations.append(write(payload))
        operations.append(read())
    results = await asyncio.gather(*operations)

    reads = [result for result in results if result is not None]
    assert reads
    assert all(content in payloads for content in reads)
    final = await store.get("shared")
    assert final.content in payloads
