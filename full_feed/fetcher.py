"""Article content acquisition with a compressed, time-bounded cache."""
import asyncio
from typing import Callable, Optional
from urllib.parse import urlparse

import aiohttp
import structlog

from full_feed.cache import codec
from full_feed.cache.store import CacheStore, cache_key
from full_feed.content import html_to_markdown, render_article
from full_feed.errors import CacheStoreError, CorruptDataError, FetchError, InvalidURLError
from full_feed.http_client import read_text
from full_feed.metrics import ContentMetrics

logger = structlog.get_logger(__name__)

DEFAULT_TTL = 60.0

ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: str) -> str:
    """Validate that ``url`` is an absolute http(s) URL.

    Raises:
        InvalidURLError: If the URL is malformed or relative
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError(str(url))
    try:
        parsed = urlparse(url)
        # accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidURLError(url, {"reason": str(e)}) from e
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.hostname:
        raise InvalidURLError(url)
    return url


class ContentFetcher:
    """Fetches article content through the cache.

    On a miss the article is downloaded, converted, compressed and stored; the
    stored bytes are then decompressed so hits and misses share one read path.
    Concurrent misses for the same URL are not de-duplicated: each one
    downloads and the last write wins.

    An entry that fails to decompress or render is left in the store, so
    requests for that URL keep failing with FetchError until it expires.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        store: CacheStore,
        ttl: float = DEFAULT_TTL,
        transform: Callable[[str], str] = html_to_markdown,
        postprocess: Callable[[str], str] = render_article,
        metrics: Optional[ContentMetrics] = None,
    ):
        """Initialize content fetcher.

        Args:
            session: Client session used for article downloads
            store: Cache store holding compressed content
            ttl: Seconds a freshly cached article stays valid
            transform: Converts raw article HTML into the cached text
            postprocess: Applied to the decompressed text on every call
            metrics: Metrics group, defaults to one on the global registry
        """
        self.session = session
        self.store = store
        self.ttl = ttl
        self.transform = transform
        self.postprocess = postprocess
        self.metrics = metrics or ContentMetrics()

    async def fetch_content(self, url: str) -> str:
        """Return the processed content of the article at ``url``.

        Raises:
            InvalidURLError: If the URL is not a valid absolute URL
            FetchError: If the article cannot be acquired
        """
        validate_url(url)
        key = cache_key(url)

        try:
            entry = await self.store.get(key)
        except CacheStoreError as e:
            self.metrics.cache_errors.inc()
            raise FetchError(f"Cache read failed for {url}", url=url, cause=e) from e

        if entry is not None:
            self.metrics.cache_hits.inc()
            logger.debug("content_cache_hit", url=url, key=key)
            data = entry.content
        else:
            self.metrics.cache_misses.inc()
            logger.debug("content_cache_miss", url=url, key=key)
            data = await self._fetch_and_store(url, key)

        try:
            content = codec.decompress(data)
        except CorruptDataError as e:
            self.metrics.cache_errors.inc()
            logger.error("content_cache_corrupt", url=url, key=key, error=e.message)
            raise FetchError(f"Cached content for {url} is corrupt", url=url, cause=e) from e

        try:
            return self.postprocess(content)
        except Exception as e:
            logger.error("content_postprocess_failed", url=url, key=key, error=str(e))
            raise FetchError(f"Failed to render {url}: {e}", url=url, cause=e) from e

    async def _fetch_and_store(self, url: str, key: str) -> bytes:
        html = await self._download(url)

        try:
            text = self.transform(html)
        except Exception as e:
            raise FetchError(f"Failed to convert {url}: {e}", url=url, cause=e) from e

        compressed = codec.compress(text)
        try:
            await self.store.put(key, compressed, self.ttl)
        except CacheStoreError as e:
            self.metrics.cache_errors.inc()
            raise FetchError(f"Cache write failed for {url}", url=url, cause=e) from e

        self.metrics.cache_writes.inc()
        self.metrics.articles_fetched.inc()
        if text:
            self.metrics.compression_ratio.set(len(compressed) / len(text.encode("utf-8")))
        logger.info(
            "article_cached", url=url, size=len(text), compressed_size=len(compressed)
        )
        return compressed

    async def _download(self, url: str) -> str:
        try:
            async with self.session.get(url) as response:
                return await read_text(response)
        except asyncio.TimeoutError as e:
            raise FetchError(f"Timed out fetching {url}", url=url, cause=e) from e
        except aiohttp.ClientResponseError as e:
            raise FetchError(
                f"HTTP {e.status} fetching {url}", url=url, cause=e, details={"status": e.status}
            ) from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Transport error fetching {url}: {e}", url=url, cause=e) from e
        except (ValueError, UnicodeDecodeError, LookupError) as e:
            raise FetchError(f"Unreadable response from {url}: {e}", url=url, cause=e) from e
