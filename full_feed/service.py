"""End to end full feed production for one feed URL."""
import asyncio
import time
from typing import Optional

import aiohttp
import structlog

from full_feed.errors import FeedError, FeedFetchError
from full_feed.feeds import parse_feed, serialize_feed
from full_feed.fetcher import validate_url
from full_feed.http_client import read_body
from full_feed.metrics import FeedMetrics
from full_feed.processor import FeedProcessor

logger = structlog.get_logger(__name__)


class FullFeedService:
    """Fetches a feed, fills in article bodies and serializes the result.

    The feed document itself is never cached so readers always see the
    latest entries.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        processor: FeedProcessor,
        metrics: Optional[FeedMetrics] = None,
    ):
        self.session = session
        self.processor = processor
        self.metrics = metrics or FeedMetrics()

    async def fetch_feed_document(self, url: str) -> bytes:
        """Download the outer feed document.

        Raises:
            FeedFetchError: On transport failure, timeout or non-2xx status
        """
        try:
            async with self.session.get(url) as response:
                return await read_body(response)
        except asyncio.TimeoutError as e:
            raise FeedFetchError(f"Timed out fetching feed {url}", url) from e
        except aiohttp.ClientResponseError as e:
            raise FeedFetchError(
                f"HTTP {e.status} fetching feed {url}", url, {"status": e.status}
            ) from e
        except (aiohttp.ClientError, ValueError) as e:
            raise FeedFetchError(f"Failed to fetch feed {url}: {e}", url) from e

    async def build(self, url: str) -> bytes:
        """Produce the full content RSS document for the feed at ``url``.

        Raises:
            InvalidURLError: If ``url`` is not a valid absolute URL
            FeedFetchError: If the feed cannot be downloaded
            FeedParseError: If the feed cannot be parsed
        """
        validate_url(url)
        logger.info("feed_fetch_started", url=url)
        start = time.perf_counter()

        try:
            document = await self.fetch_feed_document(url)
            feed = parse_feed(document)
        except FeedError as e:
            self.metrics.feed_failure.inc()
            logger.error("feed_failed", url=url, error=e.message)
            raise

        feed = await self.processor.process(feed)
        rss = serialize_feed(feed)

        self.metrics.feed_success.inc()
        self.metrics.feed_process_time.observe(time.perf_counter() - start)
        return rss
