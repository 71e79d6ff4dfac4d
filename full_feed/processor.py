"""Replaces feed entry bodies with full article content."""

from typing import Optional

import structlog

from full_feed.errors import ArticleError
from full_feed.feeds import EntryContent, Feed
from full_feed.fetcher import ContentFetcher
from full_feed.metrics import ContentMetrics

logger = structlog.get_logger(__name__)

MAX_ARTICLES = 10


class FeedProcessor:
    """Fetches full content for the leading entries of a feed.

    Entries are handled one at a time in feed order. Only entries that reach
    the fetch call count toward ``max_articles``; entries without a link are
    passed over without being counted. A failed article leaves its entry as
    it was and processing moves on to the next one.
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        max_articles: int = MAX_ARTICLES,
        metrics: Optional[ContentMetrics] = None,
    ):
        """Initialize feed processor.

        Args:
            fetcher: Content fetcher used for each article
            max_articles: Maximum number of articles fetched per feed
            metrics: Metrics group, defaults to the fetcher's
        """
        self.fetcher = fetcher
        self.max_articles = max_articles
        self.metrics = metrics or fetcher.metrics

    async def process(self, feed: Feed) -> Feed:
        """Fill entry bodies of ``feed`` in place and return it."""
        article_count = 0
        failures = 0

        for position, entry in enumerate(feed.entries):
            if article_count >= self.max_articles:
                break

            url = entry.primary_link
            if url is None:
                continue

            article_count += 1
            try:
                body = await self.fetcher.fetch_content(url)
            except ArticleError as e:
                failures += 1
                self.metrics.article_failures.inc()
                logger.warning(
                    "article_fetch_failed",
                    url=url,
                    position=position,
                    error=e.message,
                    category=e.category.value,
                )
                continue

            entry.content = EntryContent(body=body, type="text/html")

        logger.info(
            "feed_processed",
            title=feed.title,
            entries=len(feed.entries),
            articles=article_count,
            failures=failures,
        )
        return feed
