"""Metrics collection for the full feed proxy.

This module provides metrics tracking functionality using Prometheus client.
Metric groups take an explicit registry so tests can use a fresh one.
"""

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram


def _existing(registry: CollectorRegistry, name: str):
    return registry._names_to_collectors.get(name)


class ContentMetrics:
    """Metrics for article acquisition and the content cache.

    Tracks cache hits, misses, writes, compression ratios, and fetch outcomes.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize content metrics.

        Args:
            registry: Prometheus registry to use for metrics
        """

        def create_counter(name: str, help_text: str) -> Counter:
            return _existing(registry, name + "_total") or Counter(
                name, help_text, registry=registry
            )

        def create_gauge(name: str, help_text: str) -> Gauge:
            return _existing(registry, name) or Gauge(name, help_text, registry=registry)

        self.cache_hits = create_counter("content_cache_hits", "Number of cache hits")
        self.cache_misses = create_counter("content_cache_misses", "Number of cache misses")
        self.cache_writes = create_counter("content_cache_writes", "Number of cache writes")
        self.cache_errors = create_counter(
            "content_cache_errors", "Number of cache read, write or decode errors"
        )
        self.compression_ratio = create_gauge(
            "content_cache_compression_ratio",
            "Ratio of compressed to uncompressed size of the last cached article",
        )
        self.articles_fetched = create_counter(
            "articles_fetched", "Number of articles downloaded and converted"
        )
        self.article_failures = create_counter(
            "article_failures", "Number of articles that could not be acquired"
        )


class FeedMetrics:
    """Metrics for whole feed requests."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize feed metrics.

        Args:
            registry: Prometheus registry to use for metrics
        """

        def create_counter(name: str, help_text: str) -> Counter:
            return _existing(registry, name + "_total") or Counter(
                name, help_text, registry=registry
            )

        self.feed_process_time = _existing(registry, "feed_process_seconds") or Histogram(
            "feed_process_seconds",
            "Time spent producing a full feed",
            buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
            registry=registry,
        )
        self.feed_success = create_counter(
            "feed_process_success", "Number of feeds transformed successfully"
        )
        self.feed_failure = create_counter(
            "feed_process_failure", "Number of feed requests that failed"
        )


__all__ = ["ContentMetrics", "FeedMetrics"]
