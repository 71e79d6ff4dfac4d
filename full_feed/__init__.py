"""Full feed proxy: RSS feeds with the full content of each article."""

from .cache import CacheStore, MemoryCacheStore, SQLiteCacheStore
from .config import ProxyConfig
from .feeds import Feed, FeedEntry, parse_feed, serialize_feed
from .fetcher import ContentFetcher
from .processor import FeedProcessor
from .service import FullFeedService

__version__ = "1.0.0"

__all__ = [
    "CacheStore",
    "ContentFetcher",
    "Feed",
    "FeedEntry",
    "FeedProcessor",
    "FullFeedService",
    "MemoryCacheStore",
    "ProxyConfig",
    "SQLiteCacheStore",
    "parse_feed",
    "serialize_feed",
]
