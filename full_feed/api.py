"""HTTP front-end for the full feed proxy."""

import html
from typing import AsyncIterator, Optional

import structlog
from aiohttp import web
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from full_feed.cache import CacheStore, create_cache_store
from full_feed.config import ProxyConfig
from full_feed.errors import FeedFetchError, FeedParseError, InvalidURLError
from full_feed.fetcher import ContentFetcher
from full_feed.http_client import create_session
from full_feed.metrics import ContentMetrics, FeedMetrics
from full_feed.processor import FeedProcessor
from full_feed.service import FullFeedService

logger = structlog.get_logger(__name__)

CONFIG_KEY = web.AppKey("config", ProxyConfig)
SERVICE_KEY = web.AppKey("service", FullFeedService)

RSS_CONTENT_TYPE = "application/rss+xml"

INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">

<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Full Feed RSS</title>
  <style>
    p.warning {{ color: red; }}
  </style>
</head>

<body>
  <h1>Full Feed RSS</h1>
  <p>Full Feed RSS takes an RSS feed and returns the same feed with the full content of each article.</p>
{message}
  <form action="/">
    <label for="url">Enter the URL of the RSS feed:</label><br>
    <input type="url" id="url" name="url" required><br><br>
    <input type="submit" value="Submit">
  </form>
</body>

</html>
"""


def render_index(message: Optional[str] = None) -> str:
    """Render the form page, with an optional warning message."""
    warning = f'  <p class="warning">{html.escape(message)}</p>\n' if message else ""
    return INDEX_TEMPLATE.format(message=warning)


def index_response(message: Optional[str] = None, status: int = 200) -> web.Response:
    return web.Response(text=render_index(message), status=status, content_type="text/html")


async def handle_index(request: web.Request) -> web.Response:
    """Serve the form page, or the full feed when ``url`` is given."""
    url = request.query.get("url")
    if not url:
        return index_response()

    service = request.app[SERVICE_KEY]
    try:
        document = await service.build(url)
    except InvalidURLError:
        return index_response("Invalid URL parameter", status=400)
    except FeedFetchError:
        return index_response("Failed to fetch feed", status=502)
    except FeedParseError:
        return index_response("Failed to parse feed", status=502)

    return web.Response(body=document, content_type=RSS_CONTENT_TYPE, charset="utf-8")


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def handle_metrics(request: web.Request) -> web.Response:
    response = web.Response(body=generate_latest(REGISTRY))
    response.headers["Content-Type"] = CONTENT_TYPE_LATEST
    return response


def build_service(session, store: CacheStore, config: ProxyConfig) -> FullFeedService:
    """Wire a FullFeedService from its collaborators."""
    fetcher = ContentFetcher(session, store, ttl=config.cache_ttl, metrics=ContentMetrics())
    processor = FeedProcessor(fetcher, max_articles=config.max_articles)
    return FullFeedService(session, processor, metrics=FeedMetrics())


async def _resources(app: web.Application) -> AsyncIterator[None]:
    """Open the client session and cache store for the app's lifetime."""
    config = app[CONFIG_KEY]
    store = create_cache_store(config)
    session = create_session(config)
    app[SERVICE_KEY] = build_service(session, store, config)
    logger.info("proxy_started", cache_backend=config.cache_backend, cache_ttl=config.cache_ttl)

    yield

    await session.close()
    await store.close()
    logger.info("proxy_stopped")


def create_app(
    config: Optional[ProxyConfig] = None, service: Optional[FullFeedService] = None
) -> web.Application:
    """Create the aiohttp application.

    Args:
        config: Proxy configuration, read from the environment when omitted
        service: Prebuilt service; when given the app opens no resources itself
    """
    app = web.Application()
    app[CONFIG_KEY] = config or ProxyConfig.from_env()
    if service is None:
        app.cleanup_ctx.append(_resources)
    else:
        app[SERVICE_KEY] = service
    app.router.add_get("/", handle_index)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/metrics", handle_metrics)
    return app
