from typing import Dict, List, Optional, Union
from unittest.mock import MagicMock

import aiohttp
import pytest
from prometheus_client import CollectorRegistry

from full_feed.cache.store import MemoryCacheStore
from full_feed.metrics import ContentMetrics, FeedMetrics

ARTICLE_HTML = """
<html>
<head><title>First Article</title><style>p { color: red; }</style></head>
<body>
  <nav>Menu</nav>
  <script>alert('x');</script>
  <h2>Section</h2>
  <p>Hello <a href="https://a.test/elsewhere">linked words</a> world.</p>
  <img src="https://a.test/pic.png">
  <footer>Copyright</footer>
</body>
</html>
"""


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(
        self,
        body: Union[str, bytes],
        status: int = 200,
        content_type: Optional[str] = "text/html",
        charset: Optional[str] = "utf-8",
    ):
        self.body = body.encode(charset or "utf-8") if isinstance(body, str) else body
        self.status = status
        self.headers = {"Content-Type": content_type} if content_type else {}
        self.content_type = content_type or "application/octet-stream"
        self.charset = charset

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=MagicMock(), history=(), status=self.status, message="error"
            )

    async def read(self) -> bytes:
        return self.body


class _RequestContext:
    def __init__(self, response: FakeResponse):
        self.response = response

    async def __aenter__(self) -> FakeResponse:
        return self.response

    async def __aexit__(self, *exc_info) -> None:
        return None


class FakeSession:
    """Stands in for aiohttp.ClientSession; records every GET."""

    def __init__(self, routes: Optional[Dict[str, object]] = None):
        self.routes = routes or {}
        self.calls: List[str] = []

    def get(self, url: str) -> _RequestContext:
        self.calls.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            raise aiohttp.ClientConnectionError(f"no route to {url}")
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return _RequestContext(outcome)
        return _RequestContext(FakeResponse(outcome))


@pytest.fixture
def registry():
    """Fresh Prometheus registry per test."""
    return CollectorRegistry()


@pytest.fixture
def content_metrics(registry):
    return ContentMetrics(registry=registry)


@pytest.fixture
def feed_metrics(registry):
    return FeedMetrics(registry=registry)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return MemoryCacheStore(max_size=100, timer=clock)


@pytest.fixture
def make_session():
    """Factory for fake client sessions keyed by URL."""
    return FakeSession


@pytest.fixture
def make_response():
    """Factory for fake responses with a status and content type."""
    return FakeResponse


@pytest.fixture
def article_html():
    return ARTICLE_HTML
