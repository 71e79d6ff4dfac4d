"""Tests for the feed processor."""

import copy
from unittest.mock import AsyncMock, MagicMock

import pytest

from full_feed.errors import FetchError, InvalidURLError
from full_feed.feeds import EntryContent, Feed, FeedEntry, FeedLink
from full_feed.fetcher import ContentFetcher
from full_feed.processor import FeedProcessor


def make_entry(*hrefs, title="Entry", body=None):
    return FeedEntry(
        title=title,
        description="summary",
        links=[FeedLink(href=href) for href in hrefs],
        id=title,
        content=EntryContent(body=body) if body is not None else None,
    )


@pytest.fixture
def fetcher(content_metrics):
    fetcher = MagicMock()
    fetcher.metrics = content_metrics
    fetcher.fetch_content = AsyncMock(side_effect=lambda url: f"full:{url}")
    return fetcher


@pytest.mark.asyncio
async def test_entries_get_fetched_content(fetcher):
    feed = Feed(
        title="Feed",
        entries=[
            make_entry("https://a.test/1"),
            make_entry(),
            make_entry("https://a.test/2"),
        ],
    )
    untouched = copy.deepcopy(feed.entries[1])

    result = await FeedProcessor(fetcher).process(feed)

    assert result is feed
    assert feed.entries[0].content == EntryContent(body="full:https://a.test/1", type="text/html")
    assert feed.entries[1] == untouched
    assert feed.entries[2].content.body == "full:https://a.test/2"


@pytest.mark.asyncio
async def test_fetches_at_most_ten_articles(fetcher):
    feed = Feed(entries=[make_entry(f"https://a.test/{i}") for i in range(50)])

    await FeedProcessor(fetcher).process(feed)

    assert fetcher.fetch_content.await_count == 10
    assert all(entry.content is not None for entry in feed.entries[:10])
    assert all(entry.content is None for entry in feed.entries[10:])


@pytest.mark.asyncio
async def test_entries_without_links_do_not_count(fetcher):
    entries = []
    for i in range(12):
        entries.append(make_entry())
        entries.append(make_entry(f"https://a.test/{i}"))
    feed = Feed(entries=entries)

    await FeedProcessor(fetcher).process(feed)

    fetched = [call.args[0] for call in fetcher.fetch_content.await_args_list]
    assert fetched == [f"https://a.test/{i}" for i in range(10)]


@pytest.mark.asyncio
async def test_entry_whose_first_link_has_no_href_is_skipped(fetcher):
    entry = FeedEntry(title="x", links=[FeedLink(href=None), FeedLink(href="https://a.test/2")])
    feed = Feed(entries=[entry])

    await FeedProcessor(fetcher).process(feed)

    assert fetcher.fetch_content.await_count == 0
    assert entry.content is None


@pytest.mark.asyncio
async def test_only_first_link_is_used(fetcher):
    feed = Feed(entries=[make_entry("https://a.test/first", "https://a.test/second")])

    await FeedProcessor(fetcher).process(feed)

    fetcher.fetch_content.assert_awaited_once_with("https://a.test/first")


@pytest.mark.asyncio
async def test_failed_article_leaves_entry_unchanged(fetcher, registry):
    def fetch(url):
        if url.endswith("/bad"):
            raise FetchError("boom", url=url)
        return f"full:{url}"

    fetcher.fetch_content.side_effect = fetch
    feed = Feed(
        entries=[
            make_entry("https://a.test/1", title="one"),
            make_entry("https://a.test/bad", title="bad", body="original summary"),
            make_entry("https://a.test/3", title="three"),
        ]
    )
    before = copy.deepcopy(feed.entries[1])

    await FeedProcessor(fetcher).process(feed)

    assert len(feed.entries) == 3
    assert feed.entries[0].content.body == "full:https://a.test/1"
    assert feed.entries[1] == before
    assert feed.entries[2].content.body == "full:https://a.test/3"
    assert registry.get_sample_value("article_failures_total") == 1.0


@pytest.mark.asyncio
async def test_failed_articles_count_toward_the_bound(fetcher):
    fetcher.fetch_content.side_effect = FetchError("down")
    feed = Feed(entries=[make_entry(f"https://a.test/{i}") for i in range(15)])

    await FeedProcessor(fetcher).process(feed)

    assert fetcher.fetch_content.await_count == 10


@pytest.mark.asyncio
async def test_invalid_entry_url_is_contained(fetcher):
    def fetch(url):
        if url == "nonsense":
            raise InvalidURLError(url)
        return f"full:{url}"

    fetcher.fetch_content.side_effect = fetch
    feed = Feed(entries=[make_entry("nonsense"), make_entry("https://a.test/2")])

    await FeedProcessor(fetcher).process(feed)

    assert feed.entries[0].content is None
    assert feed.entries[1].content.body == "full:https://a.test/2"


@pytest.mark.asyncio
async def test_max_articles_is_configurable(fetcher):
    feed = Feed(entries=[make_entry(f"https://a.test/{i}") for i in range(5)])

    await FeedProcessor(fetcher, max_articles=2).process(feed)

    assert fetcher.fetch_content.await_count == 2


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(fetcher):
    fetcher.fetch_content.side_effect = RuntimeError("bug")
    feed = Feed(entries=[make_entry("https://a.test/1")])

    with pytest.raises(RuntimeError):
        await FeedProcessor(fetcher).process(feed)


@pytest.mark.asyncio
async def test_article_that_fails_to_render_is_contained(make_session, memory_store, content_metrics, registry):
    def render(text):
        if "Deep" in text:
            raise RecursionError("maximum recursion depth exceeded")
        return text

    session = make_session(
        {
            "https://a.test/deep": "<title>Deep</title><p>nested</p>",
            "https://a.test/ok": "<title>Fine</title><p>body</p>",
        }
    )
    fetcher = ContentFetcher(session, memory_store, postprocess=render, metrics=content_metrics)
    feed = Feed(
        entries=[
            make_entry("https://a.test/deep", title="deep", body="deep summary"),
            make_entry("https://a.test/ok", title="ok"),
        ]
    )

    await FeedProcessor(fetcher).process(feed)

    assert feed.entries[0].content.body == "deep summary"
    assert feed.entries[1].content.body.startswith("# Fine")
    assert registry.get_sample_value("article_failures_total") == 1.0
