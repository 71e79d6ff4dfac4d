"""Feed data model, parsing and RSS serialization."""

import calendar
import io
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, List, Optional, Union
from xml.etree import ElementTree as ET

import feedparser
import structlog

from full_feed.errors import FeedParseError

logger = structlog.get_logger(__name__)

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
DC_NS = "http://purl.org/dc/elements/1.1/"

GENERATOR = "full-feed"

# C0 controls other than tab, newline and carriage return are not allowed in XML 1.0
INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

ET.register_namespace("content", CONTENT_NS)
ET.register_namespace("dc", DC_NS)


@dataclass
class FeedLink:
    href: Optional[str]
    rel: Optional[str] = None
    type: Optional[str] = None


@dataclass
class FeedAuthor:
    name: Optional[str] = None
    email: Optional[str] = None
    link: Optional[str] = None


@dataclass
class EntryContent:
    """Body of a feed entry."""

    body: str
    type: str = "text/html"


@dataclass
class FeedEntry:
    """One article reference within a feed."""

    title: Optional[str] = None
    description: Optional[str] = None
    links: List[FeedLink] = field(default_factory=list)
    id: Optional[str] = None
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    author: Optional[FeedAuthor] = None
    categories: List[str] = field(default_factory=list)
    content: Optional[EntryContent] = None

    @property
    def primary_link(self) -> Optional[str]:
        """Href of the first link, if any."""
        if not self.links:
            return None
        return self.links[0].href or None


@dataclass
class Feed:
    """A parsed feed: metadata plus ordered entries."""

    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    author: Optional[FeedAuthor] = None
    entries: List[FeedEntry] = field(default_factory=list)


def _to_datetime(parsed: Any) -> Optional[datetime]:
    """Convert a feedparser UTC struct_time to an aware datetime."""
    if not parsed:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    except (OverflowError, ValueError, TypeError):
        return None


def _parse_author(detail: Any) -> Optional[FeedAuthor]:
    if not detail:
        return None
    return FeedAuthor(
        name=detail.get("name"),
        email=detail.get("email"),
        link=detail.get("href"),
    )


def _parse_entry(raw: Any) -> FeedEntry:
    links = [
        FeedLink(href=link.get("href"), rel=link.get("rel"), type=link.get("type"))
        for link in raw.get("links", [])
    ]
    # Some RSS items only carry <link> without a links list
    if not links and raw.get("link"):
        links.append(FeedLink(href=raw.get("link"), rel="alternate"))

    content = None
    if raw.get("content"):
        first = raw["content"][0]
        content = EntryContent(body=first.get("value", ""), type=first.get("type", "text/html"))

    author = _parse_author(raw.get("author_detail"))
    if author is None and raw.get("author"):
        author = FeedAuthor(name=raw.get("author"))

    return FeedEntry(
        title=raw.get("title"),
        description=raw.get("summary"),
        links=links,
        id=raw.get("id"),
        published=_to_datetime(raw.get("published_parsed")),
        updated=_to_datetime(raw.get("updated_parsed")),
        author=author,
        categories=[tag.get("term") for tag in raw.get("tags", []) if tag.get("term")],
        content=content,
    )


def parse_feed(document: Union[bytes, str]) -> Feed:
    """Parse an RSS or Atom document.

    The document is always handed to feedparser as a stream, never as a
    string that feedparser could read as a URL or file path. Malformed
    documents are accepted as long as feedparser recovers entries or a feed
    title from them.

    Raises:
        FeedParseError: If nothing usable can be recovered
    """
    if isinstance(document, str):
        document = document.encode("utf-8")
    parsed = feedparser.parse(io.BytesIO(document))
    meta = parsed.get("feed", {})

    if parsed.get("bozo") and not parsed.get("entries") and not meta.get("title"):
        error = parsed.get("bozo_exception")
        raise FeedParseError(
            f"Feed parse error: {error or 'Invalid XML structure'}",
            {"exception": repr(error)},
        )

    if parsed.get("bozo"):
        logger.info("feed_parse_warning", error=str(parsed.get("bozo_exception")))

    author = _parse_author(meta.get("author_detail"))
    if author is None and meta.get("author"):
        author = FeedAuthor(name=meta.get("author"))

    return Feed(
        title=meta.get("title"),
        description=meta.get("subtitle") or meta.get("description"),
        link=meta.get("link"),
        author=author,
        entries=[_parse_entry(raw) for raw in parsed.get("entries", [])],
    )


def _format_author(author: FeedAuthor) -> Optional[str]:
    if author.email:
        return f"{author.email} ({author.name})" if author.name else author.email
    return None


def _sub(parent: ET.Element, tag: str, text: Optional[str]) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = INVALID_XML_CHARS.sub("", text) if text else ""
    return element


def serialize_feed(feed: Feed, now: Optional[datetime] = None) -> bytes:
    """Serialize a feed as RSS 2.0.

    Entries without a title are left out. Entry bodies are written to
    ``content:encoded``.

    Args:
        feed: Feed to serialize
        now: Date used for entries carrying neither published nor updated

    Returns:
        UTF-8 encoded XML document
    """
    now = now or datetime.now(timezone.utc)

    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    _sub(channel, "title", feed.title)
    _sub(channel, "link", feed.link)
    _sub(channel, "description", feed.description)
    _sub(channel, "generator", GENERATOR)
    _sub(channel, "lastBuildDate", format_datetime(now))
    if feed.author is not None:
        editor = _format_author(feed.author)
        if editor:
            _sub(channel, "managingEditor", editor)

    for entry in feed.entries:
        if entry.title is None:
            continue

        item = ET.SubElement(channel, "item")
        _sub(item, "title", entry.title)
        _sub(item, "link", entry.primary_link)
        _sub(item, "description", entry.description)

        guid = _sub(item, "guid", entry.id or entry.primary_link)
        guid.set("isPermaLink", "false")

        date = entry.published or entry.updated or now
        _sub(item, "pubDate", format_datetime(date))

        if entry.author is not None:
            author = _format_author(entry.author)
            if author:
                _sub(item, "author", author)
            if entry.author.name:
                _sub(item, f"{{{DC_NS}}}creator", entry.author.name)

        for category in entry.categories:
            _sub(item, "category", category)

        body = entry.content.body if entry.content is not None else ""
        _sub(item, f"{{{CONTENT_NS}}}encoded", body)

    return ET.tostring(rss, encoding="utf-8", xml_declaration=True)
