"""Outbound HTTP session and text download helpers."""

from typing import Optional

import aiohttp
import chardet

from full_feed.config import ProxyConfig

# Content types accepted as text besides text/*
TEXT_CONTENT_TYPES = (
    "application/xhtml+xml",
    "application/xml",
    "application/rss+xml",
    "application/atom+xml",
    "application/rdf+xml",
)


def create_session(config: ProxyConfig) -> aiohttp.ClientSession:
    """Create the shared client session used for feed and article requests.

    Args:
        config: Proxy configuration supplying timeout and user agent
    """
    timeout = aiohttp.ClientTimeout(total=config.request_timeout)
    headers = {
        "User-Agent": config.user_agent,
        "Accept": "text/html, application/xhtml+xml, application/xml;q=0.9, */*;q=0.8",
    }
    return aiohttp.ClientSession(timeout=timeout, headers=headers)


def is_text_content_type(content_type: Optional[str]) -> bool:
    """Check whether a response content type can be read as text.

    A missing content type is given the benefit of the doubt.
    """
    if not content_type:
        return True
    content_type = content_type.lower()
    return content_type.startswith("text/") or content_type in TEXT_CONTENT_TYPES


def decode_body(body: bytes, charset: Optional[str]) -> str:
    """Decode a response body.

    Uses the declared charset, then chardet detection, then UTF-8.

    Raises:
        UnicodeDecodeError: If the body cannot be decoded
        LookupError: If the declared charset is unknown
    """
    if charset:
        return body.decode(charset)
    detected = chardet.detect(body).get("encoding") if body else None
    return body.decode(detected or "utf-8")


async def read_body(response: aiohttp.ClientResponse) -> bytes:
    """Read the raw body of a successful, textual response.

    Raises:
        aiohttp.ClientResponseError: If the response status is not 2xx
        ValueError: If the content type is not textual
    """
    response.raise_for_status()
    # aiohttp reports application/octet-stream when the header is absent
    content_type = response.content_type if "Content-Type" in response.headers else None
    if not is_text_content_type(content_type):
        raise ValueError(f"Non-text response: {content_type}")
    return await response.read()


async def read_text(response: aiohttp.ClientResponse) -> str:
    """Read a successful response as text.

    Raises:
        aiohttp.ClientResponseError: If the response status is not 2xx
        ValueError: If the content type is not textual
        UnicodeDecodeError: If the body cannot be decoded
    """
    body = await read_body(response)
    return decode_body(body, response.charset)
