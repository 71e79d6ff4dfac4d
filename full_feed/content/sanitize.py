"""Rendering of cached Markdown into safe HTML for feed items."""

import re
from typing import Dict, List

import markdown
from bs4 import BeautifulSoup, Comment

PARSER = "html.parser"

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]

# HTML elements to completely remove (including content)
DANGEROUS_ELEMENTS = {
    "script",
    "style",
    "iframe",
    "embed",
    "object",
    "applet",
    "form",
    "input",
    "button",
    "select",
    "textarea",
    "meta",
    "link",
    "base",
    "noscript",
    "canvas",
    "svg",
}

# HTML elements that are safe to keep
SAFE_ELEMENTS = {
    "p",
    "br",
    "hr",
    "div",
    "span",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "strong",
    "b",
    "em",
    "i",
    "del",
    "code",
    "pre",
    "blockquote",
    "q",
    "ul",
    "ol",
    "li",
    "dl",
    "dt",
    "dd",
    "table",
    "tr",
    "td",
    "th",
    "thead",
    "tbody",
    "tfoot",
    "caption",
    "sup",
    "sub",
    "abbr",
    "a",
    "img",
}

SAFE_ATTRIBUTES: Dict[str, List[str]] = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title"],
    "blockquote": ["cite"],
    "q": ["cite"],
    "abbr": ["title"],
    "td": ["align"],
    "th": ["align"],
}

URL_ATTRIBUTES = {"href", "src", "cite"}

UNSAFE_URL_PATTERN = re.compile(r"^\s*(javascript|vbscript|data):", re.IGNORECASE)


def render_markdown(text: str) -> str:
    """Render Markdown into HTML."""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS, output_format="html")


def sanitize_html(html: str) -> str:
    """Strip markup that is unsafe to embed in a feed reader.

    Dangerous elements are removed with their content, unknown elements are
    unwrapped, and only allow-listed attributes with safe URLs survive.
    """
    soup = BeautifulSoup(html, PARSER)

    for element in soup.find_all(DANGEROUS_ELEMENTS):
        if not element.decomposed:
            element.decompose()

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(True):
        if tag.name not in SAFE_ELEMENTS:
            tag.unwrap()
            continue

        allowed = SAFE_ATTRIBUTES.get(tag.name, [])
        for attr in list(tag.attrs):
            value = tag.attrs[attr]
            if attr not in allowed:
                del tag.attrs[attr]
            elif attr in URL_ATTRIBUTES and UNSAFE_URL_PATTERN.match(str(value)):
                del tag.attrs[attr]

    return str(soup).strip()


def render_article(text: str) -> str:
    """Turn cached Markdown into sanitized HTML for a feed item body."""
    return sanitize_html(render_markdown(text))
