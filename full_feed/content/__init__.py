"""Article content transforms."""

from full_feed.content.sanitize import render_article, render_markdown, sanitize_html
from full_feed.content.transform import html_to_markdown

__all__ = ["html_to_markdown", "render_article", "render_markdown", "sanitize_html"]
