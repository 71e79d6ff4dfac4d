"""HTML to Markdown conversion of article pages."""

from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

# Removed together with their content
NOISE_ELEMENTS = ("style", "script", "footer", "iframe", "head", "img", "input")

PARSER = "html.parser"


def html_to_markdown(html: str) -> str:
    """Convert an article page into Markdown.

    The result is the page title as a level one heading followed by the body.
    Noise elements are dropped and links are replaced by their text.

    Args:
        html: Raw article HTML

    Returns:
        Markdown string of the form ``"# {title}\\n\\n{body}"``
    """
    soup = BeautifulSoup(html, PARSER)

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    body = soup.body or soup
    for element in body.find_all(NOISE_ELEMENTS):
        # nested noise may already be gone with its parent
        if not element.decomposed:
            element.decompose()

    converter = MarkdownConverter(heading_style=ATX, bullets="-", strip=["a"])
    markdown = converter.convert_soup(body).strip()
    return f"# {title}\n\n{markdown}"
