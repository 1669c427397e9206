"""
Markup normalization: markdown or HTML email bodies to a parsed HTML tree.

Bodies are treated as markdown unless they already start with HTML markup. Raw HTML
inside markdown is passed through, since many bodies mix the two.
"""

import re

import markdown
import structlog
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

logger = structlog.get_logger(__name__)

NON_VISUAL_TAGS = ("style", "script")

_HTML_START = re.compile(r"^\s*<(?:!doctype|!--|[a-zA-Z][a-zA-Z0-9]*(?:[\s/>]|$))", re.IGNORECASE)


class MarkupParseError(ValueError):
    """Raised when a body cannot be parsed into an HTML tree."""


def looks_like_html(body: str) -> bool:
    """True when the body already starts with an HTML tag, doctype or comment."""
    return bool(_HTML_START.match(body))


def markdown_to_html(source: str) -> str:
    """
    Convert markdown to HTML, passing raw HTML through.

    Args:
        source: Markdown text

    Returns:
        HTML string; the source itself if conversion fails
    """
    try:
        return markdown.markdown(source)
    except Exception as e:
        logger.warning("markdown_conversion_failed", error=str(e))
        return source


def strip_non_visual(soup: BeautifulSoup) -> BeautifulSoup:
    """Remove style and script elements, contents included."""
    for tag in soup.find_all(NON_VISUAL_TAGS):
        tag.decompose()
    return soup


def to_html_tree(body: str) -> BeautifulSoup:
    """
    Normalize a body into a queryable HTML tree.

    Args:
        body: Decoded email body (markdown, plain text or HTML)

    Returns:
        BeautifulSoup tree without style/script elements

    Raises:
        MarkupParseError: If the HTML parser rejects the markup
    """
    html = body if looks_like_html(body) else markdown_to_html(body)

    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise MarkupParseError(f"could not parse email body: {e}") from e

    return strip_non_visual(soup)
