# Markup normalization

from .normalizer import (
    MarkupParseError,
    looks_like_html,
    markdown_to_html,
    strip_non_visual,
    to_html_tree,
)

__all__ = [
    "MarkupParseError",
    "looks_like_html",
    "markdown_to_html",
    "strip_non_visual",
    "to_html_tree",
]
