"""
Terminal renderer: HTML tree to styled terminal text.

Control characters are stripped from the message first, so only escapes the renderer
writes itself reach the terminal. The tree is then rewritten by a fixed sequence of
rules (headings, block spacing, line breaks, links, images) and flattened to text.
Rule order matters: spacing is added around headings after they are styled, and
links are rewritten before images.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from ..logging_config import get_image_trace_logger
from ..markup.normalizer import MarkupParseError, to_html_tree
from ..models.capabilities import Capabilities
from ..models.mime_node import InlineImage, normalize_cid
from .capabilities import detect_capabilities
from .image_protocol import data_uri_payload, detect_cell_height, emit_image, expand_row_placeholders
from .remote_images import fetch_remote_base64
from .styles import DEFAULT_STYLES, RenderStyles

logger = structlog.get_logger(__name__)

BLOCK_TAGS = ("p", "div", "h1", "h2")
BLOCK_SPACER = "\n\n"
MISSING_ALT_TEXT = "Does not contain alt text"
RENDER_ERROR_PREFIX = "Error rendering body"

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
# C0 controls other than tab and newline, DEL, and C1 controls (8-bit CSI, OSC, ...)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
SANITIZED_ATTRIBUTES = ("href", "src", "alt")


def hyperlink(url: str, text: str) -> str:
    """Wrap text in an OSC-8 hyperlink to url (text defaults to the url)."""
    return f"\x1b]8;;{url}\x07{text or url}\x1b]8;;\x07"


def strip_controls(text: str) -> str:
    """Remove characters a terminal would interpret as control sequences."""
    return _CONTROL_CHARS.sub("", text)


def sanitize_tree(tree: BeautifulSoup) -> None:
    """Strip control characters from text nodes and link/image attributes in place."""
    for string in tree.find_all(string=True):
        cleaned = strip_controls(string)
        if cleaned != string:
            string.replace_with(type(string)(cleaned))
    for tag in tree.find_all(["a", "img"]):
        for name in SANITIZED_ATTRIBUTES:
            value = tag.get(name)
            if isinstance(value, str):
                tag[name] = strip_controls(value)


def collapse_newlines(text: str) -> str:
    """Collapse runs of three or more newlines to one blank line."""
    return _EXCESS_NEWLINES.sub("\n\n", text)


def inline_image_map(inline_images: Optional[Iterable[InlineImage]]) -> Dict[str, str]:
    """Map normalized content-ids to payloads, dropping empty entries."""
    mapping: Dict[str, str] = {}
    for image in inline_images or ():
        cid = image.normalized_cid
        if cid and image.base64_payload:
            mapping[cid] = image.base64_payload
    return mapping


@dataclass
class RenderContext:
    """Per-call state shared by the rewrite rules."""

    styles: RenderStyles
    capabilities: Capabilities
    inline_images: Mapping[str, str]
    fetch_remote: Callable[[str], str]
    cell_height: Optional[int] = None
    trace: structlog.BoundLogger = field(default_factory=get_image_trace_logger)

    def image_cell_height(self) -> int:
        if self.cell_height is None:
            self.cell_height = self.capabilities.cell_height or detect_cell_height()
        return self.cell_height


# Rewrite rules


def style_heading(tag: Tag, ctx: RenderContext) -> None:
    style = ctx.styles.h1 if tag.name == "h1" else ctx.styles.h2
    # keep the element so block spacing still applies to it
    tag.string = style.render(tag.get_text())


def space_block(tag: Tag, ctx: RenderContext) -> None:
    tag.insert_after(BLOCK_SPACER)


def replace_linebreak(tag: Tag, ctx: RenderContext) -> None:
    tag.replace_with("\n")


def replace_link(tag: Tag, ctx: RenderContext) -> None:
    href = tag.get("href")
    if href is None:
        return
    text = tag.get_text()
    if ctx.capabilities.hyperlinks:
        tag.replace_with(hyperlink(href, text))
    else:
        tag.replace_with(f"{text} <{href}>" if text else f"<{href}>")


def _data_uri(src: str, ctx: RenderContext) -> str:
    return data_uri_payload(src)


def _content_id(src: str, ctx: RenderContext) -> str:
    cid = normalize_cid(src)
    payload = ctx.inline_images.get(cid, "")
    ctx.trace.debug("cid_lookup", cid=cid, found=bool(payload), length=len(payload))
    return payload


def _remote(src: str, ctx: RenderContext) -> str:
    return ctx.fetch_remote(src)


IMAGE_SOURCES: List[Tuple[Callable[[str], bool], Callable[[str, RenderContext], str]]] = [
    (lambda src: src.startswith("data:image/"), _data_uri),
    (lambda src: src.lower().startswith("cid:"), _content_id),
    (lambda src: src.startswith(("http://", "https://")), _remote),
]


def resolve_image_payload(src: str, ctx: RenderContext) -> str:
    """Base64 payload for an image source, or "" when none can be produced."""
    for matches, resolve in IMAGE_SOURCES:
        if matches(src):
            return resolve(src, ctx)
    return ""


def image_placeholder(src: str, alt: str, ctx: RenderContext) -> str:
    if ctx.capabilities.hyperlinks:
        return hyperlink(src, f"\n [Click here to view image: {alt}] \n")
    if src.startswith("data:"):
        return f"[Image: {alt}]"
    return f"[Image: {alt}, {src}]"


def replace_image(tag: Tag, ctx: RenderContext) -> None:
    src = tag.get("src")
    if src is None:
        return
    alt = tag.get("alt") or MISSING_ALT_TEXT

    if ctx.capabilities.raster_images:
        payload = resolve_image_payload(src, ctx)
        if payload:
            rendered = emit_image(payload, ctx.image_cell_height())
            if rendered:
                tag.replace_with("\n" + rendered + "\n")
                return
        ctx.trace.debug("image_payload_missing", src=src[:80])
    else:
        ctx.trace.debug("image_protocol_unsupported", src=src[:80])

    tag.replace_with(image_placeholder(src, alt, ctx))


RewriteRule = Tuple[Tuple[str, ...], Callable[[Tag, RenderContext], None]]

REWRITE_PIPELINE: Tuple[RewriteRule, ...] = (
    (("h1", "h2"), style_heading),
    (BLOCK_TAGS, space_block),
    (("br",), replace_linebreak),
    (("a",), replace_link),
    (("img",), replace_image),
)


def render(
    tree: BeautifulSoup,
    inline_images: Optional[Mapping[str, str]] = None,
    styles: RenderStyles = DEFAULT_STYLES,
    width: Optional[int] = None,
    capabilities: Optional[Capabilities] = None,
    fetch_remote: Callable[[str], str] = fetch_remote_base64,
) -> str:
    """
    Render a normalized HTML tree as terminal text.

    The tree is modified in place.

    Args:
        tree: Tree from markup.to_html_tree
        inline_images: Normalized content-id to base64 payload
        styles: Heading and body styles
        width: Wrap width for the body style (None keeps the style's own width)
        capabilities: Terminal capabilities (detected from the environment if None)
        fetch_remote: Downloader for http(s) images returning base64 PNG or ""

    Returns:
        Styled text with hyperlinks and image frames interleaved
    """
    ctx = RenderContext(
        styles=styles,
        capabilities=capabilities if capabilities is not None else detect_capabilities(),
        inline_images=inline_images or {},
        fetch_remote=fetch_remote,
    )

    sanitize_tree(tree)
    for tag_names, rewrite in REWRITE_PIPELINE:
        for tag in tree.find_all(list(tag_names)):
            rewrite(tag, ctx)

    text = collapse_newlines(tree.get_text())
    text = expand_row_placeholders(text)

    body_style = styles.body if width is None else styles.body.with_width(width)
    return body_style.render(text)


def process_body(
    raw_body: str,
    styles: RenderStyles = DEFAULT_STYLES,
    width: Optional[int] = None,
    capabilities: Optional[Capabilities] = None,
    inline_images: Optional[Iterable[InlineImage]] = None,
    fetch_remote: Callable[[str], str] = fetch_remote_base64,
) -> str:
    """
    Render a decoded email body (markdown, plain text or HTML).

    Raises:
        MarkupParseError: If the body cannot be parsed
    """
    tree = to_html_tree(raw_body)
    return render(
        tree,
        inline_images=inline_image_map(inline_images),
        styles=styles,
        width=width,
        capabilities=capabilities,
        fetch_remote=fetch_remote,
    )


def render_for_view(
    raw_body: str,
    styles: RenderStyles = DEFAULT_STYLES,
    width: Optional[int] = None,
    capabilities: Optional[Capabilities] = None,
    inline_images: Optional[Iterable[InlineImage]] = None,
    fetch_remote: Callable[[str], str] = fetch_remote_base64,
) -> str:
    """
    Like process_body, but a parse failure becomes a displayable error line.
    """
    try:
        return process_body(
            raw_body,
            styles=styles,
            width=width,
            capabilities=capabilities,
            inline_images=inline_images,
            fetch_remote=fetch_remote,
        )
    except MarkupParseError as e:
        logger.warning("body_render_failed", error=str(e))
        return f"{RENDER_ERROR_PREFIX}: {e}"
