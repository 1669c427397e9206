"""
Text styles for rendered bodies.

A TextStyle couples a rich Style (colors, bold, ...) with an optional wrap width.
Wrapping counts display cells and ignores escape sequences, so hyperlinks keep their
visible width and image frames are never split.
"""

import re
from dataclasses import dataclass, field, replace
from typing import List, Optional

from rich.cells import cell_len
from rich.color import ColorSystem
from rich.style import Style

# CSI (SGR etc.), OSC terminated by BEL or ST, and APC graphics frames
_ESCAPES = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|\x1b_[^\x1b]*\x1b\\")
_GRAPHICS_FRAME = "\x1b_G"
# A whole OSC-8 link: opener, label, closer
_HYPERLINK_SPAN = re.compile(
    r"\x1b\]8;[^;\x07\x1b]*;[^\x07\x1b]*(?:\x07|\x1b\\).*?\x1b\]8;;(?:\x07|\x1b\\)", re.DOTALL
)
# Stands in for spaces inside links while splitting; rendered text has no C0 controls
_SPAN_SPACE = "\x00"


def visible_width(text: str) -> int:
    """Display width of text with escape sequences removed."""
    return cell_len(_ESCAPES.sub("", text))


def _split_words(line: str) -> List[str]:
    """Split on spaces, keeping each hyperlink (label included) as one word."""
    protected = _HYPERLINK_SPAN.sub(lambda m: m.group(0).replace(" ", _SPAN_SPACE), line)
    return [word.replace(_SPAN_SPACE, " ") for word in protected.split(" ")]


def _wrap_line(line: str, width: int) -> List[str]:
    if _GRAPHICS_FRAME in line or visible_width(line) <= width:
        return [line]

    lines: List[str] = []
    current = ""
    current_width = 0
    for word in _split_words(line):
        word_width = visible_width(word)
        if current and current_width + 1 + word_width > width:
            lines.append(current)
            current, current_width = word, word_width
        elif current:
            current += " " + word
            current_width += 1 + word_width
        else:
            current, current_width = word, word_width
    lines.append(current)
    return lines


def wrap_to_width(text: str, width: int) -> str:
    """
    Word-wrap every line to width display cells.

    Words longer than width are kept whole rather than split mid-escape.
    """
    if width <= 0:
        return text
    wrapped: List[str] = []
    for line in text.split("\n"):
        wrapped.extend(_wrap_line(line, width))
    return "\n".join(wrapped)


@dataclass(frozen=True)
class TextStyle:
    """ANSI style plus optional wrap width."""

    style: Style = field(default_factory=Style)
    width: Optional[int] = None
    color_system: Optional[ColorSystem] = ColorSystem.TRUECOLOR

    def with_width(self, width: Optional[int]) -> "TextStyle":
        return replace(self, width=width)

    def render(self, text: str) -> str:
        if self.width:
            text = wrap_to_width(text, self.width)
        if self.color_system is None:
            return text
        return self.style.render(text, color_system=self.color_system)


@dataclass(frozen=True)
class RenderStyles:
    """Styles applied to headings and to the final body text."""

    h1: TextStyle = field(default_factory=TextStyle)
    h2: TextStyle = field(default_factory=TextStyle)
    body: TextStyle = field(default_factory=TextStyle)


DEFAULT_STYLES = RenderStyles(
    h1=TextStyle(Style(bold=True, color="magenta")),
    h2=TextStyle(Style(bold=True, color="cyan")),
    body=TextStyle(),
)

PLAIN_STYLES = RenderStyles(
    h1=TextStyle(color_system=None),
    h2=TextStyle(color_system=None),
    body=TextStyle(color_system=None),
)
