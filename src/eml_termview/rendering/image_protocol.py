"""
Graphics protocol emitter.

Images are sent as APC 'G' escape sequences split into frames. The cursor does not
move past an image (C=1), so the number of text rows it covers is written as a
placeholder token and only turned into newlines after the renderer has collapsed
blank lines.
"""

import base64
import binascii
import fcntl
import io
import os
import re
import struct
import sys
import termios
from typing import Optional, Sequence

from PIL import Image

from ..config import settings
from ..logging_config import get_image_trace_logger

ROW_PLACEHOLDER_PREFIX = "[[IMG_ROWS:"
ROW_PLACEHOLDER_SUFFIX = "]]"

_ROW_PLACEHOLDER = re.compile(
    re.escape(ROW_PLACEHOLDER_PREFIX) + r"(\d+)" + re.escape(ROW_PLACEHOLDER_SUFFIX)
)

FIRST_FRAME = "\x1b_Gf=100,a=T,q=2,C=1,m={more};{chunk}\x1b\\"
NEXT_FRAME = "\x1b_Gm={more};{chunk}\x1b\\"


def _cell_height_from_fd(fd: int) -> int:
    """Pixels per row reported by the tty behind fd, or 0 if unknown."""
    trace = get_image_trace_logger()
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
    except OSError:
        return 0

    rows, _cols, _xpixel, ypixel = struct.unpack("HHHH", packed)
    if rows > 0 and ypixel > 0:
        cell_height = ypixel // rows
        if cell_height > 0:
            trace.debug("terminal_cell_height", pixels=cell_height, rows=rows, ypixel=ypixel, fd=fd)
            return cell_height

    if rows > 0 and ypixel == 0:
        trace.debug("terminal_no_pixel_info", fd=fd, rows=rows)
    return 0


def _std_fds() -> list:
    fds = []
    for stream in (sys.stdout, sys.stdin, sys.stderr):
        try:
            fds.append(stream.fileno())
        except (AttributeError, OSError, ValueError):
            continue
    return fds


def detect_cell_height(fds: Optional[Sequence[int]] = None) -> int:
    """
    Height of one terminal text row in pixels.

    Queries stdout, stdin and stderr, then /dev/tty (which still works when stdio is
    redirected). Terminals that report no pixel size get settings.default_cell_height.

    Args:
        fds: File descriptors to query instead of the standard ones

    Returns:
        Pixels per row
    """
    probe_tty = fds is None
    for fd in _std_fds() if fds is None else fds:
        cell_height = _cell_height_from_fd(fd)
        if cell_height > 0:
            return cell_height

    if probe_tty:
        try:
            tty_fd = os.open("/dev/tty", os.O_RDONLY | os.O_NOCTTY)
        except OSError:
            tty_fd = -1
        if tty_fd >= 0:
            try:
                cell_height = _cell_height_from_fd(tty_fd)
            finally:
                os.close(tty_fd)
            if cell_height > 0:
                return cell_height

    get_image_trace_logger().debug("default_cell_height", pixels=settings.default_cell_height)
    return settings.default_cell_height


def image_rows(payload: str, cell_height: int) -> int:
    """
    Number of text rows an image covers.

    Args:
        payload: Base64 image data
        cell_height: Pixels per text row

    Returns:
        ceil(image height / cell height), at least 1; 1 if the image can't be read
    """
    try:
        data = base64.b64decode(payload)
        with Image.open(io.BytesIO(data)) as img:
            height = img.height
    except (binascii.Error, ValueError, OSError, Image.DecompressionBombError):
        return 1

    cell_height = max(cell_height, 1)
    rows = max((height + cell_height - 1) // cell_height, 1)
    get_image_trace_logger().debug(
        "image_rows", image_height=height, cell_height=cell_height, rows=rows
    )
    return rows


def row_placeholder(rows: int) -> str:
    return f"{ROW_PLACEHOLDER_PREFIX}{rows}{ROW_PLACEHOLDER_SUFFIX}"


def emit_image(payload: str, cell_height: Optional[int] = None) -> str:
    """
    Encode a base64 image as graphics protocol frames.

    Args:
        payload: Base64 image data (any format the terminal decodes; PNG is safest)
        cell_height: Pixels per text row (detected when None)

    Returns:
        Escape sequences followed by a row placeholder line; "" for an empty payload
    """
    if not payload:
        return ""

    if cell_height is None:
        cell_height = detect_cell_height()
    rows = image_rows(payload, cell_height)

    chunk_size = settings.image_chunk_size
    frames = []
    for offset in range(0, len(payload), chunk_size):
        chunk = payload[offset:offset + chunk_size]
        more = 1 if offset + chunk_size < len(payload) else 0
        template = FIRST_FRAME if offset == 0 else NEXT_FRAME
        frames.append(template.format(more=more, chunk=chunk))

    return "".join(frames) + "\n" + row_placeholder(rows) + "\n"


def expand_row_placeholders(text: str) -> str:
    """Replace each row placeholder with that many newlines."""

    def expand(match: "re.Match") -> str:
        rows = int(match.group(1))
        return "\n" * max(rows, 1)

    return _ROW_PLACEHOLDER.sub(expand, text)


def data_uri_payload(uri: str) -> str:
    """Return the data part of a data: URI (everything after the first comma)."""
    if not uri.startswith("data:"):
        return ""
    _, sep, data = uri.partition(",")
    if not sep:
        return ""
    return data.strip()
