"""
Remote image fetching for inline display.

Images are downloaded under an overall deadline and a size cap, decoded with Pillow
and re-encoded as PNG, the format every graphics-protocol terminal accepts. Any
failure yields "" so the renderer falls back to a text placeholder.
"""

import base64
import io
import time
from typing import Optional

import httpx
from PIL import Image

from ..config import settings
from ..logging_config import get_image_trace_logger


def to_png_base64(data: bytes) -> str:
    """
    Re-encode image bytes as base64 PNG.

    Raises:
        OSError: If Pillow cannot decode or encode the image
    """
    with Image.open(io.BytesIO(data)) as img:
        img.load()
        if img.mode not in ("RGB", "RGBA", "L", "LA", "P", "1"):
            img = img.convert("RGBA")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def _read_limited(
    response: httpx.Response, deadline: float, max_bytes: int, trace
) -> Optional[bytes]:
    """Read a streamed body, giving up past the deadline or the size cap."""
    declared = response.headers.get("Content-Length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        trace.debug("remote_fetch_too_large", url=str(response.url), size=int(declared))
        return None

    chunks = []
    total = 0
    for chunk in response.iter_bytes():
        total += len(chunk)
        if total > max_bytes:
            trace.debug("remote_fetch_too_large", url=str(response.url), size=total)
            return None
        if time.monotonic() > deadline:
            trace.debug("remote_fetch_deadline_exceeded", url=str(response.url), received=total)
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def fetch_remote_base64(url: str, timeout: Optional[float] = None) -> str:
    """
    Download an http(s) image and return it as base64 PNG.

    The timeout bounds the whole download, not each network read, and the body is
    streamed so oversized images are dropped before they are fully received.

    Args:
        url: Image URL
        timeout: Seconds before giving up (defaults to settings)

    Returns:
        Base64 PNG data, or "" on any failure
    """
    if not url.startswith(("http://", "https://")):
        return ""

    trace = get_image_trace_logger()
    timeout = settings.remote_image_timeout_seconds if timeout is None else timeout
    deadline = time.monotonic() + timeout

    try:
        with httpx.Client(timeout=timeout, follow_redirects=True) as client:
            with client.stream("GET", url) as response:
                if not response.is_success:
                    trace.debug("remote_fetch_non_2xx", url=url, status=response.status_code)
                    return ""
                data = _read_limited(response, deadline, settings.remote_image_max_bytes, trace)
    except httpx.HTTPError as e:
        trace.debug("remote_fetch_failed", url=url, error=str(e))
        return ""

    if data is None:
        return ""

    try:
        encoded = to_png_base64(data)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        trace.debug("remote_decode_failed", url=url, error=str(e))
        return ""

    trace.debug("remote_fetch_ok", url=url, length=len(encoded))
    return encoded
