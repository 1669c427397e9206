"""
Content decoding for fetched MIME parts.

Two steps: undo the transfer encoding (base64, quoted-printable), then turn the bytes
into text using the declared charset. Every step degrades to a best-effort result
instead of raising, so a damaged part still shows something.
"""

import base64
import binascii
import codecs
import quopri
from email.errors import HeaderParseError
from email.header import decode_header as _split_encoded_words
from email.header import make_header
from typing import Callable, List, Optional, Tuple

import charset_normalizer
import structlog

logger = structlog.get_logger(__name__)


def decode_transfer(raw: bytes, encoding: str) -> bytes:
    """
    Undo a Content-Transfer-Encoding.

    Args:
        raw: Part bytes as stored in the message
        encoding: Declared transfer encoding ("base64", "quoted-printable", ...)

    Returns:
        Decoded bytes, or raw unchanged for identity encodings and decode failures
    """
    kind = (encoding or "").strip().lower()

    if kind == "base64":
        try:
            # non-alphabet bytes (line breaks) are discarded
            return base64.b64decode(raw)
        except (binascii.Error, ValueError) as e:
            logger.debug("base64_decode_failed", error=str(e))
            return raw

    if kind == "quoted-printable":
        try:
            return quopri.decodestring(raw)
        except (binascii.Error, ValueError) as e:
            logger.debug("quoted_printable_decode_failed", error=str(e))
            return raw

    return raw


def _declared(charset: Optional[str]) -> Callable[[bytes], Optional[str]]:
    def attempt(data: bytes) -> Optional[str]:
        if not charset:
            return None
        try:
            codecs.lookup(charset)
            return data.decode(charset)
        except (LookupError, UnicodeDecodeError):
            return None

    return attempt


def _strict_utf8(data: bytes) -> Optional[str]:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _detected(data: bytes) -> Optional[str]:
    best = charset_normalizer.from_bytes(data).best()
    return str(best) if best is not None else None


def _lenient_utf8(data: bytes) -> Optional[str]:
    return data.decode("utf-8", errors="replace")


def charset_fallback_chain(charset: Optional[str]) -> List[Tuple[str, Callable[[bytes], Optional[str]]]]:
    """
    Ordered strategies for turning bytes into text.

    The first strategy returning a string wins; the last one always succeeds.
    """
    return [
        ("declared", _declared(charset)),
        ("utf-8", _strict_utf8),
        ("detected", _detected),
        ("utf-8-replace", _lenient_utf8),
    ]


def decode_charset(data: bytes, charset: Optional[str] = None) -> str:
    """
    Decode bytes to text using the declared charset, falling back gracefully.

    Args:
        data: Transfer-decoded bytes
        charset: Declared charset (may be empty or unknown)

    Returns:
        Decoded text, never raises
    """
    if not data:
        return ""

    for name, strategy in charset_fallback_chain(charset):
        text = strategy(data)
        if text is not None:
            if name != "declared" and charset:
                logger.debug("charset_fallback", declared=charset, used=name)
            return text

    return data.decode("utf-8", errors="replace")


def decode(raw: bytes, encoding: str, charset: Optional[str] = None) -> str:
    """
    Decode a fetched part into text.

    Args:
        raw: Part bytes as fetched
        encoding: Content-Transfer-Encoding
        charset: Declared charset

    Returns:
        UTF-8 text
    """
    return decode_charset(decode_transfer(raw, encoding), charset)


def decode_header(value: Optional[str]) -> str:
    """
    Decode RFC 2047 encoded words in a header value.

    Unparseable values, or values in an unknown charset, are returned verbatim.
    """
    if not value:
        return ""
    try:
        return str(make_header(_split_encoded_words(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError):
        return value
