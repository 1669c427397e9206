"""
Email parser for .eml files (RFC5322/MIME format).

This module handles parsing of email files using Python's standard library email
module and exposes them as part sources for the body pipeline.
"""

from email import message_from_bytes
from email.message import Message
from email.utils import getaddresses, parsedate_to_datetime
from typing import List

from ..models.email_document import EmailHeaders
from .content_decoder import decode_header
from .part_source import MessagePartSource


def parse_eml_bytes(eml_bytes: bytes) -> Message:
    """
    Parse .eml bytes into email.Message object.

    Args:
        eml_bytes: Raw .eml file bytes

    Returns:
        Parsed email.Message object

    Raises:
        ValueError: If bytes are not valid RFC5322 format
    """
    try:
        msg = message_from_bytes(eml_bytes)
        return msg
    except Exception as e:
        raise ValueError(f"Failed to parse .eml file: {str(e)}") from e


def parse_eml_file(eml_path: str) -> Message:
    """
    Parse .eml file into email.Message object.

    Args:
        eml_path: Path to .eml file

    Returns:
        Parsed email.Message object

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file is not valid RFC5322 format
    """
    with open(eml_path, "rb") as f:
        eml_bytes = f.read()
    return parse_eml_bytes(eml_bytes)


def load_part_source(eml_path: str) -> MessagePartSource:
    """Parse a .eml file and wrap it as a part source."""
    return MessagePartSource(parse_eml_file(eml_path))


def _header(msg: Message, name: str) -> str:
    value = msg.get(name)
    return decode_header(str(value)) if value is not None else ""


def _addresses(msg: Message, name: str) -> List[str]:
    values = [str(v) for v in msg.get_all(name, [])]
    result = []
    for display_name, address in getaddresses(values):
        if not address:
            continue
        display_name = decode_header(display_name)
        result.append(f"{display_name} <{address}>" if display_name else address)
    return result


def extract_headers(msg: Message) -> EmailHeaders:
    """
    Extract and decode envelope headers.

    Args:
        msg: Parsed email.Message object

    Returns:
        EmailHeaders with decoded header information
    """
    # Parse date header
    date_str = msg.get("Date")
    date = None
    if date_str:
        try:
            date = parsedate_to_datetime(str(date_str))
        except (TypeError, ValueError):
            pass  # Keep as None if parsing fails

    # Parse References (for threading)
    references = []
    ref_header = msg.get("References", "")
    if ref_header:
        references = [ref.strip() for ref in str(ref_header).split() if ref.strip()]

    return EmailHeaders(
        from_address=_header(msg, "From"),
        to_addresses=_addresses(msg, "To"),
        cc_addresses=_addresses(msg, "Cc"),
        subject=_header(msg, "Subject"),
        date=date,
        message_id=_header(msg, "Message-ID") or None,
        in_reply_to=_header(msg, "In-Reply-To") or None,
        references=references,
    )
