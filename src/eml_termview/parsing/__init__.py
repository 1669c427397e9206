# Part location, content decoding and message loading

from .content_decoder import decode, decode_charset, decode_header, decode_transfer
from .eml_parser import extract_headers, load_part_source, parse_eml_bytes, parse_eml_file
from .message_loader import collect_inline_images, fetch_attachment, fetch_email_body
from .part_locator import find_part, iter_parts, locate_parts, resolve_filename
from .part_source import (
    MessagePartSource,
    PartNotFoundError,
    PartSource,
    mime_node_from_message,
)

__all__ = [
    "decode",
    "decode_charset",
    "decode_header",
    "decode_transfer",
    "parse_eml_bytes",
    "parse_eml_file",
    "load_part_source",
    "extract_headers",
    "collect_inline_images",
    "fetch_attachment",
    "fetch_email_body",
    "find_part",
    "iter_parts",
    "locate_parts",
    "resolve_filename",
    "MessagePartSource",
    "PartNotFoundError",
    "PartSource",
    "mime_node_from_message",
]
