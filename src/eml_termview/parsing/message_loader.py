"""
Message loading: locate, fetch and decode the parts a viewer needs.
"""

import base64
from typing import List

import structlog

from ..models.email_document import FetchedBody
from ..models.mime_node import Attachment, InlineImage, MimeNode, normalize_cid
from .content_decoder import decode, decode_transfer
from .part_locator import find_part, iter_parts, locate_parts
from .part_source import PartSource

logger = structlog.get_logger(__name__)


def collect_inline_images(source: PartSource, root: MimeNode) -> List[InlineImage]:
    """
    Fetch every image part that carries a Content-ID.

    Parts that cannot be fetched or are empty after decoding are skipped.

    Args:
        source: Part source for the message
        root: Its body structure

    Returns:
        InlineImage list with normalized content-ids and base64 payloads
    """
    images: List[InlineImage] = []

    for part_id, node in iter_parts(root):
        if node.mime_type.lower() != "image" or not node.content_id:
            continue
        cid = normalize_cid(node.content_id)
        if not cid:
            continue

        try:
            raw = source.fetch_part(part_id)
        except Exception as e:
            logger.warning("inline_image_fetch_failed", part_id=part_id, error=str(e))
            continue

        data = decode_transfer(raw, node.encoding)
        if not data:
            continue
        images.append(
            InlineImage(content_id=cid, base64_payload=base64.b64encode(data).decode("ascii"))
        )

    return images


def fetch_email_body(source: PartSource) -> FetchedBody:
    """
    Locate and decode a message's body, attachments and inline images.

    Args:
        source: Part source for the message

    Returns:
        FetchedBody; body is "" when the message has no text part

    Raises:
        PartNotFoundError: If the source cannot serve the located body part
    """
    root = source.body_structure()
    body_part_id, attachments = locate_parts(root)

    body = ""
    if body_part_id:
        node = find_part(root, body_part_id)
        raw = source.fetch_part(body_part_id)
        body = decode(raw, node.encoding, node.charset)

    logger.debug(
        "body_located",
        body_part_id=body_part_id or None,
        attachments=len(attachments),
    )

    return FetchedBody(
        body=body,
        body_part_id=body_part_id,
        attachments=attachments,
        inline_images=collect_inline_images(source, root),
    )


def fetch_attachment(source: PartSource, attachment: Attachment) -> bytes:
    """
    Fetch an attachment's bytes and undo its transfer encoding.

    Raises:
        PartNotFoundError: If the attachment's part no longer exists
    """
    raw = source.fetch_part(attachment.part_id)
    return decode_transfer(raw, attachment.encoding)
