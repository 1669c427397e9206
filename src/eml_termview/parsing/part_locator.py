"""
Part Locator: find the body text part and attachments in a body structure.

Part identifiers follow IMAP section numbering: children of the root are "1", "2", ...,
their children "1.1", "1.2", ..., and a single-part message is "1".
"""

from typing import Iterator, List, Optional, Tuple

from ..models.mime_node import Attachment, DispositionKind, MimeNode
from .content_decoder import decode_header

BODY_CONTENT_TYPES = ("text/plain", "text/html")


def iter_parts(root: MimeNode) -> Iterator[Tuple[str, MimeNode]]:
    """
    Walk a body structure in document order, assigning part identifiers.

    Uses an explicit stack, so nesting depth is not limited by recursion.

    Args:
        root: Top-level node of the body structure

    Yields:
        (part_id, node) pairs in depth-first pre-order
    """
    if not root.children:
        yield "1", root
        return

    stack = [(child, str(i)) for i, child in enumerate(root.children, 1)]
    stack.reverse()
    while stack:
        node, part_id = stack.pop()
        yield part_id, node
        for i in range(len(node.children), 0, -1):
            stack.append((node.children[i - 1], f"{part_id}.{i}"))


def find_part(root: MimeNode, part_id: str) -> Optional[MimeNode]:
    """Return the node addressed by part_id, or None."""
    for candidate_id, node in iter_parts(root):
        if candidate_id == part_id:
            return node
    return None


def resolve_filename(node: MimeNode) -> str:
    """
    Resolve a part's filename.

    Checked in order: disposition 'filename', content-type 'name', content-type
    'filename'. The first non-empty value wins, even if a later one disagrees.

    Returns:
        Decoded filename, or "" when none is declared
    """
    candidates = (
        node.disposition_params.get("filename"),
        node.params.get("name"),
        node.params.get("filename"),
    )
    for value in candidates:
        if value and value.strip():
            return decode_header(value.strip())
    return ""


def is_body_candidate(node: MimeNode) -> bool:
    return node.content_type in BODY_CONTENT_TYPES


def is_attachment(node: MimeNode, filename: str) -> bool:
    """A part with a filename counts if it has a disposition or is not text."""
    if not filename:
        return False
    return (
        node.disposition in (DispositionKind.ATTACHMENT, DispositionKind.INLINE)
        or node.mime_type.lower() != "text"
    )


def locate_parts(root: MimeNode) -> Tuple[str, List[Attachment]]:
    """
    Find the body part and the attachments of a message.

    The body is the first text/plain or text/html part in document order. A part
    chosen as the body is never also listed as an attachment.

    Args:
        root: Body structure as reported by the mail server

    Returns:
        Tuple of (body_part_id, attachments); body_part_id is "" when the message
        has no text part
    """
    body_part_id = ""
    attachments: List[Attachment] = []

    for part_id, node in iter_parts(root):
        if not body_part_id and is_body_candidate(node):
            body_part_id = part_id
            continue

        filename = resolve_filename(node)
        if is_attachment(node, filename):
            attachments.append(
                Attachment(filename=filename, part_id=part_id, encoding=node.encoding)
            )

    return body_part_id, attachments
