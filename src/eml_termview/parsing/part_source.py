"""
Part sources: the capability that hands out a body structure and raw part bytes.

The network transport is external; anything that can describe a message's structure
and return a part's bytes by part identifier satisfies PartSource. MessagePartSource
serves both from an already parsed stdlib email message.
"""

from email.message import Message
from email.utils import collapse_rfc2231_value
from typing import Dict, Protocol

from ..models.mime_node import DispositionKind, MimeNode


class PartNotFoundError(LookupError):
    """Raised when a part identifier does not address a part of the message."""

    def __init__(self, part_id: str):
        super().__init__(f"no part {part_id!r} in message")
        self.part_id = part_id


class PartSource(Protocol):
    """Body structure plus on-demand part fetches."""

    def body_structure(self) -> MimeNode:
        ...

    def fetch_part(self, part_id: str) -> bytes:
        """Return the part's bytes, still transfer-encoded."""
        ...


def _is_container(msg: Message) -> bool:
    return msg.get_content_maintype() == "multipart" and msg.is_multipart()


def _header_params(msg: Message, header: str) -> Dict[str, str]:
    params = msg.get_params(header=header) or []
    result: Dict[str, str] = {}
    # first entry is the header's main value (media type or disposition type)
    for key, value in params[1:]:
        result[key.lower()] = collapse_rfc2231_value(value) if value else ""
    return result


def _disposition(msg: Message) -> DispositionKind:
    value = msg.get_content_disposition()
    if value == DispositionKind.ATTACHMENT.value:
        return DispositionKind.ATTACHMENT
    if value == DispositionKind.INLINE.value:
        return DispositionKind.INLINE
    return DispositionKind.NONE


def mime_node_from_message(msg: Message) -> MimeNode:
    """
    Build a body-structure tree from a stdlib message.

    Args:
        msg: Parsed email.Message (or one of its parts)

    Returns:
        MimeNode mirroring the message's MIME tree
    """
    content_id = msg.get("Content-ID")
    children = [mime_node_from_message(p) for p in msg.get_payload()] if _is_container(msg) else []

    return MimeNode(
        mime_type=msg.get_content_maintype(),
        mime_subtype=msg.get_content_subtype(),
        disposition=_disposition(msg),
        disposition_params=_header_params(msg, "content-disposition"),
        params=_header_params(msg, "content-type"),
        encoding=str(msg.get("Content-Transfer-Encoding", "")).strip().lower(),
        content_id=str(content_id).strip() if content_id else None,
        children=children,
    )


class MessagePartSource:
    """PartSource over a parsed email.message.Message."""

    def __init__(self, message: Message):
        self._message = message

    @property
    def message(self) -> Message:
        return self._message

    def body_structure(self) -> MimeNode:
        return mime_node_from_message(self._message)

    def find_message_part(self, part_id: str) -> Message:
        """
        Return the message part addressed by part_id.

        Raises:
            PartNotFoundError: If the path does not exist
        """
        node = self._message
        if not _is_container(node):
            if part_id == "1":
                return node
            raise PartNotFoundError(part_id)

        for index in part_id.split("."):
            if not _is_container(node):
                raise PartNotFoundError(part_id)
            try:
                position = int(index)
            except ValueError:
                raise PartNotFoundError(part_id) from None
            children = node.get_payload()
            if position < 1 or position > len(children):
                raise PartNotFoundError(part_id)
            node = children[position - 1]
        return node

    def fetch_part(self, part_id: str) -> bytes:
        part = self.find_message_part(part_id)
        payload = part.get_payload()
        if isinstance(payload, list):
            # message/rfc822: the enclosed message, serialized
            return b"".join(p.as_bytes() for p in payload)
        # bytes-parsed messages keep 8bit data as surrogate escapes
        return (payload or "").encode("utf-8", "surrogateescape")
