"""
MIME body-structure model.

This module defines the tree the Part Locator walks and the lightweight value types
produced for attachments and inline images.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DispositionKind(str, Enum):
    """Content-Disposition type of a part."""

    NONE = ""
    INLINE = "inline"
    ATTACHMENT = "attachment"


class MimeNode(BaseModel):
    """
    One node of a message's body structure.

    Part identifiers are not stored on the node; they are assigned by position
    during traversal (see parsing.part_locator.iter_parts).
    """

    mime_type: str = Field(description="Primary media type, e.g. 'text'")
    mime_subtype: str = Field(description="Media subtype, e.g. 'plain'")
    disposition: DispositionKind = Field(
        DispositionKind.NONE, description="Content-Disposition type"
    )
    disposition_params: Dict[str, str] = Field(
        default_factory=dict, description="Content-Disposition parameters"
    )
    params: Dict[str, str] = Field(
        default_factory=dict, description="Content-Type parameters"
    )
    encoding: str = Field("", description="Content-Transfer-Encoding (may be empty)")
    content_id: Optional[str] = Field(None, description="Content-ID header, if any")
    children: List["MimeNode"] = Field(
        default_factory=list, description="Sub-parts in document order"
    )

    @property
    def content_type(self) -> str:
        return f"{self.mime_type}/{self.mime_subtype}".lower()

    @property
    def charset(self) -> str:
        return self.params.get("charset", "")

    @property
    def is_multipart(self) -> bool:
        return bool(self.children)


class Attachment(BaseModel):
    """Attachment summary; bytes are fetched on demand using part_id."""

    filename: str = Field(description="Resolved filename")
    part_id: str = Field(description="Dotted part path, e.g. '2' or '1.3'")
    encoding: str = Field("", description="Content-Transfer-Encoding of the part")

    model_config = {"frozen": True}


class InlineImage(BaseModel):
    """An already fetched image part referenced from HTML via cid: URIs."""

    content_id: str = Field(description="Content-ID as found in the message")
    base64_payload: str = Field(description="Image bytes, base64 encoded")

    model_config = {"frozen": True}

    @property
    def normalized_cid(self) -> str:
        return normalize_cid(self.content_id)


def normalize_cid(value: str) -> str:
    """Strip whitespace, angle brackets and a leading 'cid:' from a content-id."""
    cid = value.strip()
    if cid.lower().startswith("cid:"):
        cid = cid[4:]
    return cid.strip().strip("<>")
