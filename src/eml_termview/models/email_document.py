"""
Email envelope and fetched-body models.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .mime_node import Attachment, InlineImage


class EmailHeaders(BaseModel):
    """Parsed envelope headers shown above the body."""

    from_address: str = Field(description="From header (decoded)")
    to_addresses: List[str] = Field(default_factory=list, description="To addresses")
    cc_addresses: List[str] = Field(default_factory=list, description="CC addresses")
    subject: str = Field(description="Subject (RFC 2047 decoded)")
    date: Optional[datetime] = Field(None, description="Parsed date")
    message_id: Optional[str] = Field(None, description="Message-ID header")
    in_reply_to: Optional[str] = Field(
        None, description="In-Reply-To header for threading"
    )
    references: List[str] = Field(
        default_factory=list, description="References header for threading"
    )


class FetchedBody(BaseModel):
    """
    Result of locating and decoding a message's body.

    The body is decoded text ready for the renderer; attachments are summaries only.
    """

    body: str = Field("", description="Decoded body text (empty when none was found)")
    body_part_id: str = Field("", description="Part the body was read from")
    attachments: List[Attachment] = Field(default_factory=list)
    inline_images: List[InlineImage] = Field(default_factory=list)
