# Data models for the terminal rendering pipeline

from .capabilities import Capabilities
from .email_document import EmailHeaders, FetchedBody
from .mime_node import (
    Attachment,
    DispositionKind,
    InlineImage,
    MimeNode,
    normalize_cid,
)

__all__ = [
    "Attachment",
    "Capabilities",
    "DispositionKind",
    "EmailHeaders",
    "FetchedBody",
    "InlineImage",
    "MimeNode",
    "normalize_cid",
]
