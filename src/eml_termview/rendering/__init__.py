# Terminal rendering

from .capabilities import detect_capabilities, detect_hyperlink_support, detect_raster_support
from .image_protocol import (
    data_uri_payload,
    detect_cell_height,
    emit_image,
    expand_row_placeholders,
    image_rows,
)
from .remote_images import fetch_remote_base64
from .styles import DEFAULT_STYLES, PLAIN_STYLES, RenderStyles, TextStyle
from .terminal_renderer import (
    collapse_newlines,
    hyperlink,
    inline_image_map,
    process_body,
    render,
    render_for_view,
    strip_controls,
)

__all__ = [
    "detect_capabilities",
    "detect_hyperlink_support",
    "detect_raster_support",
    "data_uri_payload",
    "detect_cell_height",
    "emit_image",
    "expand_row_placeholders",
    "image_rows",
    "fetch_remote_base64",
    "DEFAULT_STYLES",
    "PLAIN_STYLES",
    "RenderStyles",
    "TextStyle",
    "collapse_newlines",
    "hyperlink",
    "inline_image_map",
    "process_body",
    "render",
    "render_for_view",
    "strip_controls",
]
