"""
Command-line viewer for .eml files.

Renders a message the way the terminal supports it: styled headings, clickable links
and inline images where available, plain-text fallbacks elsewhere.

Usage:
    # Render a message
    python -m eml_termview.cli.view message.eml

    # Wrap at 80 columns, list attachments
    python -m eml_termview.cli.view message.eml --width 80 --attachments

    # Save an attachment by part id
    python -m eml_termview.cli.view message.eml --save 2 --output downloads/
"""

import argparse
import os
import shutil
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from eml_termview.logging_config import setup_logging
from eml_termview.models.capabilities import Capabilities
from eml_termview.models.email_document import FetchedBody
from eml_termview.parsing.eml_parser import extract_headers, parse_eml_file
from eml_termview.parsing.message_loader import fetch_attachment, fetch_email_body
from eml_termview.parsing.part_source import MessagePartSource, PartNotFoundError
from eml_termview.rendering.capabilities import detect_capabilities
from eml_termview.rendering.styles import DEFAULT_STYLES
from eml_termview.rendering.terminal_renderer import render_for_view, strip_controls
from eml_termview.version import IMAGE_PROTOCOL_VERSION, PACKAGE_VERSION

logger = structlog.get_logger(__name__)


def build_capabilities(no_images: bool = False, no_hyperlinks: bool = False) -> Capabilities:
    """Detect capabilities from the environment, minus anything switched off."""
    detected = detect_capabilities(os.environ)
    return Capabilities(
        hyperlinks=detected.hyperlinks and not no_hyperlinks,
        raster_images=detected.raster_images and not no_images,
        cell_height=detected.cell_height,
    )


def format_attachments(fetched: FetchedBody) -> str:
    if not fetched.attachments:
        return ""
    lines = ["Attachments:"]
    for attachment in fetched.attachments:
        lines.append(f"  [{attachment.part_id}] {strip_controls(attachment.filename)}")
    return "\n".join(lines)


def render_message(
    source: MessagePartSource,
    width: Optional[int] = None,
    capabilities: Optional[Capabilities] = None,
    show_attachments: bool = False,
) -> str:
    """
    Render headers, body and (optionally) the attachment list of a message.

    Args:
        source: Part source for the message
        width: Wrap width (None = no wrapping)
        capabilities: Terminal capabilities
        show_attachments: Append the attachment list

    Returns:
        Text ready to print
    """
    headers = extract_headers(source.message)
    fetched = fetch_email_body(source)

    body = render_for_view(
        fetched.body,
        styles=DEFAULT_STYLES,
        width=width,
        capabilities=capabilities,
        inline_images=fetched.inline_images,
    )

    header_block = f"From: {headers.from_address}\nSubject: {headers.subject}"
    sections = [strip_controls(header_block), body]
    if show_attachments:
        attachments = format_attachments(fetched)
        if attachments:
            sections.append(attachments)
    return "\n\n".join(section for section in sections if section)


def save_attachment(source: MessagePartSource, part_id: str, output_dir: Path) -> Path:
    """
    Write one attachment to output_dir under its own filename.

    Raises:
        PartNotFoundError: If no attachment has that part id
    """
    fetched = fetch_email_body(source)
    for attachment in fetched.attachments:
        if attachment.part_id == part_id:
            data = fetch_attachment(source, attachment)
            output_dir.mkdir(parents=True, exist_ok=True)
            target = output_dir / Path(attachment.filename).name
            target.write_bytes(data)
            logger.info("attachment_saved", part_id=part_id, path=str(target), size=len(data))
            return target
    raise PartNotFoundError(part_id)


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Render an .eml message in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s message.eml
  %(prog)s message.eml --width 80 --attachments
  %(prog)s message.eml --save 2 --output downloads/

Environment:
  DEBUG_IMAGE_PROTOCOL=1              trace image protocol decisions to stdout
  DEBUG_IMAGE_PROTOCOL_LOG=/tmp/x.log also append the trace to a file
        """,
    )

    parser.add_argument("input", type=str, help="Path to .eml file")
    parser.add_argument(
        "--width",
        "-w",
        type=int,
        default=None,
        help="Wrap width in columns (default: terminal width)",
    )
    parser.add_argument(
        "--attachments", "-a", action="store_true", help="List attachments after the body"
    )
    parser.add_argument(
        "--save", "-s", type=str, default=None, metavar="PART_ID", help="Save the attachment with this part id"
    )
    parser.add_argument(
        "--output", "-o", type=str, default=".", help="Directory for saved attachments (default: .)"
    )
    parser.add_argument("--no-images", action="store_true", help="Never emit inline images")
    parser.add_argument("--no-hyperlinks", action="store_true", help="Never emit OSC-8 hyperlinks")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {PACKAGE_VERSION}")

    args = parser.parse_args(argv)
    setup_logging()

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        source = MessagePartSource(parse_eml_file(str(input_path)))

        if args.save:
            target = save_attachment(source, args.save, Path(args.output))
            print(f"Saved {target}")
            return

        width = args.width or shutil.get_terminal_size().columns
        capabilities = build_capabilities(args.no_images, args.no_hyperlinks)
        if args.verbose:
            logger.info(
                "rendering",
                path=str(input_path),
                width=width,
                image_protocol=IMAGE_PROTOCOL_VERSION,
                **capabilities.model_dump(),
            )

        print(render_message(source, width, capabilities, show_attachments=args.attachments))

    except (PartNotFoundError, ValueError, OSError) as e:
        logger.error("cli_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
