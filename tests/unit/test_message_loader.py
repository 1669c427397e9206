"""
Unit tests for part sources and message loading (part_source.py, message_loader.py).

Tests cover:
- Body structure built from stdlib messages
- Part fetches by part id (and their failures)
- Body decoding end to end
- Attachment download round trip
- Inline image collection
"""

import base64
from unittest.mock import MagicMock

import pytest

from eml_termview.models.mime_node import Attachment, DispositionKind, MimeNode
from eml_termview.parsing.message_loader import (
    collect_inline_images,
    fetch_attachment,
    fetch_email_body,
)
from eml_termview.parsing.part_source import PartNotFoundError
from tests.fixtures.emails import PDF_BASE64, TINY_PNG_BASE64


class TestBodyStructure:
    """Tests for mime_node_from_message() via MessagePartSource."""

    @pytest.mark.unit
    def test_nested_structure(self, source_for):
        root = source_for("attachment").body_structure()

        assert root.content_type == "multipart/mixed"
        assert [c.content_type for c in root.children] == ["multipart/alternative", "application/pdf"]
        assert [c.content_type for c in root.children[0].children] == ["text/plain", "text/html"]

    @pytest.mark.unit
    def test_part_metadata(self, source_for):
        pdf = source_for("attachment").body_structure().children[1]

        assert pdf.disposition == DispositionKind.ATTACHMENT
        assert pdf.disposition_params == {"filename": "report.pdf"}
        assert pdf.params == {"name": "document.pdf"}
        assert pdf.encoding == "base64"

    @pytest.mark.unit
    def test_content_id_and_charset(self, source_for):
        html, logo = source_for("inline_image").body_structure().children

        assert html.charset == "utf-8"
        assert logo.content_id == "<logo@example.com>"
        assert logo.disposition == DispositionKind.INLINE

    @pytest.mark.unit
    def test_rfc2231_filename_is_collapsed(self, source_for):
        notes = source_for("named_parts").body_structure().children[2]
        assert notes.disposition_params["filename"] == "naïve.txt"


class TestFetchPart:
    """Tests for MessagePartSource.fetch_part()."""

    @pytest.mark.unit
    def test_single_part_message_is_part_one(self, source_for):
        raw = source_for("simple_plain_text").fetch_part("1")
        assert raw.startswith(b"Hello, this is a simple test email.")

    @pytest.mark.unit
    def test_nested_part(self, source_for):
        raw = source_for("attachment").fetch_part("1.2")
        assert b"<b>document</b>" in raw

    @pytest.mark.unit
    @pytest.mark.parametrize("part_id", ["3", "1.3", "2.1", "0", "x", ""])
    def test_unknown_part(self, source_for, part_id):
        with pytest.raises(PartNotFoundError):
            source_for("attachment").fetch_part(part_id)

    @pytest.mark.unit
    def test_single_part_message_has_no_part_two(self, source_for):
        with pytest.raises(PartNotFoundError):
            source_for("simple_plain_text").fetch_part("2")

    @pytest.mark.unit
    def test_attachment_part_id_round_trip(self, source_for):
        source = source_for("attachment")
        _, described = source.message.get_payload()

        body = fetch_email_body(source)
        attachment = body.attachments[0]

        assert source.fetch_part(attachment.part_id) == described.get_payload().encode("ascii")
        assert fetch_attachment(source, attachment) == described.get_payload(decode=True)


class TestFetchEmailBody:
    """Tests for fetch_email_body()."""

    @pytest.mark.unit
    def test_plain_text_message(self, source_for):
        fetched = fetch_email_body(source_for("simple_plain_text"))

        assert fetched.body_part_id == "1"
        assert "simple test email" in fetched.body
        assert fetched.attachments == []
        assert fetched.inline_images == []

    @pytest.mark.unit
    def test_html_first_alternative(self, source_for):
        fetched = fetch_email_body(source_for("html_first"))

        assert fetched.body_part_id == "1"
        assert fetched.body.lstrip().startswith("<html>")

    @pytest.mark.unit
    def test_nested_body_and_attachment(self, source_for):
        fetched = fetch_email_body(source_for("attachment"))

        assert fetched.body_part_id == "1.1"
        assert "Please find the **document** attached." in fetched.body
        assert fetched.attachments == [Attachment(filename="report.pdf", part_id="2", encoding="base64")]

    @pytest.mark.unit
    def test_quoted_printable_latin1(self, source_for):
        fetched = fetch_email_body(source_for("quoted_printable_latin1"))
        assert fetched.body.rstrip("\n") == "Café = goodness"

    @pytest.mark.unit
    def test_base64_utf8(self, source_for):
        fetched = fetch_email_body(source_for("base64_utf8"))
        assert fetched.body == "Échantillon n°1"

    @pytest.mark.unit
    def test_named_parts(self, source_for):
        fetched = fetch_email_body(source_for("named_parts"))

        assert fetched.body_part_id == "1"
        assert [(a.filename, a.part_id) for a in fetched.attachments] == [
            ("photo.jpg", "2"),
            ("naïve.txt", "3"),
        ]

    @pytest.mark.unit
    def test_no_text_part(self, source_for):
        fetched = fetch_email_body(source_for("no_text"))

        assert fetched.body == ""
        assert fetched.body_part_id == ""
        assert [(a.filename, a.part_id) for a in fetched.attachments] == [("scan.pdf", "1")]

    @pytest.mark.unit
    def test_fetch_attachment_decodes_base64(self, source_for):
        source = source_for("no_text")
        fetched = fetch_email_body(source)
        assert fetch_attachment(source, fetched.attachments[0]) == base64.b64decode(PDF_BASE64)


class TestCollectInlineImages:
    """Tests for collect_inline_images()."""

    @pytest.mark.unit
    def test_related_image(self, source_for):
        fetched = fetch_email_body(source_for("inline_image"))

        assert len(fetched.inline_images) == 1
        image = fetched.inline_images[0]
        assert image.content_id == "logo@example.com"
        assert base64.b64decode(image.base64_payload) == base64.b64decode(TINY_PNG_BASE64)

    @pytest.mark.unit
    def test_fetch_failure_skips_image(self):
        root = MimeNode(
            mime_type="multipart",
            mime_subtype="related",
            children=[
                MimeNode(mime_type="text", mime_subtype="html"),
                MimeNode(mime_type="image", mime_subtype="png", content_id="<a@x>", encoding="base64"),
            ],
        )
        source = MagicMock()
        source.fetch_part.side_effect = ConnectionError("gone")

        assert collect_inline_images(source, root) == []
        source.fetch_part.assert_called_once_with("2")

    @pytest.mark.unit
    def test_images_without_content_id_are_ignored(self):
        root = MimeNode(
            mime_type="multipart",
            mime_subtype="mixed",
            children=[MimeNode(mime_type="image", mime_subtype="png")],
        )
        source = MagicMock()

        assert collect_inline_images(source, root) == []
        source.fetch_part.assert_not_called()
