"""
Unit tests for content decoding (content_decoder.py).

Tests cover:
- Transfer decoding (base64, quoted-printable, identity)
- Charset decoding with fallbacks
- RFC 2047 header decoding
"""

import base64

import pytest

from eml_termview.parsing.content_decoder import (
    charset_fallback_chain,
    decode,
    decode_charset,
    decode_header,
    decode_transfer,
)


class TestDecodeTransfer:
    """Tests for decode_transfer()."""

    @pytest.mark.unit
    def test_quoted_printable_escapes(self):
        assert decode_transfer(b"Hello=2C world=21", "quoted-printable") == b"Hello, world!"

    @pytest.mark.unit
    @pytest.mark.parametrize("line_end", [b"\r\n", b"\n"])
    def test_quoted_printable_soft_line_break(self, line_end):
        raw = b"This is a long line that gets wrapped=" + line_end + b" and continues here."
        assert decode_transfer(raw, "quoted-printable") == (
            b"This is a long line that gets wrapped and continues here."
        )

    @pytest.mark.unit
    def test_encoding_name_is_case_insensitive(self):
        assert decode_transfer(b"a=3Db", "Quoted-Printable") == b"a=b"
        assert decode_transfer(base64.b64encode(b"hi"), " BASE64 ") == b"hi"

    @pytest.mark.unit
    def test_base64_with_line_breaks(self):
        encoded = base64.encodebytes(b"x" * 200)
        assert b"\n" in encoded
        assert decode_transfer(encoded, "base64") == b"x" * 200

    @pytest.mark.unit
    def test_bad_base64_returns_raw(self):
        assert decode_transfer(b"abc", "base64") == b"abc"

    @pytest.mark.unit
    @pytest.mark.parametrize("encoding", ["", "7bit", "8bit", "binary", "x-unknown"])
    def test_identity_encodings_pass_through(self, encoding):
        assert decode_transfer(b"Hello=2C", encoding) == b"Hello=2C"


class TestDecodeCharset:
    """Tests for decode_charset()."""

    @pytest.mark.unit
    def test_declared_charset(self):
        assert decode_charset("Café".encode("iso-8859-1"), "iso-8859-1") == "Café"

    @pytest.mark.unit
    def test_unknown_charset_falls_back_to_utf8(self):
        assert decode_charset("Café".encode("utf-8"), "x-no-such-charset") == "Café"

    @pytest.mark.unit
    def test_missing_charset_is_utf8(self):
        assert decode_charset("naïve".encode("utf-8"), None) == "naïve"

    @pytest.mark.unit
    def test_wrong_charset_never_raises(self):
        text = decode_charset(b"Caf\xe9 au lait", "utf-8")
        assert isinstance(text, str)
        assert text.startswith("Caf")

    @pytest.mark.unit
    def test_empty_bytes(self):
        assert decode_charset(b"", "utf-8") == ""

    @pytest.mark.unit
    def test_fallback_chain_order(self):
        names = [name for name, _ in charset_fallback_chain("utf-8")]
        assert names == ["declared", "utf-8", "detected", "utf-8-replace"]


class TestDecode:
    """Tests for decode() (both steps)."""

    @pytest.mark.unit
    def test_quoted_printable_latin1(self):
        assert decode(b"Caf=E9 =3D good=\nness", "quoted-printable", "iso-8859-1") == "Café = goodness"

    @pytest.mark.unit
    def test_base64_utf8(self):
        raw = base64.b64encode("Échantillon n°1".encode("utf-8"))
        assert decode(raw, "base64", "utf-8") == "Échantillon n°1"


class TestDecodeHeader:
    """Tests for decode_header()."""

    @pytest.mark.unit
    def test_plain_header_unchanged(self):
        assert decode_header("Hello world") == "Hello world"

    @pytest.mark.unit
    def test_q_encoded_word(self):
        assert decode_header("=?utf-8?q?Caf=C3=A9?= menu") == "Café menu"

    @pytest.mark.unit
    def test_b_encoded_word(self):
        assert decode_header("=?utf-8?b?w4ljaGFudGlsbG9u?=") == "Échantillon"

    @pytest.mark.unit
    def test_unknown_charset_passes_through(self):
        value = "=?x-bogus?q?abc?="
        assert decode_header(value) == value

    @pytest.mark.unit
    def test_empty(self):
        assert decode_header(None) == ""
        assert decode_header("") == ""
