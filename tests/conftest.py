"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- Sample email data and part sources
- Terminal capability presets
- Generated test images
- Temporary files
"""

import base64
import io
import os
from typing import Callable, Generator

import pytest
from PIL import Image

from eml_termview.models.capabilities import Capabilities
from eml_termview.parsing.eml_parser import parse_eml_bytes
from eml_termview.parsing.part_source import MessagePartSource
from .fixtures.emails import SAMPLE_EMAILS


@pytest.fixture
def sample_eml_bytes() -> bytes:
    """
    Get simple plain text email bytes for basic tests.

    Returns:
        bytes of a simple .eml file
    """
    return SAMPLE_EMAILS["simple_plain_text"]


@pytest.fixture
def attachment_eml() -> bytes:
    """
    Get nested multipart email with a PDF attachment.

    Returns:
        bytes of multipart/mixed email
    """
    return SAMPLE_EMAILS["attachment"]


@pytest.fixture
def inline_image_eml() -> bytes:
    """
    Get multipart/related email with a cid: image.

    Returns:
        bytes of multipart/related email
    """
    return SAMPLE_EMAILS["inline_image"]


@pytest.fixture
def source_for() -> Callable[[str], MessagePartSource]:
    """
    Build a part source for a named sample email.

    Returns:
        Factory taking a SAMPLE_EMAILS key
    """

    def factory(name: str) -> MessagePartSource:
        return MessagePartSource(parse_eml_bytes(SAMPLE_EMAILS[name]))

    return factory


@pytest.fixture
def tmp_eml_file(tmp_path) -> Generator[str, None, None]:
    """
    Create temporary .eml file with an attachment for file-based tests.

    Yields:
        Path to temporary .eml file
    """
    eml_path = tmp_path / "test_email.eml"
    eml_path.write_bytes(SAMPLE_EMAILS["attachment"])
    yield str(eml_path)


@pytest.fixture
def png_base64() -> Callable[..., str]:
    """
    Generate a solid PNG of the given size, base64 encoded.

    Returns:
        Factory taking (width, height)
    """

    def factory(width: int = 4, height: int = 4) -> str:
        buf = io.BytesIO()
        Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format="PNG")
        return base64.b64encode(buf.getvalue()).decode("ascii")

    return factory


@pytest.fixture
def no_support() -> Capabilities:
    """A terminal with neither hyperlinks nor images."""
    return Capabilities(hyperlinks=False, raster_images=False, cell_height=18)


@pytest.fixture
def links_only() -> Capabilities:
    """A terminal with hyperlinks but no images."""
    return Capabilities(hyperlinks=True, raster_images=False, cell_height=18)


@pytest.fixture
def full_support() -> Capabilities:
    """A terminal with hyperlinks and graphics, 18px rows."""
    return Capabilities(hyperlinks=True, raster_images=True, cell_height=18)


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables before each test.

    This prevents test pollution from env var changes.
    """
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
