"""Terminal rendering of MIME email: part location, decoding and display."""

from .version import PACKAGE_VERSION

__version__ = PACKAGE_VERSION
