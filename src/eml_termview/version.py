"""
Version constants for the terminal rendering pipeline.
"""

PACKAGE_VERSION = "0.1.0"

# Bumped when the graphics frame layout changes
IMAGE_PROTOCOL_VERSION = "kitty-graphics-1.0.0"
