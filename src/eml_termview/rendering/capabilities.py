"""
Terminal capability detection from environment signals.

Detection is an allowlist over a few environment variables set by known terminals.
A miss falls back to plain text, which is always safe; a false hit would print
escape-sequence garbage, so only terminals known to implement a feature are listed.
"""

import os
from typing import Mapping, Optional

from ..models.capabilities import Capabilities

RASTER_TERM_MARKERS = ("kitty", "ghostty")
RASTER_ENV_MARKERS = ("KITTY_WINDOW_ID", "GHOSTTY_RESOURCES_DIR")
RASTER_TERM_PROGRAMS = ("ghostty",)

HYPERLINK_TERM_MARKERS = ("kitty", "ghostty", "wezterm", "alacritty", "foot")
HYPERLINK_ENV_MARKERS = (
    "VTE_VERSION",
    "KITTY_WINDOW_ID",
    "GHOSTTY_RESOURCES_DIR",
    "WEZTERM_EXECUTABLE",
    "ITERM_SESSION_ID",
)
HYPERLINK_TERM_PROGRAMS = ("iterm.app", "wezterm", "ghostty", "vscode")


def _term(env: Mapping[str, str]) -> str:
    return env.get("TERM", "").lower()


def _term_program(env: Mapping[str, str]) -> str:
    return env.get("TERM_PROGRAM", "").lower()


def _any_set(env: Mapping[str, str], names) -> bool:
    return any(env.get(name) for name in names)


def detect_raster_support(env: Mapping[str, str]) -> bool:
    """True when the terminal is known to display graphics-protocol images."""
    term = _term(env)
    return (
        any(marker in term for marker in RASTER_TERM_MARKERS)
        or _term_program(env) in RASTER_TERM_PROGRAMS
        or _any_set(env, RASTER_ENV_MARKERS)
    )


def detect_hyperlink_support(env: Mapping[str, str]) -> bool:
    """True when the terminal is known to understand OSC-8 hyperlinks."""
    term = _term(env)
    return (
        any(marker in term for marker in HYPERLINK_TERM_MARKERS)
        or _term_program(env) in HYPERLINK_TERM_PROGRAMS
        or _any_set(env, HYPERLINK_ENV_MARKERS)
    )


def detect_capabilities(
    env: Optional[Mapping[str, str]] = None, cell_height: Optional[int] = None
) -> Capabilities:
    """
    Detect what the terminal supports.

    Args:
        env: Environment mapping (defaults to os.environ)
        cell_height: Known pixels per row, if the caller already measured it

    Returns:
        Capabilities for one render
    """
    env = os.environ if env is None else env
    return Capabilities(
        hyperlinks=detect_hyperlink_support(env),
        raster_images=detect_raster_support(env),
        cell_height=cell_height,
    )
