"""
CLI module for rendering .eml files in the terminal.
"""

from eml_termview.cli.view import main as view_main

__all__ = ["view_main"]
