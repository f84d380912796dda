"""Command-line interface module for byte stream filters.

This module provides the ``byte-stream-filters`` tool: streaming replace,
block replace, trim and split commands plus a recursive replace-in-files
utility with progress tracking and configuration management.
"""

from .main import main

__all__ = ["main"]
