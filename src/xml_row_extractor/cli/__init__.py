"""Command-line interface module for XML Row Extractor.

This module provides the ``xml-rows`` tool: row extraction from XML files to
JSON lines or CSV, and JSON lines back to XML row fragments.
"""

from .main import main

__all__ = ["main"]
