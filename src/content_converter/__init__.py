"""Content conversion module for XHTML ↔ markdown conversion.

This module provides the MarkdownConverter for bidirectional conversion
between Confluence storage format (XHTML) and markdown, and the
FrontmatterHandler for the metadata block of exported pages.
"""

from .errors import ConversionError, ConverterError
from .frontmatter_handler import FrontmatterHandler
from .markdown_converter import MarkdownConverter

__all__ = ['ConversionError', 'ConverterError', 'FrontmatterHandler', 'MarkdownConverter']
