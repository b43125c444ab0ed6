"""Data models for file mapper.

This module defines the configuration and option models used when pages
are written to, or read from, local markdown files.
"""

from dataclasses import dataclass
from typing import Optional


DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass
class ConverterConfig:
    """Configuration for page export and upload.

    Attributes:
        output_dir: Directory for exported pages when no file path is given
        include_metadata: Write the front matter block on export
        page_link_scheme: URL scheme for links to pages in other spaces
        max_nesting_depth: Cap for list and blockquote nesting on encode
        max_file_size: Largest markdown file accepted for upload, in bytes
    """
    output_dir: str = "./exports"
    include_metadata: bool = True
    page_link_scheme: str = "confluence"
    max_nesting_depth: int = 10
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


@dataclass
class MarkdownConversionOptions:
    """Per-call options for saving a page as markdown.

    Attributes:
        file_path: Target file; ".md" is appended when missing. When None
            the file name is derived from the page title.
        output_dir: Directory used with a derived file name (defaults to
            the configured output_dir)
        include_metadata: Write the front matter block (defaults to the
            configured include_metadata)
    """
    file_path: Optional[str] = None
    output_dir: Optional[str] = None
    include_metadata: Optional[bool] = None
