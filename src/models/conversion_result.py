"""Conversion result data models."""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional


@dataclass
class ConversionResult:
    """Result of storage format to markdown conversion.

    Contains the converted markdown content along with metadata
    and warnings about unsupported features encountered during conversion.

    Attributes:
        markdown: Converted markdown content
        metadata: Page metadata keyed by front matter field name
        warnings: List of warnings about unsupported macros or features
        file_path: Path of the written markdown file (None if not saved)
    """
    markdown: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    file_path: Optional[str] = None


@dataclass
class UploadDocument:
    """A local markdown file converted for upload to Confluence.

    Attributes:
        title: Resolved page title
        content: Page body in Confluence storage format
        metadata: Front matter fields (empty if the file has none)
    """
    title: str
    content: str
    metadata: Dict[str, str] = field(default_factory=dict)
