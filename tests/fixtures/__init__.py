"""Test fixtures for converter tests.

This module provides test fixtures for:
- Sample Confluence storage format pages (with/without macros)
- A sample REST API page payload
- Sample markdown content for conversion and upload tests
"""

from .sample_pages import (
    SAMPLE_PAGE_DATA,
    SAMPLE_PAGE_SIMPLE,
    SAMPLE_PAGE_WITH_DIAGRAM,
    SAMPLE_PAGE_WITH_EXPAND,
    SAMPLE_PAGE_WITH_LINKS,
    SAMPLE_PAGE_WITH_MACROS,
    SAMPLE_PAGE_WITH_TABLES,
    SAMPLE_PAGE_WITH_TASKS,
)
from .sample_markdown import (
    SAMPLE_MARKDOWN_COMPLEX,
    SAMPLE_MARKDOWN_NO_FRONTMATTER,
    SAMPLE_MARKDOWN_PLAIN,
    SAMPLE_MARKDOWN_WITH_FRONTMATTER,
)

__all__ = [
    "SAMPLE_PAGE_DATA",
    "SAMPLE_PAGE_SIMPLE",
    "SAMPLE_PAGE_WITH_DIAGRAM",
    "SAMPLE_PAGE_WITH_EXPAND",
    "SAMPLE_PAGE_WITH_LINKS",
    "SAMPLE_PAGE_WITH_MACROS",
    "SAMPLE_PAGE_WITH_TABLES",
    "SAMPLE_PAGE_WITH_TASKS",
    "SAMPLE_MARKDOWN_COMPLEX",
    "SAMPLE_MARKDOWN_NO_FRONTMATTER",
    "SAMPLE_MARKDOWN_PLAIN",
    "SAMPLE_MARKDOWN_WITH_FRONTMATTER",
]
