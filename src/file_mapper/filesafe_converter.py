"""Filesafe filename conversion for exported pages.

This module converts Confluence page titles to file names that are valid on
all common file systems.
"""

import re


class FilesafeConverter:
    """Converts Confluence page titles to filesafe filenames.

    Conversion rules:
    - Invalid characters (<, >, :, ", /, \\, |, ?, *) → hyphens (-)
    - Runs of whitespace → a single underscore (_)
    - Multiple consecutive hyphens → collapsed to single hyphen
    - Result truncated to 200 characters
    - Empty titles become "untitled"
    - Case is preserved exactly as in original title

    Examples:
        - "Customer Feedback" → "Customer_Feedback.md"
        - "API Reference: Getting Started" → "API_Reference-_Getting_Started.md"
        - "a/b\\c" → "a-b-c.md"
    """

    INVALID_CHARS_PATTERN = re.compile(r'[<>:"/\\|?*]')
    WHITESPACE_PATTERN = re.compile(r'\s+')
    HYPHEN_RUN_PATTERN = re.compile(r'-+')

    MAX_LENGTH = 200

    @classmethod
    def sanitize(cls, title: str) -> str:
        """Convert a page title to a filesafe name without extension.

        Examples:
            >>> FilesafeConverter.sanitize("Customer Feedback")
            'Customer_Feedback'
            >>> FilesafeConverter.sanitize("What? <Really>")
            'What-_-Really-'
        """
        filename = cls.INVALID_CHARS_PATTERN.sub('-', title or '')
        filename = cls.WHITESPACE_PATTERN.sub('_', filename)
        filename = cls.HYPHEN_RUN_PATTERN.sub('-', filename)
        filename = filename[:cls.MAX_LENGTH]
        return filename or 'untitled'

    @classmethod
    def title_to_filename(cls, title: str) -> str:
        """Convert a Confluence page title to a filesafe filename.

        Args:
            title: The Confluence page title

        Returns:
            A filesafe filename with .md extension

        Examples:
            >>> FilesafeConverter.title_to_filename("Customer Feedback")
            'Customer_Feedback.md'
        """
        return f"{cls.sanitize(title)}.md"
