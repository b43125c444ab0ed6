"""Markdown converter for Confluence storage format.

This module provides bidirectional conversion between Confluence storage
format (XHTML) and markdown.

Storage format → markdown runs in three stages: macro preprocessing, a
markdownify tree walk and a cleanup pass. Markdown → storage format runs
the line-oriented encoder followed by the storage adapter. Front matter is
handled on both sides by FrontmatterHandler.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from src.models import ConversionMetadata, ConversionResult

from .errors import ConversionError
from .frontmatter_handler import FrontmatterHandler
from .macro_preprocessor import preprocess, strip_tags
from .markdown_cleanup import cleanup_markdown
from .storage_adapter import adapt_to_storage
from .storage_encoder import DEFAULT_MAX_NESTING_DEPTH, expand_link_references, markdown_to_storage
from .storage_walker import tree_to_markdown

logger = logging.getLogger(__name__)


class MarkdownConverter:
    """Converts between Confluence storage format and markdown.

    The converter holds configuration only; every call builds its own
    walker and encoder state, so one instance can be shared freely.

    Args:
        page_link_scheme: URL scheme for links to pages in another space
            (e.g. confluence://TEAM/Page%20Title)
        max_nesting_depth: Cap for list and blockquote nesting on encode
    """

    def __init__(
        self,
        page_link_scheme: str = 'confluence',
        max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH
    ):
        self.page_link_scheme = page_link_scheme
        self.max_nesting_depth = max_nesting_depth

    def xhtml_to_markdown(self, xhtml: str, metadata: Optional[ConversionMetadata] = None) -> str:
        """Convert storage format to markdown.

        Never raises: if conversion fails the tags are stripped and the
        remaining text is returned.

        Args:
            xhtml: Confluence storage format XHTML string
            metadata: Page metadata; when given, a front matter block is
                prepended

        Returns:
            Markdown string
        """
        return self.convert_storage(xhtml, metadata).markdown

    def convert_storage(
        self,
        xhtml: str,
        metadata: Optional[ConversionMetadata] = None
    ) -> ConversionResult:
        """Convert storage format and report unsupported macros.

        Args:
            xhtml: Confluence storage format XHTML string
            metadata: Page metadata for the front matter block (optional)

        Returns:
            ConversionResult with the markdown and conversion warnings
        """
        try:
            body, warnings = self._decode(xhtml or '')
        except ConversionError as e:
            logger.warning(f"Falling back to plain text conversion: {e}")
            body = strip_tags(xhtml)
            warnings = [str(e)]

        markdown = body
        if metadata is not None:
            front_matter = FrontmatterHandler.inject(metadata)
            markdown = f"{front_matter}\n\n{body}" if body else front_matter

        return ConversionResult(
            markdown=markdown,
            metadata=metadata.to_dict() if metadata is not None else {},
            warnings=warnings
        )

    def _decode(self, xhtml: str) -> Tuple[str, List[str]]:
        if not xhtml.strip():
            return '', []
        try:
            normalized = preprocess(xhtml)
            markdown, warnings = tree_to_markdown(normalized, self.page_link_scheme)
            return cleanup_markdown(markdown), warnings
        except Exception as e:
            raise ConversionError(f"Storage format conversion failed: {e}") from e

    def page_to_markdown(self, page_data: Dict[str, Any], include_metadata: bool = False) -> ConversionResult:
        """Convert a Confluence REST page payload to markdown.

        Args:
            page_data: Page as returned by the REST API, with the storage
                body under body.storage.value
            include_metadata: Prepend the front matter block

        Returns:
            ConversionResult whose metadata is always populated from the
            payload
        """
        storage = ((page_data.get('body') or {}).get('storage') or {}).get('value') or ''
        metadata = ConversionMetadata.from_page_data(page_data)

        result = self.convert_storage(storage, metadata if include_metadata else None)
        result.metadata = metadata.to_dict()

        for warning in result.warnings:
            logger.warning(f"Page {metadata.id}: {warning}")
        logger.debug(f"Converted page {metadata.id} ({len(result.markdown)} characters)")
        return result

    def markdown_to_xhtml(self, markdown: str) -> str:
        """Convert a markdown document to storage format.

        A leading front matter block is removed before encoding.

        Args:
            markdown: Markdown string

        Returns:
            XHTML string suitable for Confluence storage format
        """
        if not markdown:
            return ""
        _, body = FrontmatterHandler.extract(markdown)
        return self.body_to_xhtml(body)

    def body_to_xhtml(self, body: str) -> str:
        """Convert a markdown body (no front matter) to storage format.

        Reference-style links are expanded first. Malformed markdown never
        raises; constructs left open at end of input are closed.
        """
        if not body:
            return ""
        body = expand_link_references(body)
        storage = markdown_to_storage(body, max_nesting_depth=self.max_nesting_depth)
        return adapt_to_storage(storage)
