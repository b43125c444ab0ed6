"""Main orchestration class for file mapping operations.

This module provides the FileMapper class which writes converted pages to
local markdown files and reads markdown files back for upload, with atomic
writes and path validation before any file is opened.
"""

import logging
import os
import tempfile
from pathlib import PurePath
from typing import Any, Dict, Optional

from src.content_converter import FrontmatterHandler, MarkdownConverter
from src.models import ConversionResult, UploadDocument
from .errors import FilesystemError, PathValidationError
from .filesafe_converter import FilesafeConverter
from .models import ConverterConfig, MarkdownConversionOptions


logger = logging.getLogger(__name__)


class FileMapper:
    """Maps Confluence pages to local markdown files and back.

    The FileMapper uses:
    - MarkdownConverter: For storage format ↔ markdown conversion
    - FilesafeConverter: For title-to-filename conversion
    - FrontmatterHandler: For the metadata block and title resolution

    Example:
        >>> mapper = FileMapper(config=ConfigLoader.load('converter.yaml'))
        >>> result = mapper.save_page_as_markdown(page_data)
        >>> document = mapper.load_markdown_for_upload('/abs/path/page.md')
    """

    def __init__(
        self,
        converter: Optional[MarkdownConverter] = None,
        config: Optional[ConverterConfig] = None
    ):
        """Initialize the file mapper.

        Args:
            converter: Optional MarkdownConverter. If not provided, one is
                      created from the configuration.
            config: Optional ConverterConfig (defaults when omitted)
        """
        self.config = config or ConverterConfig()
        if converter is None:
            converter = MarkdownConverter(
                page_link_scheme=self.config.page_link_scheme,
                max_nesting_depth=self.config.max_nesting_depth
            )
        self._converter = converter

    def save_page_as_markdown(
        self,
        page_data: Dict[str, Any],
        options: Optional[MarkdownConversionOptions] = None
    ) -> ConversionResult:
        """Convert a Confluence page and write it as a markdown file.

        Args:
            page_data: Page payload from the REST API (title, id, body.storage)
            options: Target path and metadata options

        Returns:
            ConversionResult with the markdown, the written file path and,
            when metadata was requested, the metadata record

        Raises:
            FilesystemError: If the directory or file cannot be written
        """
        options = options or MarkdownConversionOptions()
        include_metadata = options.include_metadata
        if include_metadata is None:
            include_metadata = self.config.include_metadata

        result = self._converter.page_to_markdown(page_data, include_metadata=include_metadata)
        file_path = self._target_path(page_data, options)

        self._write_file_atomic(file_path, result.markdown)
        logger.info(f"Saved page {page_data.get('id')} to {file_path}")

        result.file_path = file_path
        if not include_metadata:
            result.metadata = {}
        return result

    def _target_path(self, page_data: Dict[str, Any], options: MarkdownConversionOptions) -> str:
        if options.file_path:
            if options.file_path.endswith('.md'):
                return options.file_path
            return f"{options.file_path}.md"

        output_dir = options.output_dir or self.config.output_dir
        filename = FilesafeConverter.title_to_filename(page_data.get('title') or 'untitled')
        return os.path.join(output_dir, filename)

    def load_markdown_for_upload(self, file_path: str) -> UploadDocument:
        """Read a markdown file and convert it for upload.

        The path is validated before any filesystem access: it must be
        absolute and must not contain a '..' segment.

        Args:
            file_path: Absolute path of the markdown file

        Returns:
            UploadDocument with the resolved title, storage format content
            and front matter fields

        Raises:
            PathValidationError: If the path is relative or contains '..'
            FilesystemError: If the file is missing, too large or unreadable
        """
        self._validate_upload_path(file_path)

        if not os.path.isfile(file_path):
            raise FilesystemError(file_path, 'read', 'File not found')
        self._validate_file_size(file_path, self.config.max_file_size)

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except UnicodeDecodeError as e:
            raise FilesystemError(file_path, 'read', f'File is not valid UTF-8: {e}')
        except PermissionError:
            raise FilesystemError(file_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(file_path, 'read', str(e))

        front_matter, body = FrontmatterHandler.extract(content)
        title = FrontmatterHandler.resolve_title(front_matter, body, file_path)
        storage = self._converter.body_to_xhtml(body)

        logger.debug(f"Loaded {file_path} for upload as '{title}'")
        return UploadDocument(
            title=title,
            content=storage,
            metadata=front_matter or {}
        )

    def _validate_upload_path(self, file_path: str) -> None:
        """Reject relative paths and '..' segments without touching the filesystem.

        Raises:
            PathValidationError: If the path is empty, relative or contains '..'
        """
        if not file_path or not os.path.isabs(file_path):
            raise PathValidationError(file_path, 'Absolute file path required')
        if '..' in PurePath(file_path).parts:
            raise PathValidationError(file_path, 'Directory traversal not allowed')

    def _validate_file_size(self, file_path: str, max_size: int) -> None:
        """Validate that a file size is within acceptable limits.

        Args:
            file_path: Path to the file to check
            max_size: Maximum allowed file size in bytes

        Raises:
            FilesystemError: If file size exceeds maximum allowed size
        """
        try:
            file_size = os.path.getsize(file_path)
        except OSError as e:
            raise FilesystemError(
                file_path,
                'stat',
                f'Failed to check file size: {e}'
            )

        if file_size > max_size:
            size_mb = file_size / (1024 * 1024)
            max_mb = max_size / (1024 * 1024)
            raise FilesystemError(
                file_path,
                'read',
                f'File size ({size_mb:.2f} MB) exceeds maximum allowed size ({max_mb:.2f} MB)'
            )

    def _write_file_atomic(self, file_path: str, content: str) -> None:
        """Write a file through a temporary sibling and an atomic replace.

        Parent directories are created as needed. The temporary file is
        removed if the write fails.

        Raises:
            FilesystemError: If file operations fail
        """
        directory = os.path.dirname(file_path)
        if directory:
            try:
                os.makedirs(directory, exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    directory,
                    'create_directory',
                    str(e)
                )

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=directory or '.',
                prefix='.',
                suffix='.tmp'
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
            os.replace(temp_path, file_path)
        except OSError as e:
            logger.error(f"Failed to write {file_path}: {e}")
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError as cleanup_error:
                    logger.warning(f"Failed to remove temp file {temp_path}: {cleanup_error}")
            raise FilesystemError(
                file_path,
                'write',
                str(e)
            )
