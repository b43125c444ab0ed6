"""File mapper library for Confluence page export and upload.

This package writes converted Confluence pages to local markdown files with
a metadata front matter block, and reads markdown files back as storage
format for upload.
"""

from .file_mapper import FileMapper
from .models import ConverterConfig, MarkdownConversionOptions
from .errors import (
    FileMapperError,
    FilesystemError,
    PathValidationError,
    ConfigError,
)
from .config_loader import ConfigLoader
from .filesafe_converter import FilesafeConverter

__all__ = [
    'FileMapper',
    'ConverterConfig',
    'MarkdownConversionOptions',
    'FileMapperError',
    'FilesystemError',
    'PathValidationError',
    'ConfigError',
    'ConfigLoader',
    'FilesafeConverter',
]
