"""Root pytest configuration for all tests."""

import pytest

from src.content_converter import MarkdownConverter
from src.file_mapper import ConverterConfig, FileMapper


@pytest.fixture
def converter():
    """MarkdownConverter with default settings."""
    return MarkdownConverter()


@pytest.fixture
def file_mapper(tmp_path):
    """FileMapper whose default output directory is inside tmp_path."""
    return FileMapper(config=ConverterConfig(output_dir=str(tmp_path / "exports")))
