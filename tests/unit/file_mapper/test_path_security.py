"""Unit tests for upload path validation in FileMapper.

Rejected paths must fail before any filesystem call is made.
"""

import pytest

from src.file_mapper.errors import FilesystemError, PathValidationError


class TestUploadPathValidation:
    """Test cases for path rejection in load_markdown_for_upload()."""

    @pytest.fixture
    def filesystem_mocks(self, mocker):
        """Spies on every filesystem entry point used by the loader."""
        return {
            'isfile': mocker.patch('src.file_mapper.file_mapper.os.path.isfile'),
            'getsize': mocker.patch('src.file_mapper.file_mapper.os.path.getsize'),
            'open': mocker.patch('builtins.open'),
        }

    @pytest.mark.parametrize("path", [
        "../../etc/passwd",
        "docs/page.md",
        "",
    ])
    def test_relative_paths_rejected(self, file_mapper, filesystem_mocks, path):
        """Relative and empty paths are rejected before any file access."""
        with pytest.raises(PathValidationError) as exc_info:
            file_mapper.load_markdown_for_upload(path)

        assert "Absolute file path required" in str(exc_info.value)
        for mock in filesystem_mocks.values():
            mock.assert_not_called()

    @pytest.mark.parametrize("path", [
        "/srv/docs/../../etc/passwd",
        "/srv/docs/..",
    ])
    def test_traversal_rejected(self, file_mapper, filesystem_mocks, path):
        """Absolute paths with '..' segments are rejected."""
        with pytest.raises(PathValidationError) as exc_info:
            file_mapper.load_markdown_for_upload(path)

        assert "Directory traversal not allowed" in str(exc_info.value)
        for mock in filesystem_mocks.values():
            mock.assert_not_called()

    def test_dots_inside_names_allowed(self, file_mapper, tmp_path):
        """'..' inside a file name is not a traversal segment."""
        path = tmp_path / "v1..v2.md"
        path.write_text("# Diff\n", encoding='utf-8')

        assert file_mapper.load_markdown_for_upload(str(path)).title == "Diff"

    def test_rejection_is_filesystem_error(self, file_mapper):
        """Callers catching FilesystemError also see path rejections."""
        with pytest.raises(FilesystemError):
            file_mapper.load_markdown_for_upload("relative.md")
