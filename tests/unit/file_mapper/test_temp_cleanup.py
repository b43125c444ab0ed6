"""Unit tests for atomic writes in FileMapper."""

import os

import pytest

from src.file_mapper.errors import FilesystemError


class TestAtomicWrite:
    """Test cases for _write_file_atomic."""

    def test_creates_parent_directories(self, file_mapper, tmp_path):
        """Missing directories are created."""
        target = tmp_path / "a" / "b" / "page.md"

        file_mapper._write_file_atomic(str(target), "content")

        assert target.read_text(encoding='utf-8') == "content"

    def test_overwrites_existing_file(self, file_mapper, tmp_path):
        """An existing file is replaced."""
        target = tmp_path / "page.md"
        target.write_text("old", encoding='utf-8')

        file_mapper._write_file_atomic(str(target), "new")

        assert target.read_text(encoding='utf-8') == "new"

    def test_no_temp_file_left_on_success(self, file_mapper, tmp_path):
        """Only the target file remains after a write."""
        file_mapper._write_file_atomic(str(tmp_path / "page.md"), "content")

        assert os.listdir(tmp_path) == ["page.md"]

    def test_temp_file_removed_when_replace_fails(self, file_mapper, tmp_path, mocker):
        """A failed replace leaves neither target nor temp file."""
        mocker.patch(
            'src.file_mapper.file_mapper.os.replace',
            side_effect=OSError("disk full")
        )

        with pytest.raises(FilesystemError) as exc_info:
            file_mapper._write_file_atomic(str(tmp_path / "page.md"), "content")

        assert exc_info.value.operation == "write"
        assert "disk full" in str(exc_info.value)
        assert os.listdir(tmp_path) == []

    def test_directory_creation_failure(self, file_mapper, tmp_path, mocker):
        """A failing makedirs is reported with its own operation."""
        mocker.patch(
            'src.file_mapper.file_mapper.os.makedirs',
            side_effect=PermissionError("denied")
        )

        with pytest.raises(FilesystemError) as exc_info:
            file_mapper._write_file_atomic(str(tmp_path / "x" / "page.md"), "content")

        assert exc_info.value.operation == "create_directory"
