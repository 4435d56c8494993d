import pytest
from cvault_files.errors import InvalidPath
from cvault_files.utils.paths import sanitize_path


class TestSanitizePath:
    """Test suite for the sanitize_path function."""

    def test_simple_path(self):
        """Test sanitization of a simple valid path."""
        assert sanitize_path("folder/file.txt") == "folder/file.txt"

    def test_path_with_spaces(self):
        """Test sanitization of path with spaces."""
        assert sanitize_path("my folder/my file.txt") == "my folder/my file.txt"

    def test_path_with_special_chars(self):
        """Test sanitization of path with all allowed special characters."""
        result = sanitize_path("my-folder_v2/file(1)[draft]:backup.txt")
        assert result == "my-folder_v2/file(1)[draft]:backup.txt"

    def test_filename_with_consecutive_dots(self):
        """Test that dots inside a file name are allowed."""
        assert sanitize_path("folder/file..txt") == "folder/file..txt"
        assert sanitize_path("folder/..config") == "folder/..config"
        assert sanitize_path("folder/.hidden") == "folder/.hidden"

    def test_trailing_slash_is_kept(self):
        """Test that folder prefixes keep their trailing slash."""
        assert sanitize_path("docs/") == "docs/"
        assert sanitize_path("docs/2024/") == "docs/2024/"

    def test_leading_slash_removal(self):
        """Test that absolute looking paths become relative."""
        assert sanitize_path("/folder/file.txt") == "folder/file.txt"
        assert sanitize_path("///folder/file.txt") == "folder/file.txt"

    def test_newline_and_carriage_return_removal(self):
        """Test that line breaks are removed."""
        assert sanitize_path("folder/file\r\n.txt") == "folder/file.txt"

    def test_empty_path(self):
        """Test sanitization of empty path."""
        assert sanitize_path("") == ""
        assert sanitize_path("/") == ""

    def test_none_path_raises_error(self):
        """Test that None is not a path."""
        with pytest.raises(InvalidPath):
            sanitize_path(None)

    @pytest.mark.parametrize("path", ["../etc/passwd", "folder/../etc/passwd", "folder/..", "..", "a/../../b/"])
    def test_directory_traversal_raises_error(self, path):
        """Test that paths with '..' as path component raise InvalidPath."""
        with pytest.raises(InvalidPath) as exc_info:
            sanitize_path(path)
        assert "Invalid path: '..' not allowed" in str(exc_info.value)

    def test_current_directory_component_raises_error(self):
        """Test that '.' path components are rejected."""
        with pytest.raises(InvalidPath):
            sanitize_path("./folder/file.txt")

    def test_empty_component_raises_error(self):
        """Test that double separators are rejected."""
        with pytest.raises(InvalidPath):
            sanitize_path("folder//file.txt")

    @pytest.mark.parametrize("path", ["folder/*.txt", "folder/file?.txt", "folder/file|.txt", "folder/file<.txt",
                                      "folder/file>.txt", 'folder/file".txt', "folder\\file.txt", "folder/fi\x00le"])
    def test_forbidden_character_raises_error(self, path):
        """Test that paths with forbidden characters raise InvalidPath."""
        with pytest.raises(InvalidPath) as exc_info:
            sanitize_path(path)
        assert "Invalid path: contains forbidden characters" in str(exc_info.value)

    def test_invalid_path_is_a_value_error(self):
        """Test that callers catching ValueError still catch invalid paths."""
        with pytest.raises(ValueError):
            sanitize_path("../secret")
