"""Tests for remote path helpers."""

from __future__ import annotations

from ncbridge.core.paths import basename, encode_path, join_path, normalize_path


class TestPaths:
    """Tests for path normalization and encoding."""

    def test_normalize_trims_slashes(self) -> None:
        """Should drop leading, trailing and repeated slashes."""
        assert normalize_path("/Documents//Reports/") == "Documents/Reports"
        assert normalize_path("/") == ""

    def test_normalize_backslashes(self) -> None:
        """Should treat backslashes as separators."""
        assert normalize_path("a\\b\\c.txt") == "a/b/c.txt"

    def test_encode_each_segment(self) -> None:
        """Should percent-encode segments but keep separators."""
        assert encode_path("/Documents/my file.pdf") == "Documents/my%20file.pdf"
        assert encode_path("a#b/c?d/100%") == "a%23b/c%3Fd/100%25"

    def test_join_ignores_empty_parts(self) -> None:
        """Should join parts and ignore empty ones."""
        assert join_path("WordPress", "", "uploads/", "/2024") == "WordPress/uploads/2024"
        assert join_path("", "a.txt") == "a.txt"

    def test_basename(self) -> None:
        """Should return the last segment."""
        assert basename("a/b/c.txt") == "c.txt"
        assert basename("") == ""
