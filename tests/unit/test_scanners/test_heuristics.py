"""Tests for the line and column helpers shared by all scanners."""

import pytest

from upgrade_advisor.scanners.base import (
    clean_output,
    find_source,
    is_header,
    is_separator,
    looks_like_source,
    split_columns,
)


class TestLooksLikeSource:
    """Tests for the source tag heuristic."""

    @pytest.mark.parametrize("token", ["winget", "msstore", "WinGet", "MSSTORE"])
    def test_known_sources(self, token: str):
        assert looks_like_source(token)

    @pytest.mark.parametrize("token", ["23.01", "1.0.9015", "Unknown", "< 2.0"])
    def test_versions_are_not_sources(self, token: str):
        assert not looks_like_source(token)

    def test_substring_match(self):
        """Test that any token containing a known tag is treated as a source."""
        assert looks_like_source("Microsoft.WingetCreate")

    def test_find_source_returns_first_match(self):
        assert find_source(["1.0", "msstore", "winget"]) == "msstore"

    def test_find_source_none(self):
        assert find_source(["1.0", "2.0"]) is None
        assert find_source([]) is None


class TestLineHelpers:
    """Tests for header, separator and column handling."""

    def test_is_header(self):
        assert is_header("Name   Id   Version   Available   Source")
        assert is_header("  Name   Id   Version")

    def test_is_header_requires_all_columns(self):
        assert not is_header("Name   Version")
        assert not is_header("Id   Name   Version")

    def test_is_separator(self):
        assert is_separator("-----------------------")
        assert is_separator("────────────")
        assert not is_separator("- item")

    def test_split_columns_on_whitespace_runs(self):
        fields = split_columns("  7-Zip 22.01 (x64)    7zip.7zip  22.01\t\t23.01  ")

        assert fields == ["7-Zip 22.01 (x64)", "7zip.7zip", "22.01", "23.01"]

    def test_clean_output_strips_ansi_and_progress(self):
        raw = "\x1b[2K\x1b[32mok\x1b[0m ██████▒▒▒ done"

        assert clean_output(raw) == "ok  done"
