"""Tests for the InventoryScanner."""

import pytest

from upgrade_advisor.scanners import InventoryScanner, ScanMode, get_scanner, parse


class TestInventoryScanner:
    """Test suite for InventoryScanner."""

    @pytest.fixture
    def scanner(self) -> InventoryScanner:
        """Create an InventoryScanner instance."""
        return InventoryScanner()

    def test_mode_name(self, scanner: InventoryScanner):
        """Test that mode_name returns the correct value."""
        assert scanner.mode_name == "inventory"

    def test_parse_full_listing(self, scanner: InventoryScanner, winget_list_output: str):
        """Test parsing a listing with noise before the header."""
        packages = scanner.parse(winget_list_output)

        assert [p.id for p in packages] == [
            "7zip.7zip",
            "Git.Git",
            "Microsoft.WindowsCalculator",
            "Microsoft.Edge",
        ]

    def test_name_with_single_spaces_kept_whole(
        self, scanner: InventoryScanner, winget_list_output: str
    ):
        """Test that single spaces inside a name do not split the column."""
        packages = scanner.parse(winget_list_output)

        assert packages[0].name == "7-Zip 22.01 (x64)"
        assert packages[0].current_version == "22.01"

    def test_available_version_before_source(
        self, scanner: InventoryScanner, winget_list_output: str
    ):
        """Test that a version in front of the source is the available version."""
        seven_zip = scanner.parse(winget_list_output)[0]

        assert seven_zip.available_version == "23.01"
        assert seven_zip.source == "winget"
        assert seven_zip.has_update

    def test_source_without_available_version(
        self, scanner: InventoryScanner, winget_list_output: str
    ):
        """Test rows whose Available column is empty."""
        packages = {p.id: p for p in scanner.parse(winget_list_output)}

        assert packages["Git.Git"].available_version == ""
        assert packages["Git.Git"].source == "winget"
        assert packages["Microsoft.WindowsCalculator"].source == "msstore"

    def test_three_column_row_defaults_source(
        self, scanner: InventoryScanner, winget_list_output: str
    ):
        """Test that a row without a Source column gets the default source."""
        edge = scanner.parse(winget_list_output)[-1]

        assert edge.id == "Microsoft.Edge"
        assert edge.current_version == "118.0.2088.76"
        assert edge.source == "winget"

    def test_spec_example_line(self, scanner: InventoryScanner):
        """Test the canonical double-space separated line."""
        text = "Name  Id  Version  Available  Source\n" "7-Zip  7zip.7zip  22.01  23.01  winget\n"

        packages = scanner.parse(text)

        assert len(packages) == 1
        assert packages[0].name == "7-Zip"
        assert packages[0].id == "7zip.7zip"
        assert packages[0].current_version == "22.01"
        assert packages[0].available_version == "23.01"

    def test_four_field_row_uses_last_field_as_source(self, scanner: InventoryScanner):
        """Test that a fourth field is taken as the source when nothing looks like one."""
        text = "Name  Id  Version  Source\nTool  Vendor.Tool  1.0  chocolatey\n"

        packages = scanner.parse(text)

        assert packages[0].source == "chocolatey"
        assert packages[0].available_version == ""

    def test_short_rows_skipped(self, scanner: InventoryScanner):
        """Test that rows with fewer than three fields are dropped."""
        text = "Name  Id  Version\nOnlyName  Only.Id\n12 packages\nReal  Real.Id  1.0\n"

        packages = scanner.parse(text)

        assert [p.id for p in packages] == ["Real.Id"]

    def test_no_header_returns_empty(self, scanner: InventoryScanner):
        """Test that output without a header yields nothing."""
        assert scanner.parse("7-Zip  7zip.7zip  22.01  23.01  winget\n") == []

    def test_header_and_separator_only(self, scanner: InventoryScanner):
        """Test that a table without data rows yields nothing."""
        text = "Name   Id   Version   Available   Source\n---------------------------\n"

        assert scanner.parse(text) == []

    def test_empty_input(self, scanner: InventoryScanner):
        """Test that empty or missing input yields nothing."""
        assert scanner.parse("") == []
        assert scanner.parse(None) == []

    def test_no_blank_fields(self, scanner: InventoryScanner, winget_list_output: str):
        """Test that every record has a name, id and version."""
        for package in scanner.parse(winget_list_output):
            assert package.name
            assert package.id
            assert package.current_version


class TestScannerRegistry:
    """Tests for scanner lookup by mode."""

    def test_get_scanner_by_enum(self):
        assert isinstance(get_scanner(ScanMode.INVENTORY), InventoryScanner)

    def test_get_scanner_by_value(self):
        assert isinstance(get_scanner("inventory"), InventoryScanner)

    def test_get_scanner_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown scan mode"):
            get_scanner("outdated")

    def test_parse_shortcut(self, winget_list_output: str):
        packages = parse(winget_list_output, ScanMode.INVENTORY)

        assert len(packages) == 4
