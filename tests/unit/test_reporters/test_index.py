"""Tests for persisted per-package reports and the report index."""

from datetime import datetime
from pathlib import Path

import pytest

from upgrade_advisor.exceptions import PersistenceError
from upgrade_advisor.models import AnalysisDocument
from upgrade_advisor.reporters import ReportIndex, safe_filename
from upgrade_advisor.reporters.index import parse_report_filename


@pytest.fixture
def reports_dir(tmp_path: Path) -> Path:
    return tmp_path / "AI_Reports"


@pytest.fixture
def index(reports_dir: Path) -> ReportIndex:
    return ReportIndex(reports_dir)


def _document(key: str, body: str = "body") -> AnalysisDocument:
    return AnalysisDocument(key, f"### 🔍 **{key}**\n{body}\n")


class TestFilenames:
    def test_safe_filename(self):
        assert safe_filename("7-Zip 22.01 (x64)") == "7-Zip 22.01 (x64)"
        assert safe_filename('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
        assert safe_filename("") == "package"

    def test_parse_filename_with_microseconds(self):
        key, created_at = parse_report_filename("Git_20240102_030405_123456.md")

        assert key == "Git"
        assert created_at == datetime(2024, 1, 2, 3, 4, 5, 123456)

    def test_parse_legacy_filename(self):
        key, created_at = parse_report_filename("Windows_Terminal_20240102_030405.md")

        assert key == "Windows_Terminal"
        assert created_at == datetime(2024, 1, 2, 3, 4, 5)

    def test_parse_rejects_other_names(self):
        assert parse_report_filename("notes.md") is None
        assert parse_report_filename("Git_20240102_030405.txt") is None


class TestPersist:
    def test_creates_directory(self, reports_dir: Path, index: ReportIndex):
        assert reports_dir.is_dir()
        assert len(index) == 0

    def test_persist_writes_rendered_document(self, index: ReportIndex):
        document = _document("Git")

        path = index.persist("Git", document)

        assert path.exists()
        assert path.name.startswith("Git_")
        assert path.suffix == ".md"
        assert path.read_text(encoding="utf-8") == document.render()
        assert index.get_path("Git") == path
        assert index.has_report("Git")

    def test_persist_twice_keeps_both_files(self, index: ReportIndex):
        first = index.persist("Git", _document("Git", "old"))
        second = index.persist("Git", _document("Git", "new"))

        assert first != second
        assert first.exists()
        assert second.exists()
        assert index.get_path("Git") == second

    def test_unsafe_key(self, index: ReportIndex):
        path = index.persist("Vendor/Tool", _document("Vendor/Tool"))

        assert path.parent == index.reports_dir
        assert path.name.startswith("Vendor_Tool_")
        assert index.get_path("Vendor/Tool") == path

    def test_write_failure_raises(self, index: ReportIndex, mocker):
        mocker.patch.object(Path, "write_text", side_effect=OSError("disk full"))

        with pytest.raises(PersistenceError):
            index.persist("Git", _document("Git"))

        assert not index.has_report("Git")

    def test_save_all_skips_failures(self, index: ReportIndex, mocker):
        original_write = Path.write_text

        def write_text(path, data, *args, **kwargs):
            if path.name.startswith("Bad_"):
                raise OSError("denied")
            return original_write(path, data, *args, **kwargs)

        mocker.patch.object(Path, "write_text", autospec=True, side_effect=write_text)

        saved = index.save_all([("Good", _document("Good")), ("Bad", _document("Bad"))])

        assert saved == 1
        assert index.has_report("Good")
        assert not index.has_report("Bad")


class TestReload:
    def test_reload_finds_persisted_reports(self, reports_dir: Path, index: ReportIndex):
        index.persist("Git", _document("Git"))
        index.persist("7-Zip", _document("7-Zip"))

        reloaded = ReportIndex(reports_dir)

        assert set(reloaded.entries()) == {"Git", "7-Zip"}
        assert reloaded.get_path("Git") == index.get_path("Git")

    def test_reload_is_idempotent(self, reports_dir: Path, index: ReportIndex):
        index.persist("Git", _document("Git", "one"))
        index.persist("Git", _document("Git", "two"))

        first = index.reload()
        second = index.reload()

        assert first == second
        assert first["Git"].path == index.get_path("Git")

    def test_newest_report_wins(self, reports_dir: Path):
        reports_dir.mkdir(parents=True)
        (reports_dir / "Git_20240102_120000.md").write_text("newer", encoding="utf-8")
        (reports_dir / "Git_20240101_120000.md").write_text("older", encoding="utf-8")
        (reports_dir / "Git_20231231_235959_999999.md").write_text("oldest", encoding="utf-8")

        index = ReportIndex(reports_dir)

        assert index.get_path("Git").name == "Git_20240102_120000.md"
        assert len(index) == 1

    def test_other_files_ignored(self, reports_dir: Path):
        reports_dir.mkdir(parents=True)
        (reports_dir / "README.txt").write_text("notes", encoding="utf-8")
        (reports_dir / "Git_20240101_120000.md").write_text("report", encoding="utf-8")

        index = ReportIndex(reports_dir)

        assert list(index.entries()) == ["Git"]

    def test_reloaded_unsafe_key_found_by_raw_key(self, reports_dir: Path, index: ReportIndex):
        path = index.persist("Vendor/Tool", _document("Vendor/Tool"))

        reloaded = ReportIndex(reports_dir)

        assert reloaded.get_path("Vendor/Tool") == path

    def test_reload_keeps_unsafe_key_entries(self, index: ReportIndex):
        index.persist("Foo: Bar", _document("Foo: Bar"))
        before = index.entries()

        after = index.reload()

        assert after == before
        assert list(after) == ["Foo_ Bar"]

    def test_persist_after_reload_replaces_unsafe_key_entry(self, index: ReportIndex):
        index.persist("Foo: Bar", _document("Foo: Bar", "one"))
        index.reload()

        path = index.persist("Foo: Bar", _document("Foo: Bar", "two"))

        assert len(index) == 1
        assert index.get_path("Foo: Bar") == path

    def test_unreadable_directory_gives_empty_index(self, reports_dir: Path, mocker):
        mocker.patch.object(Path, "iterdir", side_effect=PermissionError("denied"))

        index = ReportIndex(reports_dir)

        assert len(index) == 0
        assert index.reload() == {}

    def test_all_paths(self, index: ReportIndex):
        path = index.persist("Git", _document("Git"))

        assert index.all_paths() == {"Git": path}
