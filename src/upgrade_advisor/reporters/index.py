"""Persistent per-package report files and their in-memory index.

Each analysis document is written to ``<safe_key>_<timestamp>.md`` under
the reports directory. The index maps a package key to the newest report
file and can be rebuilt from the directory at any time.
"""

import logging
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional, Union

from upgrade_advisor.exceptions import PersistenceError
from upgrade_advisor.models import AnalysisDocument, ReportIndexEntry

logger = logging.getLogger(__name__)

DEFAULT_REPORTS_DIR = Path("AI_Reports")
REPORT_EXTENSION = ".md"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"
LEGACY_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Anchored on the trailing timestamp so keys may themselves contain underscores
REPORT_FILENAME_PATTERN = re.compile(
    r"^(?P<key>.+)_(?P<stamp>\d{8}_\d{6}(?:_\d{6})?)" + re.escape(REPORT_EXTENSION) + r"$"
)

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def safe_filename(key: str) -> str:
    """Replace characters that are invalid in file names with underscores.

    Args:
        key: Package key.

    Returns:
        A name safe to use as a filename prefix on Windows and POSIX.
    """
    safe = INVALID_FILENAME_CHARS.sub("_", key).strip().rstrip(".")
    return safe or "package"


def parse_report_filename(filename: str) -> Optional[tuple[str, Optional[datetime]]]:
    """Extract the key and timestamp from a report filename.

    Returns:
        (key, created_at) or None if the name does not follow the convention.
        created_at is None if the timestamp digits are not a valid date.
    """
    match = REPORT_FILENAME_PATTERN.match(filename)
    if match is None:
        return None

    stamp = match.group("stamp")
    fmt = TIMESTAMP_FORMAT if stamp.count("_") == 2 else LEGACY_TIMESTAMP_FORMAT
    try:
        created_at: Optional[datetime] = datetime.strptime(stamp, fmt)
    except ValueError:
        created_at = None
    return match.group("key"), created_at


class ReportIndex:
    """Index from package key to the newest persisted report file.

    Attributes:
        reports_dir: Absolute path of the reports directory.
    """

    def __init__(self, reports_dir: Union[Path, str, None] = None) -> None:
        """Initialize the index and load any existing reports.

        Args:
            reports_dir: Reports directory. Defaults to ``AI_Reports`` in the
                current working directory. Created if missing.
        """
        self.reports_dir = Path(reports_dir or DEFAULT_REPORTS_DIR).resolve()
        self._entries: dict[str, ReportIndexEntry] = {}

        try:
            self.reports_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create reports directory %s: %s", self.reports_dir, e)

        self.reload()

    def reload(self) -> dict[str, ReportIndexEntry]:
        """Rebuild the index from the report files on disk.

        Files for the same key are ordered by the timestamp in their name,
        so the newest report wins regardless of directory listing order.
        An unreadable directory yields an empty index.

        Returns:
            A copy of the rebuilt index.
        """
        self._entries = {}

        try:
            candidates = [path for path in self.reports_dir.iterdir() if path.is_file()]
        except OSError as e:
            logger.warning("Failed to load existing reports from %s: %s", self.reports_dir, e)
            return {}

        found: list[ReportIndexEntry] = []
        for path in candidates:
            parsed = parse_report_filename(path.name)
            if parsed is None:
                logger.debug("Ignoring file without report naming: %s", path.name)
                continue
            key, created_at = parsed
            found.append(ReportIndexEntry(key=key, path=path, created_at=created_at))

        found.sort(key=lambda entry: (entry.created_at or datetime.min, str(entry.path)))
        for entry in found:
            self._entries[entry.key] = entry

        logger.debug("Loaded %d report(s) from %s", len(self._entries), self.reports_dir)
        return dict(self._entries)

    def persist(self, key: str, document: AnalysisDocument) -> Path:
        """Write a document to a new timestamped file and index it.

        The previous file for the key stays on disk; only the index entry
        is replaced.

        Args:
            key: Package key. The index stores it in filename-safe form.
            document: Document to write.

        Returns:
            Path of the written file.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        created_at = datetime.now()
        path = self._report_path(key, created_at)
        while path.exists():
            created_at += timedelta(microseconds=1)
            path = self._report_path(key, created_at)

        try:
            path.write_text(document.render(), encoding="utf-8")
        except OSError as e:
            logger.error("Failed to save report for %s: %s", key, e)
            raise PersistenceError(path, e) from e

        # Same key form as reload()
        index_key = safe_filename(key)
        self._entries[index_key] = ReportIndexEntry(
            key=index_key, path=path, created_at=created_at
        )
        logger.debug("Saved report for %s to %s", key, path)
        return path

    def save_all(self, documents: Iterable[tuple[str, AnalysisDocument]]) -> int:
        """Persist every document, skipping the ones that fail.

        Returns:
            Number of reports written.
        """
        saved = 0
        for key, document in documents:
            try:
                self.persist(key, document)
            except PersistenceError:
                continue
            saved += 1
        return saved

    def _report_path(self, key: str, created_at: datetime) -> Path:
        filename = f"{safe_filename(key)}_{created_at.strftime(TIMESTAMP_FORMAT)}{REPORT_EXTENSION}"
        return self.reports_dir / filename

    def _lookup(self, key: str) -> Optional[ReportIndexEntry]:
        # Entries are keyed by the filename-safe form of the package key
        return self._entries.get(key) or self._entries.get(safe_filename(key))

    def get_path(self, key: str) -> Optional[Path]:
        """Return the indexed report path for a key, or None."""
        entry = self._lookup(key)
        return entry.path if entry else None

    def has_report(self, key: str) -> bool:
        return self._lookup(key) is not None

    def entries(self) -> dict[str, ReportIndexEntry]:
        """Return a copy of the index."""
        return dict(self._entries)

    def all_paths(self) -> dict[str, Path]:
        """Return a mapping of every key to its report path."""
        return {key: entry.path for key, entry in self._entries.items()}

    def __len__(self) -> int:
        return len(self._entries)
