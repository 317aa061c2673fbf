"""Base interface for winget table scanners.

Scanners turn the raw text printed by a winget command into package
records. The fixed-width table layout is shared by every winget verb, so
the line handling lives here and subclasses only map columns to fields.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from upgrade_advisor.models import PackageRecord

logger = logging.getLogger(__name__)

# Catalog tags winget prints in its Source column
KNOWN_SOURCES = ("winget", "msstore")

# Two or more consecutive whitespace characters delimit columns
COLUMN_DELIMITER = re.compile(r"\s{2,}")

# Rule lines drawn under the header
SEPARATOR_PATTERN = re.compile(r"^[-─━]{2,}")

# ANSI escapes and the block glyphs winget uses for progress bars
ANSI_PATTERN = re.compile(r"\x1B\[[0-9;?]*[A-Za-z]")
PROGRESS_PATTERN = re.compile(r"[█▒░]+")

LINE_BREAK = re.compile(r"[\r\n]+")


def looks_like_source(token: str) -> bool:
    """Return True if a table cell looks like a source tag rather than a version.

    winget leaves the Available column empty for some rows, which shifts the
    Source value one column to the left once the line is split on
    whitespace runs. A case-insensitive substring match against the known
    catalog tags is the only signal available.

    Args:
        token: A single field from a split table row.

    Returns:
        True if the token contains a known source tag.
    """
    lowered = token.lower()
    return any(source in lowered for source in KNOWN_SOURCES)


def find_source(fields: list[str]) -> Optional[str]:
    """Return the first field that looks like a source tag, if any."""
    for field in fields:
        if looks_like_source(field):
            return field
    return None


def is_header(line: str) -> bool:
    """Check whether a line is the table header."""
    stripped = line.strip()
    return stripped.startswith("Name") and "Id" in stripped and "Version" in stripped


def is_separator(line: str) -> bool:
    """Check whether a line is a rule line under the header."""
    return bool(SEPARATOR_PATTERN.match(line.strip()))


def clean_output(raw_text: str) -> str:
    """Remove ANSI escape sequences and progress bars from winget output."""
    cleaned = ANSI_PATTERN.sub("", raw_text)
    return PROGRESS_PATTERN.sub("", cleaned)


def split_columns(line: str) -> list[str]:
    """Split a data line into fields on runs of two or more spaces."""
    return [field for field in COLUMN_DELIMITER.split(line.strip()) if field]


class BaseScanner(ABC):
    """Abstract base class for winget table scanners.

    Subclasses declare the minimum number of columns a row needs and how
    those columns map onto a PackageRecord.
    """

    #: Rows with fewer fields than this are skipped
    min_fields: int = 3

    def parse(self, raw_text: Optional[str]) -> list[PackageRecord]:
        """Parse raw command output into package records.

        Lines before the header are discarded, separator and blank lines
        are skipped, and rows that cannot be interpreted are dropped
        without failing the batch.

        Args:
            raw_text: Text printed by winget. May be empty or None.

        Returns:
            Records in table order. Empty if no header was found.
        """
        if not raw_text:
            return []

        lines = [line for line in LINE_BREAK.split(clean_output(raw_text)) if line.strip()]

        records: list[PackageRecord] = []
        header_found = False

        for line in lines:
            if not header_found:
                header_found = is_header(line)
                continue

            # winget repeats the header for packages that require explicit targeting
            if is_header(line) or is_separator(line):
                continue

            fields = split_columns(line)
            if len(fields) < self.min_fields:
                logger.debug("Skipping line with %d field(s): %s", len(fields), line.strip())
                continue

            record = self._parse_fields(fields)
            if record is None:
                logger.debug("Skipping malformed line: %s", line.strip())
                continue
            records.append(record)

        if not header_found:
            logger.debug("No table header found in %s output", self.mode_name)

        return records

    @abstractmethod
    def _parse_fields(self, fields: list[str]) -> Optional[PackageRecord]:
        """Map the fields of a single row to a record.

        Args:
            fields: Row fields; at least ``min_fields`` of them.

        Returns:
            A PackageRecord, or None if the row is malformed.
        """
        ...

    @property
    @abstractmethod
    def mode_name(self) -> str:
        """Return a human-readable name for the scan mode."""
        ...
