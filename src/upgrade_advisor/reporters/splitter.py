"""Split a combined research report into per-package documents.

The combined report opens every package section with a marker line of the
form ``### 🔍 **<key>**``. Splitting scans line by line: each marker starts
a new section, text before the first marker is dropped, and the footer
marker closes the last section.
"""

import logging
from typing import Iterable

from upgrade_advisor.models import AnalysisDocument, PackageRecord

logger = logging.getLogger(__name__)

SECTION_MARKER_PREFIX = "### 🔍 **"
SECTION_MARKER_SUFFIX = "**"
FOOTER_MARKER = "## 📄 **Report Footer**"


def section_marker(key: str) -> str:
    """Return the marker line that opens a package's section."""
    return f"{SECTION_MARKER_PREFIX}{key}{SECTION_MARKER_SUFFIX}"


def is_section_marker(line: str) -> bool:
    return line.startswith(SECTION_MARKER_PREFIX) and line.rstrip().endswith(
        SECTION_MARKER_SUFFIX
    )


def marker_key(line: str) -> str:
    """Extract the package key from a marker line."""
    key = line.rstrip()[len(SECTION_MARKER_PREFIX) :]
    if key.endswith(SECTION_MARKER_SUFFIX):
        key = key[: -len(SECTION_MARKER_SUFFIX)]
    return key.strip()


def _opens_section(line: str, known: dict[str, PackageRecord]) -> bool:
    if not is_section_marker(line):
        return False
    # With a known batch, marker-shaped lines inside an analysis are content
    if known and marker_key(line) not in known:
        logger.debug("Treating unknown section marker as content: %s", line.strip())
        return False
    return True


def split(
    combined_document: str,
    known_packages: Iterable[PackageRecord] = (),
) -> list[tuple[str, AnalysisDocument]]:
    """Split a combined report into one document per package section.

    Args:
        combined_document: Report rendered by MarkdownReporter.
        known_packages: Packages of the batch. A marker naming a package's
            name or id is keyed by that package's key. When packages are
            given, markers naming anything else stay in the current section.

    Returns:
        (key, document) pairs in report order. Each document's content
        begins with its own marker line.
    """
    packages = list(known_packages)
    known: dict[str, PackageRecord] = {package.id: package for package in packages}
    # Names win over ids when both collide
    known.update({package.name: package for package in packages if package.name})

    sections: list[tuple[str, AnalysisDocument]] = []
    current_key = None
    current_lines: list[str] = []

    def flush() -> None:
        if current_key is not None:
            sections.append(
                (current_key, AnalysisDocument(current_key, "\n".join(current_lines).rstrip() + "\n"))
            )

    for line in combined_document.splitlines():
        if _opens_section(line, known):
            flush()
            marker = marker_key(line)
            current_key = known[marker].key if marker in known else marker
            current_lines = [line]
        elif line.strip() == FOOTER_MARKER:
            flush()
            current_key = None
            current_lines = []
        elif current_key is not None:
            current_lines.append(line)

    flush()

    logger.debug("Split combined report into %d document(s)", len(sections))
    return sections
