"""Core data models for upgrade_advisor.

This module defines the data structures shared by the scanner, the research
orchestrator and the report index: package records parsed from winget
output, per-package research results, persisted analysis documents and
report index entries.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

# Primary catalog tag used when a table row does not name its source
DEFAULT_SOURCE = "winget"

# Status labels written by the orchestrator and the upgrade command
STATUS_ANALYZING = "Analyzing"
STATUS_ANALYZED = "Analyzed"
STATUS_FAILED = "Analysis failed"
STATUS_NOT_CONFIGURED = "AI provider not configured"
STATUS_UPGRADED = "Upgraded"
STATUS_UPGRADE_FAILED = "Upgrade failed"

REPORT_HEADER = "# 🧿 Upgrade Advisor AI Research Report"


@dataclass
class PackageRecord:
    """One row of package inventory.

    Created by a scanner for each accepted data line of a winget table.
    Versions are opaque strings and are only ever compared for equality.

    Attributes:
        name: Display name (not guaranteed unique).
        id: Package identifier, unique within one scan.
        current_version: Installed version.
        available_version: Version offered by the source, or "" if none.
        source: Origin catalog tag (e.g. "winget", "msstore").
        status: Short label describing the last operation outcome.
        recommendation: AI analysis text, empty until research runs.
    """

    name: str
    id: str
    current_version: str
    available_version: str = ""
    source: str = DEFAULT_SOURCE
    status: str = ""
    recommendation: str = ""

    @property
    def key(self) -> str:
        """Return the report index key: the name, falling back to the id."""
        return self.name or self.id

    @property
    def has_update(self) -> bool:
        """Return True if the source offers a different version."""
        return bool(self.available_version) and (
            self.available_version != self.current_version
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.id}) - {self.current_version} -> {self.available_version}"


@dataclass
class ResearchResult:
    """Analysis returned for one package during a research batch.

    Attributes:
        package: The record the analysis belongs to.
        analysis: Provider analysis text, or the error description on failure.
        error: Error description when the provider call failed.
    """

    package: PackageRecord
    analysis: str = ""
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.analysis)


@dataclass(frozen=True)
class AnalysisDocument:
    """A single package's section of a combined research report.

    Attributes:
        package_key: Key the document is indexed under.
        content: Section text, beginning with the package's section marker.
    """

    package_key: str
    content: str

    def render(self) -> str:
        """Return the text persisted to disk for this document."""
        return (
            f"{REPORT_HEADER}\n"
            "\n"
            f"## 📦 **{self.package_key}**\n"
            "\n"
            f"{self.content}"
        )


@dataclass(frozen=True)
class ReportIndexEntry:
    """Mapping from a package key to its persisted report file.

    Attributes:
        key: Package key (name, or id when the name is empty).
        path: Absolute path of the report file.
        created_at: Timestamp parsed from the filename, if recognizable.
    """

    key: str
    path: Path
    created_at: Optional[datetime] = None
