"""Upgrade Advisor - AI-assisted upgrade research for winget packages.

This package scans installed and upgradable packages through winget, asks
an AI provider for an upgrade-risk analysis of selected packages, and keeps
per-package Markdown reports on disk.
"""

__version__ = "0.1.0"

from upgrade_advisor.models import (
    AnalysisDocument,
    PackageRecord,
    ReportIndexEntry,
    ResearchResult,
)

__all__ = [
    "__version__",
    "AnalysisDocument",
    "PackageRecord",
    "ReportIndexEntry",
    "ResearchResult",
]
