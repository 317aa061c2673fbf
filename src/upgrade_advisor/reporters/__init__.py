"""Research report rendering, splitting and persistence.

This module provides the combined Markdown reporter, the splitter that
breaks a combined report into per-package documents, and the index of
persisted report files.
"""

from upgrade_advisor.reporters.base import BaseReporter
from upgrade_advisor.reporters.index import ReportIndex, safe_filename
from upgrade_advisor.reporters.markdown import MarkdownReporter
from upgrade_advisor.reporters.splitter import section_marker, split

__all__ = [
    "BaseReporter",
    "MarkdownReporter",
    "ReportIndex",
    "safe_filename",
    "section_marker",
    "split",
]
