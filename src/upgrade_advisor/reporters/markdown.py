"""Markdown reporter for combined research reports.

This module renders the results of a research batch into one Markdown
document using a Jinja2 template. Each package section opens with the
section marker the splitter looks for.
"""

from dataclasses import dataclass
from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from upgrade_advisor.models import REPORT_HEADER, ResearchResult
from upgrade_advisor.prompts import (
    VERDICT_CONDITIONAL,
    VERDICT_NOT_RECOMMENDED,
    VERDICT_RECOMMENDED,
)
from upgrade_advisor.reporters.base import BaseReporter
from upgrade_advisor.reporters.splitter import FOOTER_MARKER, section_marker


@dataclass
class VerdictSummary:
    """Count of packages per verdict in a batch."""

    recommended: int = 0
    conditional: int = 0
    not_recommended: int = 0
    unknown: int = 0


def classify_verdict(analysis: str) -> Optional[str]:
    """Return the verdict marker that appears first in an analysis.

    Analyses often repeat the full verdict legend, so the earliest marker
    is taken as the verdict.
    """
    positions = {
        marker: analysis.find(marker)
        for marker in (VERDICT_RECOMMENDED, VERDICT_CONDITIONAL, VERDICT_NOT_RECOMMENDED)
    }
    found = {marker: pos for marker, pos in positions.items() if pos >= 0}
    if not found:
        return None
    return min(found, key=found.get)


def summarize(results: list[ResearchResult]) -> VerdictSummary:
    """Count verdicts across the successful results of a batch."""
    summary = VerdictSummary()
    for result in results:
        verdict = classify_verdict(result.analysis) if result.succeeded else None
        if verdict == VERDICT_RECOMMENDED:
            summary.recommended += 1
        elif verdict == VERDICT_CONDITIONAL:
            summary.conditional += 1
        elif verdict == VERDICT_NOT_RECOMMENDED:
            summary.not_recommended += 1
        else:
            summary.unknown += 1
    return summary


class MarkdownReporter(BaseReporter):
    """Reporter that renders a combined Markdown research report.

    Results with an empty analysis (provider not configured) are left out,
    so every section in the output carries either analysis or error text.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template.
        """
        if template_path:
            env = self._environment(FileSystemLoader(template_path.parent))
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    @staticmethod
    def _environment(loader=None) -> Environment:
        env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        env.globals["section_marker"] = section_marker
        return env

    def _load_default_template(self) -> Template:
        """Load the bundled Jinja2 template.

        Returns:
            The default template loaded from package resources.
        """
        template_content = (
            files("upgrade_advisor.templates")
            .joinpath("research_report.md.j2")
            .read_text(encoding="utf-8")
        )
        return self._environment().from_string(template_content)

    def render(
        self,
        results: list[ResearchResult],
        provider_name: str = "",
        model: Optional[str] = None,
    ) -> str:
        reported = [result for result in results if result.analysis]
        return self.template.render(
            header=REPORT_HEADER,
            footer_marker=FOOTER_MARKER,
            results=reported,
            summary=summarize(reported),
            provider_name=provider_name,
            model=model,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            The string "markdown".
        """
        return "markdown"

    @property
    def default_extension(self) -> str:
        """Return the default file extension for Markdown files.

        Returns:
            The string ".md".
        """
        return ".md"
