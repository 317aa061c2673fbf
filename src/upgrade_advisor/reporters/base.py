"""Base interface for research reporters.

Reporters turn the results of a research batch into a single formatted
document.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from upgrade_advisor.models import ResearchResult


class BaseReporter(ABC):
    """Abstract base class for research reporters."""

    @abstractmethod
    def render(
        self,
        results: list[ResearchResult],
        provider_name: str = "",
        model: Optional[str] = None,
    ) -> str:
        """Render research results to a formatted document.

        Args:
            results: Results of one research batch, in submission order.
            provider_name: Display name of the provider that ran the batch.
            model: Model selector used, if any.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(
        self,
        results: list[ResearchResult],
        output_path: Path,
        provider_name: str = "",
        model: Optional[str] = None,
    ) -> None:
        """Render and write output to a file."""
        content = self.render(results, provider_name, model)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format."""
        ...
