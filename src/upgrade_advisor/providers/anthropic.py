"""Anthropic Messages API provider.

Model-based reasoning over the analysis prompt. Authenticates with the raw
API key in the ``x-api-key`` header plus a fixed protocol version header.
"""

from typing import Any, Optional

from upgrade_advisor.providers.base import HttpProvider

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
MAX_TOKENS = 2500


class AnthropicProvider(HttpProvider):
    """Provider backed by Claude through the Anthropic Messages API.

    The response nests the analysis under ``content[0].text``.
    """

    endpoint = ANTHROPIC_MESSAGES_URL

    @property
    def name(self) -> str:
        """Return the provider name.

        Returns:
            The string "Claude".
        """
        return "Claude"

    def default_model(self) -> Optional[str]:
        return DEFAULT_MODEL

    def _build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _build_payload(self, prompt: str, model: Optional[str]) -> dict[str, Any]:
        return {
            "model": model or DEFAULT_MODEL,
            "max_tokens": MAX_TOKENS,
            "messages": [{"role": "user", "content": prompt}],
        }

    def _extract_text(self, data: Any) -> str:
        return data["content"][0]["text"]
