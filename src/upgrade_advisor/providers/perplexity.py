"""Perplexity chat completions provider.

Web-search-augmented reasoning. Uses a bearer token, a fixed model and a
system message that frames the request as factual software research.
"""

from typing import Any, Optional

from upgrade_advisor.prompts import RESEARCH_SYSTEM_PROMPT
from upgrade_advisor.providers.base import HttpProvider

PERPLEXITY_CHAT_URL = "https://api.perplexity.ai/chat/completions"
PERPLEXITY_MODEL = "sonar"
MAX_TOKENS = 2000
TEMPERATURE = 0.1


class PerplexityProvider(HttpProvider):
    """Provider backed by the Perplexity chat completions API.

    The model is fixed; a model selector passed to ``request`` is ignored.
    The response nests the analysis under ``choices[0].message.content``.
    """

    endpoint = PERPLEXITY_CHAT_URL

    @property
    def name(self) -> str:
        """Return the provider name.

        Returns:
            The string "Perplexity".
        """
        return "Perplexity"

    def default_model(self) -> Optional[str]:
        return PERPLEXITY_MODEL

    def _build_headers(self, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    def _build_payload(self, prompt: str, model: Optional[str]) -> dict[str, Any]:
        return {
            "model": PERPLEXITY_MODEL,
            "messages": [
                {"role": "system", "content": RESEARCH_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    def _extract_text(self, data: Any) -> str:
        return data["choices"][0]["message"]["content"]
