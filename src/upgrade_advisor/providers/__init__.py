"""AI analysis providers.

This module provides interchangeable adapters over the remote services used
for upgrade-risk analysis, selected by name from configuration.
"""

from typing import Any

from upgrade_advisor.providers.anthropic import AnthropicProvider
from upgrade_advisor.providers.base import (
    BaseProvider,
    HttpProvider,
    describe_error,
    sanitize_credentials,
)
from upgrade_advisor.providers.perplexity import PerplexityProvider

__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "HttpProvider",
    "PerplexityProvider",
    "PROVIDERS",
    "describe_error",
    "get_provider",
    "sanitize_credentials",
]

# Registry of providers by configuration name
PROVIDERS: dict[str, type[HttpProvider]] = {
    "anthropic": AnthropicProvider,
    "claude": AnthropicProvider,
    "perplexity": PerplexityProvider,
}


def get_provider(name: str, **kwargs: Any) -> HttpProvider:
    """Create the provider registered under a configuration name.

    Args:
        name: Provider name, case-insensitive ("anthropic", "claude", "perplexity").
        **kwargs: Passed to the provider constructor (timeout, max_retries, ...).

    Returns:
        A new provider instance.

    Raises:
        ValueError: If no provider is registered under the name.
    """
    provider_cls = PROVIDERS.get(name.strip().lower())
    if provider_cls is None:
        raise ValueError(
            f"Unknown AI provider '{name}'. "
            f"Supported providers: {', '.join(sorted(PROVIDERS))}"
        )
    return provider_cls(**kwargs)
