"""Base interface for AI analysis providers.

Providers send a rendered analysis prompt to a remote AI service and return
the analysis text. Each call builds its own headers and payload; the shared
aiohttp session only pools connections.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp

from upgrade_advisor.exceptions import ProviderError, TransportError
from upgrade_advisor.models import PackageRecord
from upgrade_advisor.prompts import build_prompt

logger = logging.getLogger(__name__)

# Rate limited (429) and overloaded (529) responses are worth retrying
RETRYABLE_STATUSES = frozenset({429, 529})

DEFAULT_TIMEOUT = 120.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0


def sanitize_credentials(credentials: Optional[str]) -> str:
    """Trim an API key and drop any embedded line breaks."""
    if not credentials:
        return ""
    return credentials.strip().replace("\n", "").replace("\r", "")


def describe_error(error: Exception, provider_name: str) -> str:
    """Turn a provider failure into a short description for the report.

    Args:
        error: The ProviderError or TransportError raised by a provider.
        provider_name: Display name of the provider.

    Returns:
        A markdown-friendly description of the failure.
    """
    if isinstance(error, TransportError):
        return (
            f"⚠️ **{provider_name} Connection Error**\n\n"
            "The analysis service could not be reached. Check your network "
            "connection and try again."
        )

    if not isinstance(error, ProviderError):
        return f"{provider_name} analysis failed: {type(error).__name__}"

    if error.status_code == 429:
        return (
            f"⚠️ **{provider_name} Rate Limit Exceeded**\n\n"
            "The API is receiving too many requests. Wait a few minutes and "
            "try again, or analyze a smaller batch of packages."
        )
    if error.status_code == 529:
        return (
            f"⚠️ **{provider_name} Service Temporarily Overloaded**\n\n"
            "The AI service is experiencing high demand. Try again in a few "
            "minutes or switch providers."
        )
    if error.status_code == 401:
        return (
            f"🔑 **{provider_name} Authentication Error**\n\n"
            "Your API key appears to be invalid or expired. Check it in your "
            "settings."
        )
    if error.status_code == 402:
        return (
            f"💳 **{provider_name} Account Issue**\n\n"
            f"Your account may have exceeded usage limits. Check your account "
            f"status on the {provider_name} dashboard."
        )
    return f"{provider_name} API Error {error.status_code}: {error.body[:500]}"


class BaseProvider(ABC):
    """Abstract base class for AI analysis providers."""

    @abstractmethod
    async def request(
        self,
        prompt: str,
        credentials: Optional[str],
        model: Optional[str] = None,
    ) -> str:
        """Send a prompt and return the analysis text.

        Args:
            prompt: Rendered analysis prompt.
            credentials: API key. If missing, no request is made.
            model: Optional model selector.

        Returns:
            The analysis text, or "" when credentials are missing.

        Raises:
            ProviderError: On a non-success HTTP response.
            TransportError: On a network failure or timeout.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name for logs and reports.

        Returns:
            Name like "Claude" or "Perplexity".
        """
        ...

    def default_model(self) -> Optional[str]:
        """Return the model used when no selector is given."""
        return None

    async def analyze(
        self,
        package: PackageRecord,
        credentials: Optional[str],
        model: Optional[str] = None,
    ) -> str:
        """Build the analysis prompt for a package and send it."""
        prompt = build_prompt(
            package.name,
            package.id,
            package.current_version,
            package.available_version,
        )
        return await self.request(prompt, credentials, model)

    async def close(self) -> None:
        """Release any open resources."""

    async def __aenter__(self) -> "BaseProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()


class HttpProvider(BaseProvider):
    """Base class for providers that POST JSON to an HTTP endpoint.

    Manages a lazily created aiohttp.ClientSession with a per-request
    timeout and retries rate-limited responses and transport failures
    with exponential backoff.

    Attributes:
        timeout: Total seconds allowed for one HTTP request.
        max_retries: Retries after the first attempt.
        base_delay: Backoff base in seconds (delay = base * 2**attempt).
    """

    endpoint: str = ""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def request(
        self,
        prompt: str,
        credentials: Optional[str],
        model: Optional[str] = None,
    ) -> str:
        api_key = sanitize_credentials(credentials)
        if not api_key:
            logger.info("%s API key not configured, skipping request", self.name)
            return ""

        payload = self._build_payload(prompt, model or self.default_model())
        data = await self._post(self._build_headers(api_key), payload)

        try:
            return self._extract_text(data) or ""
        except (KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected %s response shape: %s", self.name, e)
            raise ProviderError(200, json.dumps(data)[:500]) from e

    async def _post(self, headers: dict[str, str], payload: dict[str, Any]) -> Any:
        """POST a JSON payload and return the decoded response body.

        Args:
            headers: Headers for this request only.
            payload: JSON-serializable request body.

        Returns:
            The decoded JSON response.

        Raises:
            ProviderError: On a non-success response once retries are exhausted.
            TransportError: On a network failure once retries are exhausted.
        """
        for attempt in range(self.max_retries + 1):
            try:
                session = await self._get_session()
                logger.debug("POST %s (attempt %d)", self.endpoint, attempt + 1)
                async with session.post(self.endpoint, json=payload, headers=headers) as response:
                    try:
                        body = await response.text()
                    except UnicodeDecodeError as e:
                        logger.error("Undecodable %s response body: %s", self.name, e)
                        raise ProviderError(response.status, "<undecodable response body>") from e

                    if response.status in RETRYABLE_STATUSES and attempt < self.max_retries:
                        delay = self._backoff(attempt)
                        logger.warning(
                            "%s returned %d, retrying in %.1fs",
                            self.name,
                            response.status,
                            delay,
                        )
                        await asyncio.sleep(delay)
                        continue

                    if not 200 <= response.status < 300:
                        logger.error("%s API returned status %d", self.name, response.status)
                        raise ProviderError(response.status, body)

                    try:
                        return json.loads(body)
                    except json.JSONDecodeError as e:
                        logger.error("Failed to decode %s response: %s", self.name, e)
                        raise ProviderError(response.status, body) from e

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt < self.max_retries:
                    delay = self._backoff(attempt)
                    logger.warning(
                        "Network error calling %s: %s, retrying in %.1fs",
                        self.name,
                        e,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error("Network error calling %s: %s", self.name, e)
                raise TransportError(e) from e

        # Unreachable: the final attempt either returns or raises
        raise TransportError(RuntimeError("retries exhausted"))

    def _backoff(self, attempt: int) -> float:
        return self.base_delay * (2**attempt)

    @abstractmethod
    def _build_headers(self, api_key: str) -> dict[str, str]:
        """Return the authentication headers for one request."""
        ...

    @abstractmethod
    def _build_payload(self, prompt: str, model: Optional[str]) -> dict[str, Any]:
        """Return the JSON body for one request."""
        ...

    @abstractmethod
    def _extract_text(self, data: Any) -> str:
        """Pull the analysis text out of a decoded response."""
        ...
