"""Exception types raised inside upgrade_advisor.

Provider and transport failures are caught by the research orchestrator and
turned into per-package error descriptions; persistence failures are caught
by the report index. Nothing here is expected to reach the user as a
traceback.
"""

from pathlib import Path
from typing import Optional


class UpgradeAdvisorError(Exception):
    """Base class for all upgrade_advisor errors."""


class ProviderError(UpgradeAdvisorError):
    """An AI provider answered with a non-success response.

    Attributes:
        status_code: HTTP status code of the response.
        body: Raw response body.
    """

    def __init__(self, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Provider returned HTTP {status_code}: {body[:200]}")


class TransportError(UpgradeAdvisorError):
    """The request never produced an HTTP response (network, timeout)."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Transport failure: {cause!r}")


class PersistenceError(UpgradeAdvisorError):
    """A report file could not be written or read."""

    def __init__(self, path: Optional[Path], cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not access {path}: {cause}")
