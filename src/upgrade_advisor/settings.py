"""Flat key-value settings stored in a JSON file.

Settings supply provider credentials, the active provider and model, and a
few runtime knobs. A missing file or key is never an error: callers get the
default and the dependent feature reports itself as unavailable.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path("settings.json")

# Settings keys
ANTHROPIC_API_KEY = "anthropic_api_key"
PERPLEXITY_API_KEY = "perplexity_api_key"
AI_PROVIDER = "ai_provider"
AI_MODEL = "ai_model"
REPORTS_DIR = "reports_dir"
CONCURRENCY_LIMIT = "concurrency_limit"
REQUEST_TIMEOUT = "request_timeout"

DEFAULT_PROVIDER = "anthropic"

# Which credential each provider name reads
CREDENTIAL_KEYS = {
    "anthropic": ANTHROPIC_API_KEY,
    "claude": ANTHROPIC_API_KEY,
    "perplexity": PERPLEXITY_API_KEY,
}


class Settings:
    """Key-value settings backed by a JSON document.

    Attributes:
        path: Location of the settings file.
    """

    def __init__(self, path: Union[Path, str, None] = None) -> None:
        self.path = Path(path or DEFAULT_SETTINGS_PATH)
        self._values: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load settings from disk, keeping an empty set on any problem."""
        self._values = {}
        if not self.path.exists():
            logger.debug("No settings file at %s", self.path)
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings from %s: %s", self.path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Settings file %s does not contain an object", self.path)
            return
        self._values = data

    def save(self) -> None:
        """Write the current settings to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key)
        return default if value is None or value == "" else value

    def get_int(self, key: str, default: int) -> int:
        """Return an integer setting, falling back to the default if unparsable."""
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError):
            logger.warning("Setting %s is not an integer, using %d", key, default)
            return default

    def get_float(self, key: str, default: float) -> float:
        try:
            return float(self.get(key, default))
        except (TypeError, ValueError):
            logger.warning("Setting %s is not a number, using %s", key, default)
            return default

    def set(self, key: str, value: Any) -> None:
        if not key or not key.strip():
            raise ValueError("Setting key cannot be empty")
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def credentials_for(self, provider_name: str) -> Optional[str]:
        """Return the API key configured for a provider, or None."""
        key = CREDENTIAL_KEYS.get(provider_name.strip().lower())
        return self.get(key) if key else None

    @property
    def provider(self) -> str:
        return str(self.get(AI_PROVIDER, DEFAULT_PROVIDER))

    @property
    def model(self) -> Optional[str]:
        return self.get(AI_MODEL)
