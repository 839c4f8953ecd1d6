"""Settings file access for the todo suite.

The settings file is the single source of truth for environment URLs,
credentials and the auth token:
1. It is written by hand (or by the mock target) before a run
2. The frontend login rewrites its ``token`` key
3. It is read fresh by every scenario (never cached)

Expected keys: baseUrl, loginUrl, user, email, password, token, backendUrl.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple, Union

logger = logging.getLogger(__name__)

# Keys each consumer reads; nothing is defaulted.
FRONTEND_KEYS = ("baseUrl", "loginUrl", "user", "password")
BACKEND_KEYS = ("token", "backendUrl", "user")
TOKEN_KEY = "token"


class SettingsError(Exception):
    """Base class for settings file problems."""


class MalformedSettingsError(SettingsError, ValueError):
    """Raised when the settings file is not a JSON object of strings."""


class MissingSettingError(SettingsError, KeyError):
    """Raised when a required key is absent from the settings file."""

    def __init__(self, key: str, path: Path) -> None:
        super().__init__(key)
        self.key = key
        self.path = path

    def __str__(self) -> str:
        return f"Required setting '{self.key}' not found in {self.path}"


class SettingsFile:
    """JSON settings file with fail-fast key lookup."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        """Parse the file fresh from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
            MalformedSettingsError: If the file is not a JSON object
        """
        if not self.path.exists():
            raise FileNotFoundError(
                f"Settings file not found: {self.path}\n"
                f"Create it with baseUrl, loginUrl, user, email, password, token and backendUrl,\n"
                f"or set TODO_SETTINGS_FILE to point at an existing one."
            )

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedSettingsError(f"Settings file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise MalformedSettingsError(
                f"Settings file {self.path} must hold a JSON object, got {type(data).__name__}"
            )
        return data

    def require(self, *keys: str) -> Tuple[str, ...]:
        """Return the values of ``keys`` unchanged and in the order requested."""
        data = self.load()
        values = []
        for key in keys:
            if key not in data:
                raise MissingSettingError(key, self.path)
            value = data[key]
            if not isinstance(value, str):
                raise MalformedSettingsError(
                    f"Setting '{key}' in {self.path} must be a string, got {type(value).__name__}"
                )
            values.append(value)
        return tuple(values)

    def update_token(self, token: str) -> None:
        """Rewrite the ``token`` key, keeping every other key as it is."""
        data = self.load()
        data[TOKEN_KEY] = token

        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        logger.info("Persisted auth token to %s", self.path)
