"""Shared configuration for the todo end-to-end suite.

Runtime options come from the environment, then from ``.env.defaults`` at the
repository root, then from the defaults below. Credentials and URLs are NOT
configured here: they live in the settings file (see ``settings_file``),
which the scenarios read fresh every time.

Set TODO_SUITE_TARGET=mock (default) to run against the bundled mock app, or
TODO_SUITE_TARGET=live to run against the application named in settings.json.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Literal, Optional

from todo_suite.env_defaults import REPO_ROOT, get_setting

SuiteTarget = Literal["mock", "live"]

DEFAULT_SETTINGS_FILE = REPO_ROOT / "settings.json"
DEFAULT_OPENAPI_FILE = REPO_ROOT / "openapi.txt"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def get_suite_target() -> SuiteTarget:
    """Get the current suite target from the environment.

    Raises:
        ValueError: If TODO_SUITE_TARGET is set to an invalid value
    """
    target = (get_setting("TODO_SUITE_TARGET", "mock") or "mock").lower()

    if target not in ("mock", "live"):
        raise ValueError(
            f"Invalid TODO_SUITE_TARGET: {target}\n"
            f"Must be 'mock' or 'live'"
        )

    return target  # type: ignore


def _flag(key: str, default: str) -> bool:
    return (get_setting(key, default) or default).lower() in {"true", "1", "yes"}


class SuiteConfig:
    """Runtime options for the suite.

    Paths are resolved once at construction; ``override`` swaps them for the
    duration of a ``with`` block, which is how the mock target points the
    scenarios at its generated files.
    """

    def __init__(self) -> None:
        self.target: SuiteTarget = get_suite_target()

        self.playwright_headless: bool = _flag("PLAYWRIGHT_HEADLESS", "true")
        self.browser_type: str = get_setting("PLAYWRIGHT_BROWSER", "chromium") or "chromium"
        self.timeout_ms: int = int(get_setting("PLAYWRIGHT_TIMEOUT_MS", "30000") or 30000)
        self.http_timeout: float = float(get_setting("TODO_HTTP_TIMEOUT", "30") or 30)
        self.log_level: str = (get_setting("TODO_LOG_LEVEL", "INFO") or "INFO").upper()
        # URL substring of the todo creation request, and how long a submit
        # past the limit may go without one.
        self.todo_create_url: str = get_setting("TODO_CREATE_URL", "/todos") or "/todos"
        self.rejection_timeout_ms: int = int(get_setting("TODO_REJECTION_TIMEOUT_MS", "5000") or 5000)

        self.settings_path: Path = Path(get_setting("TODO_SETTINGS_FILE") or DEFAULT_SETTINGS_FILE)
        self.openapi_path: Path = Path(get_setting("TODO_OPENAPI_FILE") or DEFAULT_OPENAPI_FILE)
        # Explicit OpenAPI path; None means "first declared path".
        self.openapi_path_override: Optional[str] = get_setting("TODO_OPENAPI_PATH")

    @property
    def is_mock(self) -> bool:
        return self.target == "mock"

    @contextmanager
    def override(
        self,
        settings_path: Optional[Path] = None,
        openapi_path: Optional[Path] = None,
    ) -> Iterator["SuiteConfig"]:
        """Temporarily point the suite at other settings/OpenAPI files."""
        previous = (self.settings_path, self.openapi_path)
        if settings_path is not None:
            self.settings_path = Path(settings_path)
        if openapi_path is not None:
            self.openapi_path = Path(openapi_path)
        try:
            yield self
        finally:
            self.settings_path, self.openapi_path = previous


def configure_logging(level: str | None = None, console: bool = False) -> None:
    """Set the ``todo_suite`` log level; optionally attach a console handler once.

    Under pytest the narration goes through ``log_cli``, so no handler is needed.
    """
    logger = logging.getLogger("todo_suite")
    logger.setLevel(level or suite.log_level)
    if console and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


# Singleton instance - initialized on first import
suite = SuiteConfig()
