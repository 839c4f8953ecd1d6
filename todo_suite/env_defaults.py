"""Fallback values for the suite's runtime options.

``SuiteConfig`` reads every TODO_* and PLAYWRIGHT_* option (target, browser,
headless flag, timeouts, create URL, settings/OpenAPI file locations) through
``get_setting``. An exported variable always wins; otherwise the value comes
from ``.env.defaults`` in the repository root, so a checkout can run the mock
target without exporting anything. Credentials never come from here: they
live in the settings file.

The file holds ``KEY=value`` lines; blank lines, ``#`` comments and lines
without ``=`` are skipped, and one layer of matching quotes is removed.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
ENV_DEFAULTS_FILE = ".env.defaults"


def _parse_line(raw: str) -> Optional[Tuple[str, str]]:
    line = raw.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = (part.strip() for part in line.split("=", 1))
    if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
        value = value[1:-1]
    return key, value


@lru_cache(maxsize=1)
def _load_env_defaults() -> Dict[str, str]:
    path = REPO_ROOT / ENV_DEFAULTS_FILE
    if not path.exists():
        return {}
    pairs = (_parse_line(raw) for raw in path.read_text(encoding="utf-8").splitlines())
    return dict(pair for pair in pairs if pair is not None)


def get_env_default(key: str) -> str | None:
    return _load_env_defaults().get(key)


def get_setting(key: str, default: str | None = None) -> str | None:
    """Runtime option ``key``: environment, then .env.defaults, then ``default``.

    Empty values count as unset at both levels.
    """
    return os.getenv(key) or get_env_default(key) or default
