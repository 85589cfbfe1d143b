"""Suite defaults from the repository's .env.defaults file.

The suite cannot take its defaults from the API it tests: the target is an
external service with no config module to import. Keeping them in a dotenv
file at the repo root lets CI and local runs share one set of fixture values,
while ``api_tests.config`` still gives the real environment the last word.
Only ``KEY=value`` lines are understood; there is no variable expansion.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict

ENV_DEFAULTS_FILE = Path(__file__).resolve().parents[1] / ".env.defaults"

_QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env_defaults(text: str) -> Dict[str, str]:
    """Parse dotenv text, skipping blanks, comments and lines without '='."""
    entries = (line.strip() for line in text.splitlines())
    pairs = (
        line.partition("=")
        for line in entries
        if line and not line.startswith("#") and "=" in line
    )
    return {key.strip(): _unquote(value.strip()) for key, _, value in pairs}


@lru_cache(maxsize=1)
def _load_env_defaults() -> Dict[str, str]:
    if not ENV_DEFAULTS_FILE.exists():
        return {}
    return parse_env_defaults(ENV_DEFAULTS_FILE.read_text(encoding="utf-8"))


def get_env_default(key: str) -> str | None:
    return _load_env_defaults().get(key)
