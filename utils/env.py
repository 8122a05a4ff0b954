"""Environment lookups for modiqo settings, with optional .env precedence.

Values normally come from the process environment. A ``.env`` file at the
project root is loaded on import; when it sets ``MODIQO_FORCE_ENV_OVERRIDE=true``
its values win and the process environment is ignored for lookups.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values, load_dotenv

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
FORCE_OVERRIDE_VAR = "MODIQO_FORCE_ENV_OVERRIDE"

_dotenv: dict[str, str | None] = {}
_dotenv_wins = False


def reload_env(dotenv_mapping: Mapping[str, str | None] | None = None) -> None:
    """Re-read the .env file, or adopt ``dotenv_mapping`` instead (tests).

    A supplied mapping is never written into ``os.environ``.
    """

    global _dotenv, _dotenv_wins

    if dotenv_mapping is not None:
        _dotenv = dict(dotenv_mapping)
    elif ENV_FILE.exists():
        _dotenv = dict(dotenv_values(ENV_FILE))
    else:
        _dotenv = {}

    _dotenv_wins = (_dotenv.get(FORCE_OVERRIDE_VAR) or "").strip().lower() == "true"

    if dotenv_mapping is None and ENV_FILE.exists():
        load_dotenv(dotenv_path=ENV_FILE, override=_dotenv_wins)


reload_env()


def get_env(key: str, default: str | None = None) -> str | None:
    if not _dotenv_wins:
        return os.getenv(key, default)
    value = _dotenv.get(key)
    return default if value is None else value


def get_env_bool(key: str, default: bool = False) -> bool:
    raw = get_env(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_env_int(key: str, default: int) -> int:
    """Integer lookup; blank or non-numeric values fall back to ``default``."""

    raw = (get_env(key) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default

