"""Derive token requirements for installed adapters."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from modiqo.constants import OAUTH_TOKEN_ENV, TOKEN_URLS
from modiqo.models import TokenRequirement

logger = logging.getLogger("modiqo.tokens")


def read_token_env(manifest: dict[str, Any]) -> str | None:
    """Token variable declared by an adapter manifest's ``auth`` block.

    Simple auth uses ``token_env``/``key_env`` directly; per-operation auth
    declares them on the default scheme.
    """

    auth = manifest.get("auth") if isinstance(manifest, dict) else None
    if not isinstance(auth, dict):
        return None

    for key in ("token_env", "key_env"):
        if auth.get(key):
            return auth[key]

    default_scheme = auth.get("default_scheme")
    schemes = auth.get("schemes")
    if default_scheme and isinstance(schemes, dict) and isinstance(schemes.get(default_scheme), dict):
        scheme = schemes[default_scheme]
        for key in ("token_env", "key_env"):
            if scheme.get(key):
                return scheme[key]
    return None


def read_manifest_token_env(manifest_path: Path) -> str | None:
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.debug("Unreadable adapter manifest %s: %s", manifest_path, exc)
        return None
    return read_token_env(manifest)


def token_url_for(env_var: str) -> str | None:
    return TOKEN_URLS.get(env_var)


def build_token_requirements(by_env: dict[str, list[str]], configured_names: set[str]) -> list[TokenRequirement]:
    return [
        TokenRequirement(
            env_var=env_var,
            adapters=adapter_ids,
            configured=env_var in configured_names,
            is_oauth=env_var == OAUTH_TOKEN_ENV,
            url=token_url_for(env_var),
        )
        for env_var, adapter_ids in by_env.items()
    ]


async def detect_token_requirements(client, adapters_dir: Path | None = None) -> list[TokenRequirement]:
    """Group installed adapters by the token they need and mark configured ones."""

    adapters_dir = adapters_dir or client.settings.adapters_dir
    vault_tokens, token_list = await asyncio.gather(client.vault_token_list(), client.token_list())
    configured_names = {token.name for token in vault_tokens}
    configured_names.update(token.env_var for token in token_list if token.configured)

    if not adapters_dir.is_dir():
        logger.debug("Adapters directory does not exist: %s", adapters_dir)
        return []

    by_env: dict[str, list[str]] = {}
    for adapter_dir in sorted(path for path in adapters_dir.iterdir() if path.is_dir()):
        env_var = read_manifest_token_env(adapter_dir / "manifest.json")
        if env_var:
            by_env.setdefault(env_var, []).append(adapter_dir.name)

    return build_token_requirements(by_env, configured_names)
