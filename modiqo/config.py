"""Runtime settings for invoking the dex binary."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, PositiveInt, field_validator

from modiqo.constants import (
    DEFAULT_DEX_HOME,
    DEFAULT_EXECUTABLE,
    DEFAULT_MAX_OUTPUT_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DRY_RUN_TIMEOUT_SECONDS,
)
from utils.env import get_env, get_env_bool, get_env_int

EXECUTABLE_ENV_VAR = "MODIQO_DEX_PATH"
TIMEOUT_ENV_VAR = "MODIQO_TIMEOUT_SECONDS"
DRY_RUN_TIMEOUT_ENV_VAR = "MODIQO_DRY_RUN_TIMEOUT_SECONDS"
MAX_OUTPUT_ENV_VAR = "MODIQO_MAX_OUTPUT_BYTES"
DEX_HOME_ENV_VAR = "MODIQO_DEX_HOME"
STRIP_ANSI_ENV_VAR = "MODIQO_STRIP_ANSI"

logger = logging.getLogger("modiqo.config")


class DexSettings(BaseModel):
    """How the dex binary is located and bounded."""

    executable: str = Field(default=DEFAULT_EXECUTABLE, description="Path or name of the dex binary.")
    timeout_seconds: PositiveInt = Field(default=DEFAULT_TIMEOUT_SECONDS)
    dry_run_timeout_seconds: PositiveInt = Field(
        default=DRY_RUN_TIMEOUT_SECONDS,
        description="Spec analysis downloads and parses large specs, so it gets a longer budget.",
    )
    max_output_bytes: PositiveInt = Field(
        default=DEFAULT_MAX_OUTPUT_BYTES,
        description=(
            "Largest stdout or stderr accepted from one command. Checked once the process exits; "
            "output is buffered in memory until then, so this does not bound memory while dex runs."
        ),
    )
    dex_home: Path = Field(default=DEFAULT_DEX_HOME)
    strip_ansi: bool = True
    env: dict[str, str] = Field(default_factory=dict)

    @field_validator("executable", mode="before")
    @classmethod
    def _default_blank_executable(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_EXECUTABLE
        return value

    @property
    def adapters_dir(self) -> Path:
        return self.dex_home / "adapters"

    @property
    def deno_path(self) -> Path:
        return self.dex_home / "bin" / "deno"


def _positive_env_int(key: str, default: int) -> int:
    value = get_env_int(key, default)
    if value <= 0:
        logger.warning("Ignoring %s=%s; expected a positive integer, using %s", key, value, default)
        return default
    return value


def load_settings() -> DexSettings:
    """Build settings from the environment (and .env, see ``utils.env``)."""

    dex_home_raw = get_env(DEX_HOME_ENV_VAR)
    return DexSettings(
        executable=get_env(EXECUTABLE_ENV_VAR, DEFAULT_EXECUTABLE),
        timeout_seconds=_positive_env_int(TIMEOUT_ENV_VAR, DEFAULT_TIMEOUT_SECONDS),
        dry_run_timeout_seconds=_positive_env_int(DRY_RUN_TIMEOUT_ENV_VAR, DRY_RUN_TIMEOUT_SECONDS),
        max_output_bytes=_positive_env_int(MAX_OUTPUT_ENV_VAR, DEFAULT_MAX_OUTPUT_BYTES),
        dex_home=Path(dex_home_raw).expanduser() if dex_home_raw else DEFAULT_DEX_HOME,
        strip_ansi=get_env_bool(STRIP_ANSI_ENV_VAR, True),
    )
