"""
Pytest configuration for modiqo tests
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Ensure the parent directory is in the Python path for imports
parent_dir = Path(__file__).resolve().parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import utils.env as env_config  # noqa: E402

# Ensure tests operate with runtime environment rather than .env overrides during imports
env_config.reload_env({"MODIQO_FORCE_ENV_OVERRIDE": "false"})

from modiqo.config import DexSettings  # noqa: E402

# Configure asyncio for Windows compatibility
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def dex_home(tmp_path):
    """Isolated ~/.dex replacement for tests that touch the filesystem."""
    home = tmp_path / "dex_home"
    home.mkdir(parents=True, exist_ok=True)
    return home


@pytest.fixture
def dex_settings(dex_home):
    return DexSettings(executable="dex", timeout_seconds=30, dex_home=dex_home)
