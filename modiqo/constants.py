"""Internal defaults and constants for modiqo."""

from __future__ import annotations

from pathlib import Path

DEFAULT_EXECUTABLE = "dex"
DEFAULT_TIMEOUT_SECONDS = 30
DRY_RUN_TIMEOUT_SECONDS = 300
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024  # 10MB per stream

DEFAULT_DEX_HOME = Path.home() / ".dex"

BOX_VERTICAL = "│"
BOX_HORIZONTAL = "─"
CHECK_MARK = "✓"
ELLIPSIS = "…"

SECTION_PREFIX = "@@"

DEFAULT_COMMUNITY = "bootstrap"
OAUTH_TOKEN_ENV = "GSUITE_TOKEN"
VAULT_PASSPHRASE_ENV = "DEX_VAULT_PASSPHRASE"

TOKEN_URLS: dict[str, str] = {
    "GITHUB_TOKEN": "https://github.com/settings/tokens/new",
    "GEMINI_API_KEY": "https://aistudio.google.com/app/apikey",
    "LINEAR_API": "https://linear.app/settings/api",
    "ADAPTER_NOTION_TOKEN": "https://www.notion.so/my-integrations",
    "CLOUDFLARE_API": "https://dash.cloudflare.com/profile/api-tokens",
    "ELEVEN_LABS_API": "https://elevenlabs.io/app/settings/api-keys",
    "MANUS_API": "https://app.manus.ai/settings/api",
    "STRIPE_API": "https://dashboard.stripe.com/apikeys",
}
