"""Typed records produced from dex CLI output.

Records parsed from human-readable text are frozen dataclasses. Payloads that
dex already emits as JSON are validated with pydantic models so that missing
or mistyped fields surface as ``ParserError`` instead of leaking dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, Field

WhoamiStatus = Literal["valid", "expired", "error"]


# ----------------------------------------------------------------------
# Text-parsed records
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class Adapter:
    """Row of ``dex adapter list``."""

    id: str
    name: str
    has_token: bool
    group: str | None = None
    tools: int | None = None
    spec_type: str | None = None
    usage: str | None = None
    success: str | None = None


@dataclass(frozen=True)
class Flow:
    org: str
    name: str
    path: str
    description: str | None = None
    adapter: str | None = None


@dataclass(frozen=True)
class TokenInfo:
    env_var: str
    adapter_id: str
    configured: bool


@dataclass(frozen=True)
class VaultToken:
    """Row of the ``dex token list`` vault table; missing cells read ``-``."""

    name: str
    type: str = "-"
    expires_in: str = "-"
    refresh: str = "-"
    created: str = "-"
    description: str = "-"


@dataclass(frozen=True)
class RegistryWhoami:
    status: WhoamiStatus = "error"
    email: str = ""
    tokenExpires: str = ""
    tokenIssued: str = ""
    registryUrl: str = ""
    connected: bool = False


@dataclass(frozen=True)
class RegistryAdapter:
    name: str
    fingerprint: str
    visibility: str
    description: str


@dataclass(frozen=True)
class RegistrySkill:
    name: str
    description: str
    adapters: str
    visibility: str


@dataclass(frozen=True)
class ExploreSkillMatch:
    name: str
    description: str
    matchPercent: str


@dataclass(frozen=True)
class FlowSearchMatch:
    name: str
    matchPercent: int
    flowType: str
    description: str = ""
    location: str = ""
    endpoints: str = ""
    adapter: str = ""


@dataclass(frozen=True)
class CatalogCategory:
    name: str
    count: int
    examples: str


@dataclass(frozen=True)
class CatalogResult:
    id: str
    category: str
    provider: str = ""


@dataclass(frozen=True)
class DexInfo:
    version: str = ""
    folder: str = ""


@dataclass(frozen=True)
class TokenRequirement:
    env_var: str
    adapters: list[str]
    configured: bool
    is_oauth: bool
    url: str | None = None


# ----------------------------------------------------------------------
# JSON payloads
# ----------------------------------------------------------------------


class FlowListEntry(BaseModel):
    """Single entry of ``dex flow list --json``."""

    name: str
    path: str
    description: str | None = None
    adapter: str | None = None
    flow_type: str | None = None
    status: str | None = None


class FlowListPayload(BaseModel):
    total: int = 0
    flows: list[FlowListEntry] = Field(default_factory=list)


class ExploreToolMatch(BaseModel):
    """Tool match returned by ``dex explore <query> --json``."""

    adapter_id: str
    tool: str
    toolset: str = ""
    score: float = 0.0
    description: str = ""
    group: str = ""


class DryRunSpec(BaseModel):
    title: str = ""
    version: str = ""
    openapi_version: str = ""
    base_url: str = ""
    operation_count: int = 0
    spec_size_bytes: int = 0


class DryRunToolset(BaseModel):
    name: str
    tool_count: int = 0
    confidence: float = 0.0
    methods: dict[str, int] = Field(default_factory=dict)


class DryRunSchemeAuth(BaseModel):
    type: str
    header_name: str | None = None
    key_env: str | None = None
    token_env: str | None = None
    username_env: str | None = None
    password_env: str | None = None
    description: str | None = None


class DryRunSecurityScheme(BaseModel):
    scheme_type: str
    location: str | None = None
    name: str | None = None
    http_scheme: str | None = None


class DryRunAuth(BaseModel):
    type: str = "none"
    header_name: str | None = None
    key_env: str | None = None
    token_env: str | None = None
    description: str | None = None
    schemes: dict[str, DryRunSchemeAuth] | None = Field(
        default=None,
        description="Per-operation auth: scheme name mapped to its configuration.",
    )
    default_scheme: str | None = Field(
        default=None,
        description="Scheme applied to operations without an explicit annotation.",
    )
    spec_security_schemes: dict[str, DryRunSecurityScheme] | None = None


class DryRunSummary(BaseModel):
    total_toolsets: int = 0
    total_tools: int = 0
    get_operations: int = 0
    post_operations: int = 0
    put_operations: int = 0
    delete_operations: int = 0


class DryRunResult(BaseModel):
    """Analysis reported by ``dex adapter new <id> <spec> --dry-run``."""

    adapter_id: str
    spec_source: str = ""
    spec: DryRunSpec = Field(default_factory=DryRunSpec)
    toolsets: list[DryRunToolset] = Field(default_factory=list)
    detection_method: str = ""
    auth: DryRunAuth = Field(default_factory=DryRunAuth)
    summary: DryRunSummary = Field(default_factory=DryRunSummary)


# ----------------------------------------------------------------------
# Aggregates
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class ExploreResult:
    query: str
    tools: list[ExploreToolMatch] = field(default_factory=list)
    skills: list[ExploreSkillMatch] = field(default_factory=list)
    flowSearchResults: list[FlowSearchMatch] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.tools or self.skills or self.flowSearchResults)
