"""Heuristic joins between records from independent dex commands.

dex prints skill adapters as free text, often truncated (``gemini-…``,
``paralle...``), and exposes no stable join key. These helpers reproduce the
prefix/substring matching the registry views rely on; false positives and
negatives are expected.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from modiqo.constants import ELLIPSIS
from modiqo.models import Adapter, ExploreToolMatch, RegistrySkill

_TRAILING_ELLIPSIS = re.compile(r"[….]+$")
_FIELD_SEPARATORS = re.compile(r"[,;]\s*")


def skill_matches_adapter(skill: RegistrySkill, adapter_name: str) -> bool:
    adapters_field = (skill.adapters or "").lower()
    name = adapter_name.lower()

    if name in adapters_field:
        return True

    if adapters_field.endswith((ELLIPSIS, "...")):
        prefix = _TRAILING_ELLIPSIS.sub("", adapters_field).strip()
        if name.startswith(prefix):
            return True

    for part in _FIELD_SEPARATORS.split(adapters_field):
        clean = _TRAILING_ELLIPSIS.sub("", part).strip()
        if clean and name.startswith(clean):
            return True
    return False


def skills_for_adapter(skills: Iterable[RegistrySkill], adapter_name: str) -> list[RegistrySkill]:
    return [skill for skill in skills if skill_matches_adapter(skill, adapter_name)]


def group_tool_matches(tools: Iterable[ExploreToolMatch]) -> list[tuple[str, list[ExploreToolMatch]]]:
    """Group explore tool matches by adapter, best-scoring adapter first."""

    grouped: dict[str, list[ExploreToolMatch]] = {}
    for tool in tools:
        grouped.setdefault(tool.adapter_id, []).append(tool)
    return sorted(grouped.items(), key=lambda item: max(tool.score for tool in item[1]), reverse=True)


def token_summary(adapters: Iterable[Adapter]) -> tuple[int, int]:
    """Return ``(configured, total)`` adapter counts."""

    adapters = list(adapters)
    configured = sum(1 for adapter in adapters if adapter.has_token)
    return configured, len(adapters)
