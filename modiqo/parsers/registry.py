"""Parsers for ``dex registry`` output: adapter/skill tables and whoami."""

from __future__ import annotations

from dataclasses import replace

from modiqo.constants import BOX_HORIZONTAL
from modiqo.models import RegistryAdapter, RegistrySkill, RegistryWhoami

from .base import BaseParser
from .table import ContinuationTableParser, append_text, split_box_row


class RegistryAdapterTableParser(ContinuationTableParser[RegistryAdapter]):
    """``Name | Fingerprint | Visibility | Description``."""

    name = "registry_adapter_table"
    min_columns = 4

    def build_record(self, cells: list[str]) -> RegistryAdapter:
        name, fingerprint, visibility, description = cells[:4]
        return RegistryAdapter(name=name, fingerprint=fingerprint, visibility=visibility, description=description)

    def extend_record(self, record: RegistryAdapter, cells: list[str]) -> RegistryAdapter:
        return replace(record, description=append_text(record.description, cells[3]))


class RegistrySkillTableParser(ContinuationTableParser[RegistrySkill]):
    """``Name | Description | Adapters | Visibility``."""

    name = "registry_skill_table"
    min_columns = 4

    def build_record(self, cells: list[str]) -> RegistrySkill:
        name, description, adapters, visibility = cells[:4]
        return RegistrySkill(name=name, description=description, adapters=adapters, visibility=visibility)

    def extend_record(self, record: RegistrySkill, cells: list[str]) -> RegistrySkill:
        return replace(record, description=append_text(record.description, cells[1]))


class SkillSearchNamesParser(BaseParser):
    """Collect full skill names from ``dex registry skill search`` results."""

    name = "skill_search_names"

    def parse(self, text: str) -> list[str]:
        names: list[str] = []
        for line in (text or "").splitlines():
            cells = split_box_row(line)
            if cells is None or len(cells) < 2:
                continue
            name = cells[0]
            if not name or name == "Name" or BOX_HORIZONTAL in name:
                continue
            if name not in names:
                names.append(name)
        return names


def _value_after_key(line: str) -> str:
    # Values such as URLs and timestamps contain colons of their own.
    return line.partition(":")[2].strip()


class WhoamiParser(BaseParser):
    """Parse ``dex registry whoami --verbose`` into a :class:`RegistryWhoami`.

    Later lines overwrite fields set by earlier ones.
    """

    name = "whoami"

    AUTHENTICATED_PREFIX = "ok: Authenticated as"

    def parse(self, text: str) -> RegistryWhoami:
        result = RegistryWhoami()
        for line in (text or "").splitlines():
            trimmed = line.strip()
            if trimmed.startswith(self.AUTHENTICATED_PREFIX):
                email = trimmed[len(self.AUTHENTICATED_PREFIX) :].strip()
                result = replace(result, email=email, status="valid")
            if trimmed.startswith("token_status:"):
                status = "valid" if _value_after_key(trimmed) == "valid" else "expired"
                result = replace(result, status=status)
            if trimmed.startswith("token_expires:"):
                result = replace(result, tokenExpires=_value_after_key(trimmed))
            if trimmed.startswith("token_issued:"):
                result = replace(result, tokenIssued=_value_after_key(trimmed))
            if trimmed.startswith("registry_url:"):
                result = replace(result, registryUrl=_value_after_key(trimmed))
            if trimmed.startswith("connected:"):
                result = replace(result, connected="yes" in trimmed)
        return result
