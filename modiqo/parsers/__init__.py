"""Parser registry for dex command output."""

from __future__ import annotations

from .adapters import AdapterListParser
from .base import BaseParser, ParserError
from .catalog import CatalogInfoParser, CatalogListParser, CatalogSearchParser, DexInfoParser
from .explore import ExploreSkillsParser, FlowSearchParser
from .json_output import DryRunJSONParser, ExploreToolsJSONParser, FlowListJSONParser
from .registry import (
    RegistryAdapterTableParser,
    RegistrySkillTableParser,
    SkillSearchNamesParser,
    WhoamiParser,
)
from .vault import TokenListParser, VaultTokenTableParser

_PARSER_CLASSES: dict[str, type[BaseParser]] = {
    parser_cls.name: parser_cls
    for parser_cls in (
        AdapterListParser,
        CatalogInfoParser,
        CatalogListParser,
        CatalogSearchParser,
        DexInfoParser,
        DryRunJSONParser,
        ExploreSkillsParser,
        ExploreToolsJSONParser,
        FlowListJSONParser,
        FlowSearchParser,
        RegistryAdapterTableParser,
        RegistrySkillTableParser,
        SkillSearchNamesParser,
        TokenListParser,
        VaultTokenTableParser,
        WhoamiParser,
    )
}


def get_parser(name: str) -> BaseParser:
    normalized = (name or "").lower()
    if normalized not in _PARSER_CLASSES:
        raise ParserError(f"No parser registered for '{name}'")
    parser_cls = _PARSER_CLASSES[normalized]
    return parser_cls()


def list_parsers() -> list[str]:
    return sorted(_PARSER_CLASSES)


__all__ = [
    "BaseParser",
    "ParserError",
    "get_parser",
    "list_parsers",
]
