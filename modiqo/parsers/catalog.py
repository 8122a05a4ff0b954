"""Parsers for catalog listings and ``dex info``."""

from __future__ import annotations

import re

from modiqo.constants import BOX_HORIZONTAL
from modiqo.models import CatalogCategory, CatalogResult, DexInfo

from .base import BaseParser

# "HR / Platform           20 APIs   Workday: Asor, ..."
CATEGORY_PATTERN = re.compile(r"^(.+?)\s+(\d+)\s+APIs?\s+(.+)$")
KEY_VALUE_PATTERN = re.compile(r"^([^:]+):\s+(.+)$")
_COLUMN_GAP = re.compile(r"\s{2,}")
_VERSION_PATTERN = re.compile(r"^Version:\s+(.+)$")
_ADAPTERS_PATTERN = re.compile(r"^Adapters:\s+(.+)$")
_ADAPTERS_SUFFIX = re.compile(r"/adapters$")

_SEARCH_SKIP_PREFIXES = ("Catalog", "ID", BOX_HORIZONTAL, "Use:", "Create:")
_INFO_SKIP_PREFIXES = ("Catalog:", "Create adapter:", "With defaults:")


class CatalogListParser(BaseParser):
    name = "catalog_list"

    def parse(self, text: str) -> list[CatalogCategory]:
        categories: list[CatalogCategory] = []
        for line in (text or "").splitlines():
            match = CATEGORY_PATTERN.match(line.strip())
            if match:
                categories.append(
                    CatalogCategory(
                        name=match.group(1).strip(),
                        count=int(match.group(2)),
                        examples=match.group(3).strip(),
                    )
                )
        return categories


class CatalogSearchParser(BaseParser):
    """Parse ``dex adapter catalog search`` columns separated by 2+ spaces."""

    name = "catalog_search"

    def parse(self, text: str) -> list[CatalogResult]:
        results: list[CatalogResult] = []
        for line in (text or "").splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(_SEARCH_SKIP_PREFIXES):
                continue
            parts = _COLUMN_GAP.split(trimmed)
            if len(parts) >= 3:
                results.append(CatalogResult(id=parts[0], category=parts[1], provider=parts[2]))
            elif len(parts) == 2:
                results.append(CatalogResult(id=parts[0], category=parts[1]))
        return results


class CatalogInfoParser(BaseParser):
    """Parse ``Key:     Value`` lines of ``dex adapter catalog info``."""

    name = "catalog_info"

    def parse(self, text: str) -> dict[str, str]:
        info: dict[str, str] = {}
        for line in (text or "").splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(_INFO_SKIP_PREFIXES):
                continue
            match = KEY_VALUE_PATTERN.match(trimmed)
            if match:
                info[match.group(1).strip()] = match.group(2).strip()
        return info


class DexInfoParser(BaseParser):
    name = "dex_info"

    def parse(self, text: str) -> DexInfo:
        version = ""
        folder = ""
        for line in (text or "").splitlines():
            trimmed = line.strip()
            version_match = _VERSION_PATTERN.match(trimmed)
            if version_match:
                version = version_match.group(1)
            adapters_match = _ADAPTERS_PATTERN.match(trimmed)
            if adapters_match:
                folder = _ADAPTERS_SUFFIX.sub("", adapters_match.group(1))
        return DexInfo(version=version, folder=folder)
