"""Parsers for dex subcommands that emit JSON (``--json`` / ``--dry-run``)."""

from __future__ import annotations

import json
from typing import Any

from pydantic import TypeAdapter, ValidationError

from modiqo.models import DryRunResult, ExploreToolMatch, Flow, FlowListPayload

from .base import BaseParser, ParserError

UNKNOWN_ORG = "unknown"

_TOOL_MATCHES = TypeAdapter(list[ExploreToolMatch])


def load_json(text: str, source: str) -> Any:
    if not (text or "").strip():
        raise ParserError(f"{source} returned empty output while JSON was expected")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParserError(f"Failed to decode {source} JSON output: {exc}") from exc


def org_from_path(path: str) -> str:
    """Organisation of a flow stored at ``~/.dex/flows/<org>/<name>/main.ts``."""

    parts = path.split("/")
    if "flows" not in parts:
        return UNKNOWN_ORG
    index = parts.index("flows")
    if index + 1 < len(parts):
        return parts[index + 1]
    return UNKNOWN_ORG


class FlowListJSONParser(BaseParser):
    name = "flow_list_json"

    def parse(self, text: str) -> list[Flow]:
        payload = load_json(text, "dex flow list")
        try:
            flows = FlowListPayload.model_validate(payload).flows
        except ValidationError as exc:
            raise ParserError(f"Unexpected dex flow list payload: {exc}") from exc
        return [
            Flow(
                org=org_from_path(entry.path),
                name=entry.name,
                path=entry.path,
                description=entry.description,
                adapter=entry.adapter,
            )
            for entry in flows
        ]


class ExploreToolsJSONParser(BaseParser):
    name = "explore_tools_json"

    def parse(self, text: str) -> list[ExploreToolMatch]:
        payload = load_json(text, "dex explore")
        try:
            return _TOOL_MATCHES.validate_python(payload)
        except ValidationError as exc:
            raise ParserError(f"Unexpected dex explore payload: {exc}") from exc


class DryRunJSONParser(BaseParser):
    name = "dry_run_json"

    def parse(self, text: str) -> DryRunResult:
        payload = load_json(text, "dex adapter dry-run")
        try:
            return DryRunResult.model_validate(payload)
        except ValidationError as exc:
            raise ParserError(f"Unexpected dex adapter dry-run payload: {exc}") from exc
