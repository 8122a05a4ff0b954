"""Parsers for ``dex explore`` and ``dex flow search`` text output."""

from __future__ import annotations

import re
from dataclasses import dataclass

from modiqo.models import ExploreSkillMatch, FlowSearchMatch

from .base import BaseParser
from .sections import extract_section, section_or_all
from .table import fold_rows, split_box_row

# "1. [ATOMIC] send-email (82% match)"
FLOW_HEADER_PATTERN = re.compile(r"^\d+\.\s+\[(\w+)\]\s+(.+?)\s+\((\d+)%\s+match\)$")
FLOW_DETAIL_PATTERN = re.compile(r"^\s{3,}\S")
ENDPOINT_ADAPTER_PATTERN = re.compile(r"adapter/(\S+)")

_IGNORED_DETAIL_PREFIXES = ("Use this if:", "Parameters:")


class ExploreSkillsParser(BaseParser):
    """Parse the ``Name | Description | Match`` table inside ``@@skills``."""

    name = "explore_skills"
    section = "skills"

    def parse(self, text: str) -> list[ExploreSkillMatch]:
        skills: list[ExploreSkillMatch] = []
        for line in extract_section(text, self.section):
            cells = split_box_row(line)
            if cells is None or len(cells) < 3:
                continue
            name, description, match_percent = cells[:3]
            if not name or name == "Name":
                continue
            skills.append(ExploreSkillMatch(name=name, description=description, matchPercent=match_percent))
        return skills


@dataclass(frozen=True)
class _PendingEntry:
    flow_type: str
    name: str
    match_percent: int
    details: tuple[str, ...] = ()

    def with_detail(self, detail: str) -> _PendingEntry:
        return _PendingEntry(self.flow_type, self.name, self.match_percent, (*self.details, detail))


@dataclass(frozen=True)
class _FlowSearchState:
    matches: tuple[FlowSearchMatch, ...] = ()
    pending: _PendingEntry | None = None

    def flushed(self) -> tuple[FlowSearchMatch, ...]:
        if self.pending is None:
            return self.matches
        return (*self.matches, build_flow_match(self.pending))


def build_flow_match(entry: _PendingEntry) -> FlowSearchMatch:
    location = ""
    endpoints = ""
    adapter = ""
    description_parts: list[str] = []

    for detail in entry.details:
        if detail.startswith("Location:"):
            location = detail[len("Location:") :].strip()
        elif detail.startswith("Endpoints:"):
            endpoints = detail[len("Endpoints:") :].strip()
            match = ENDPOINT_ADAPTER_PATTERN.search(endpoints)
            if match:
                adapter = match.group(1)
        elif detail.startswith(_IGNORED_DETAIL_PREFIXES):
            continue
        else:
            description_parts.append(detail)

    return FlowSearchMatch(
        name=entry.name,
        description=" ".join(description_parts),
        matchPercent=entry.match_percent,
        flowType=entry.flow_type,
        location=location,
        endpoints=endpoints,
        adapter=adapter,
    )


class FlowSearchParser(BaseParser):
    """Parse numbered entries from the ``@@flows`` section (or unsectioned output).

    Each entry is a header line followed by detail lines indented by at least
    three spaces. The entry ends at the first line that is not indented or
    that is itself a header. Results keep input order.
    """

    name = "flow_search"
    section = "flows"

    def parse(self, text: str) -> list[FlowSearchMatch]:
        state = fold_rows(section_or_all(text, self.section), self._step, _FlowSearchState())
        return list(state.flushed())

    def _step(self, state: _FlowSearchState, line: str) -> _FlowSearchState:
        header = FLOW_HEADER_PATTERN.match(line.strip())
        if header:
            flow_type, name, percent = header.groups()
            return _FlowSearchState(
                matches=state.flushed(),
                pending=_PendingEntry(flow_type=flow_type, name=name, match_percent=int(percent)),
            )
        if state.pending is not None and FLOW_DETAIL_PATTERN.match(line):
            return _FlowSearchState(matches=state.matches, pending=state.pending.with_detail(line.strip()))
        return _FlowSearchState(matches=state.flushed())
