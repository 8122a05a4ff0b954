"""Parser for the ``dex adapter list`` table."""

from __future__ import annotations

import re
from dataclasses import dataclass

from modiqo.constants import CHECK_MARK
from modiqo.models import Adapter

from .base import BaseParser
from .table import compact_box_row, fold_rows, leading_int

# "gsuite (4 adapters)" printed above a block of rows
GROUP_HEADER_PATTERN = re.compile(r"^(\w+)\s+\(\d+\s+adapter")
_GROUP_NAME_PATTERN = re.compile(r"^(\w+)")
_ADAPTER_ID_PATTERN = re.compile(r"^[a-z]", re.IGNORECASE)
_HEADER_LABELS = frozenset({"ID", "Name"})


@dataclass(frozen=True)
class _AdapterListState:
    adapters: tuple[Adapter, ...] = ()
    group: str | None = None


def _optional(cells: list[str], index: int) -> str | None:
    if len(cells) > index and cells[index]:
        return cells[index]
    return None


class AdapterListParser(BaseParser):
    """Parse ``ID | Name | Tools | Type | Usage | Success | Status`` rows.

    Group headers apply to every following adapter until the next header,
    whether they appear as a bare line or inside the table's key column.
    """

    name = "adapter_table"

    def parse(self, text: str) -> list[Adapter]:
        state = fold_rows((text or "").splitlines(), self._step, _AdapterListState())
        return list(state.adapters)

    def _step(self, state: _AdapterListState, line: str) -> _AdapterListState:
        cells = compact_box_row(line)
        if cells is None:
            match = GROUP_HEADER_PATTERN.match(line.strip())
            if match:
                return _AdapterListState(adapters=state.adapters, group=match.group(1))
            return state

        if len(cells) < 2:
            return state

        adapter_id = cells[0]
        if adapter_id in _HEADER_LABELS:
            return state

        if "(" in adapter_id or "adapter" in adapter_id:
            match = _GROUP_NAME_PATTERN.match(adapter_id)
            if match:
                return _AdapterListState(adapters=state.adapters, group=match.group(1))
            return state

        if not _ADAPTER_ID_PATTERN.match(adapter_id):
            return state

        status = cells[6] if len(cells) > 6 else ""
        adapter = Adapter(
            id=adapter_id,
            name=cells[1] or adapter_id,
            group=state.group,
            has_token=CHECK_MARK in status or "ready" in status,
            tools=(leading_int(cells[2]) or 0) if len(cells) > 2 else 0,
            spec_type=_optional(cells, 3),
            usage=_optional(cells, 4),
            success=_optional(cells, 5),
        )
        return _AdapterListState(adapters=(*state.adapters, adapter), group=state.group)
