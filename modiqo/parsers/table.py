"""Helpers for box-drawn tables printed by dex.

Rows are delimited by ``│`` (U+2502). Border rows (``┌─┬─┐`` and friends) carry
no vertical bar and are never returned as data.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from functools import reduce
from typing import Generic, TypeVar

from modiqo.constants import BOX_VERTICAL

from .base import BaseParser

S = TypeVar("S")
R = TypeVar("R")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def split_box_row(line: str) -> list[str] | None:
    """Return the trimmed cells of a table row, or None for non-table lines.

    The first and last cells are the empty strings produced by the outer
    border glyphs and are dropped.
    """

    if BOX_VERTICAL not in line:
        return None
    cells = [cell.strip() for cell in line.split(BOX_VERTICAL)]
    return cells[1:-1]


def compact_box_row(line: str) -> list[str] | None:
    """Like :func:`split_box_row` but drops every empty cell."""

    if BOX_VERTICAL not in line:
        return None
    return [cell for cell in (part.strip() for part in line.split(BOX_VERTICAL)) if cell]


def fold_rows(lines: Iterable[str], step: Callable[[S, str], S], initial: S) -> S:
    """Left fold over ``lines`` threading an explicit accumulator through ``step``."""

    return reduce(step, lines, initial)


def leading_int(value: str) -> int | None:
    """Integer prefix of ``value`` (``"12 tools"`` -> 12), or None."""

    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class TableState(Generic[R]):
    """Accumulator for tables whose rows may continue onto following lines."""

    records: tuple[R, ...] = ()
    current: R | None = None

    def start(self, record: R) -> TableState[R]:
        return TableState(records=self.flushed(), current=record)

    def amend(self, record: R) -> TableState[R]:
        return replace(self, current=record)

    def flushed(self) -> tuple[R, ...]:
        if self.current is None:
            return self.records
        return (*self.records, self.current)


class ContinuationTableParser(BaseParser, Generic[R]):
    """Parse a ``│`` table where an empty first cell continues the previous row.

    Subclasses declare ``min_columns`` and implement ``build_record`` for rows
    with a key and ``extend_record`` for continuation rows.
    """

    min_columns: int = 1
    header_label: str = "Name"

    def parse(self, text: str) -> list[R]:
        state = fold_rows((text or "").splitlines(), self._step, TableState())
        return list(state.flushed())

    def _step(self, state: TableState[R], line: str) -> TableState[R]:
        cells = split_box_row(line)
        if cells is None or len(cells) < self.min_columns:
            return state
        key = cells[0]
        if key == self.header_label:
            return state
        if key:
            return state.start(self.build_record(cells))
        if state.current is None:
            return state
        return state.amend(self.extend_record(state.current, cells))

    def build_record(self, cells: list[str]) -> R:
        raise NotImplementedError

    def extend_record(self, record: R, cells: list[str]) -> R:
        raise NotImplementedError


def append_text(existing: str | None, extra: str) -> str:
    """Join a continuation fragment onto an existing field with one space."""

    return f"{existing or ''} {extra}"
