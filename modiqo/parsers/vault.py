"""Parsers for ``dex token list`` output.

The same command is read two ways: as a whitespace-separated token list and,
on newer dex versions, as a box-drawn vault table.
"""

from __future__ import annotations

import re
from dataclasses import replace

from modiqo.constants import CHECK_MARK
from modiqo.models import TokenInfo, VaultToken

from .base import BaseParser
from .table import TableState, compact_box_row, fold_rows

_TOKEN_LINE_PATTERN = re.compile(r"^(\S+)\s+(\S+)\s+(.+)$")
_VAULT_COLUMNS = ("name", "type", "expires_in", "refresh", "created", "description")


class TokenListParser(BaseParser):
    """Best-effort parse of ``GITHUB_TOKEN    github    ✓ configured`` lines."""

    name = "token_list"

    def parse(self, text: str) -> list[TokenInfo]:
        tokens: list[TokenInfo] = []
        for line in (text or "").splitlines():
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(("-", "=")):
                continue
            match = _TOKEN_LINE_PATTERN.match(trimmed)
            if not match:
                continue
            env_var, adapter_id, status = match.groups()
            tokens.append(
                TokenInfo(
                    env_var=env_var,
                    adapter_id=adapter_id,
                    configured=CHECK_MARK in status or "configured" in status,
                )
            )
        return tokens


def _is_header(line: str) -> bool:
    return "Name" in line and "Type" in line and "Expires" in line


class VaultTokenTableParser(BaseParser):
    """``Name | Type | Expires In | Refresh | Created | Description``.

    A row whose first non-empty cell starts with ``(`` (e.g. ``(auto-refreshed)``)
    continues the previous token and is appended to its description.
    """

    name = "vault_token_table"

    def parse(self, text: str) -> list[VaultToken]:
        state = fold_rows((text or "").splitlines(), self._step, TableState())
        return list(state.flushed())

    def _step(self, state: TableState[VaultToken], line: str) -> TableState[VaultToken]:
        cells = compact_box_row(line)
        if not cells or _is_header(line):
            return state

        if cells[0].startswith("("):
            if state.current is None:
                return state
            extra = " ".join(cells).strip()
            previous = state.current.description
            description = extra if previous == "-" else f"{previous} {extra}"
            return state.amend(replace(state.current, description=description))

        if len(cells) < 2:
            return state

        values = {column: cells[index] for index, column in enumerate(_VAULT_COLUMNS) if index < len(cells)}
        return state.start(VaultToken(**values))
