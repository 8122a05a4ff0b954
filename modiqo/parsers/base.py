"""Parser interfaces for dex command output."""

from __future__ import annotations

from typing import Any


class ParserError(RuntimeError):
    """Raised when dex output cannot be parsed into a structured result."""


class BaseParser:
    """Base interface for dex output parsers.

    Parsers are pure: the same text always yields the same records. Text parsers
    skip malformed lines instead of raising; only structured (JSON) parsers raise
    ``ParserError`` when the payload as a whole is unusable.
    """

    name: str = "base"

    def parse(self, text: str) -> Any:
        raise NotImplementedError("Parsers must implement parse()")
