"""Public helpers for modiqo components."""

from __future__ import annotations

from .client import DexClient
from .parsers import ParserError, get_parser
from .runner import DexCommandError, DexRunner

__all__ = ["DexClient", "DexCommandError", "DexRunner", "ParserError", "get_parser"]
