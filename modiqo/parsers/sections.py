"""Helpers for ``@@section`` delimited dex output."""

from __future__ import annotations

from collections.abc import Iterator

from modiqo.constants import SECTION_PREFIX


def iter_sections(text: str) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(name, lines)`` for every ``@@name`` block in order.

    Lines before the first marker belong to no section and are dropped.
    """

    name: str | None = None
    lines: list[str] = []
    for line in (text or "").splitlines():
        trimmed = line.strip()
        if trimmed.startswith(SECTION_PREFIX):
            if name is not None:
                yield name, lines
            header = trimmed[len(SECTION_PREFIX) :].split()
            name = header[0] if header else ""
            lines = []
            continue
        if name is not None:
            lines.append(line)
    if name is not None:
        yield name, lines


def extract_section(text: str, name: str) -> list[str]:
    """Return the raw lines of the first ``@@<name>`` block.

    The block ends at the next ``@@`` line or at the end of input. An absent
    section yields an empty list.
    """

    marker = f"{SECTION_PREFIX}{name}"
    collected: list[str] = []
    inside = False
    for line in (text or "").splitlines():
        trimmed = line.strip()
        if not inside:
            if trimmed.startswith(marker):
                inside = True
            continue
        if trimmed.startswith(SECTION_PREFIX):
            break
        collected.append(line)
    return collected


def has_sections(text: str) -> bool:
    return any(line.strip().startswith(SECTION_PREFIX) for line in (text or "").splitlines())


def section_or_all(text: str, name: str) -> list[str]:
    """Lines of ``@@<name>``, or every line when the output has no markers at all."""

    if has_sections(text):
        return extract_section(text, name)
    return (text or "").splitlines()
