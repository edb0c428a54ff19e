"""GFM pipe-table row helpers.

A table starts when a one-line paragraph is followed by a delimiter row with
the same number of cells:

    | a | b |
    |:--|--:|

Cells are split on unescaped pipes; ``\\|`` yields a literal pipe.
"""

from __future__ import annotations

from tinta.nodes import Alignment


def _strip_outer_pipes(line: str) -> str:
    line = line.strip(" ")
    if line.startswith("|"):
        line = line[1:]
    if line.endswith("|") and not line.endswith("\\|"):
        line = line[:-1]
    return line


def split_row(line: str) -> list[str]:
    """Split a table row into stripped cell texts."""
    line = _strip_outer_pipes(line)
    cells: list[str] = []
    current: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        char = line[i]
        if char == "\\" and i + 1 < n and line[i + 1] == "|":
            current.append("|")
            i += 2
        elif char == "|":
            cells.append("".join(current).strip(" "))
            current = []
            i += 1
        else:
            current.append(char)
            i += 1
    cells.append("".join(current).strip(" "))
    return cells


def parse_delimiter_row(line: str) -> tuple[Alignment, ...] | None:
    """Parse a delimiter row such as ``|:---|:-:|--:|``.

    Returns one alignment per column, or None if ``line`` is not a
    delimiter row. A row without any pipe is rejected so that a lone
    ``---`` stays a setext underline or thematic break.
    """
    if "|" not in line:
        return None
    parts = _strip_outer_pipes(line).split("|")
    alignments: list[Alignment] = []
    for part in parts:
        part = part.strip(" ")
        left = part.startswith(":")
        right = part.endswith(":") and len(part) > 1
        inner = part[1 if left else 0 : len(part) - 1 if right else len(part)]
        if not inner or inner.strip("-"):
            return None
        if left and right:
            alignments.append("center")
        elif left:
            alignments.append("left")
        elif right:
            alignments.append("right")
        else:
            alignments.append(None)
    return tuple(alignments)


def fit_row(cells: list[str], width: int) -> list[str]:
    """Pad or truncate ``cells`` to exactly ``width`` entries."""
    if len(cells) >= width:
        return cells[:width]
    return cells + [""] * (width - len(cells))


__all__ = ["split_row", "parse_delimiter_row", "fit_row"]
