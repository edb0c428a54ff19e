"""StringBuilder for O(n) HTML accumulation.

Appends to a list and joins once at the end. Also tracks whether the output
currently ends at a line boundary, which the renderer needs to place block
tags on their own lines without doubling newlines.

Thread Safety:
StringBuilder instances are local to each render() call.

"""

from __future__ import annotations


class StringBuilder:
    """Efficient string accumulator.

    Usage:
        >>> sb = StringBuilder()
        >>> _ = sb.append("<p>").append("Hello").append("</p>").cr()
        >>> sb.build()
        '<p>Hello</p>\\n'

    """

    __slots__ = ("_parts", "_at_line_start")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._at_line_start = True

    def append(self, s: str) -> StringBuilder:
        """Append a string (empty strings are skipped).

        Returns:
            self for method chaining
        """
        if s:
            self._parts.append(s)
            self._at_line_start = s[-1] == "\n"
        return self

    def cr(self) -> StringBuilder:
        """Start a new line unless the output already ends with one."""
        if not self._at_line_start:
            self._parts.append("\n")
            self._at_line_start = True
        return self

    def build(self) -> str:
        """Join all parts into the final string."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Return number of parts (not total length)."""
        return len(self._parts)
