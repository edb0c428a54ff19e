"""Source positions attached to nodes and errors.

Line and column numbers are 1-indexed and refer to the normalized text
(tabs expanded, line endings unified). Offsets are byte offsets into the
original input, so a caller holding the raw file can slice the exact bytes
a node came from.

Thread Safety:
SourceLocation is frozen and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Where a node or error sits in the source.

    Attributes:
        lineno: Starting line number (1-indexed)
        col_offset: Starting column (1-indexed)
        offset: Byte offset of the start in the original input
        end_offset: Byte offset just past the end in the original input
        end_lineno: Ending line number (optional)
        end_col_offset: Column just past the last character of the
            ending line (optional, 1-indexed)
        source_file: Source file path (optional, for diagnostics only)

    Examples:
        >>> loc = SourceLocation(3, 1, offset=20, source_file="intro.md")
        >>> str(loc)
        'intro.md:3:1'

    """

    lineno: int
    col_offset: int
    offset: int = 0
    end_offset: int = 0
    end_lineno: int | None = None
    end_col_offset: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    def contains(self, other: SourceLocation) -> bool:
        """Return True if ``other``'s byte range lies inside this one."""
        return self.offset <= other.offset and other.end_offset <= self.end_offset
