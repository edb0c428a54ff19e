"""Working structures of the inline parser.

While a leaf block is being parsed, its output lives in a flat list of
*slots*. A slot holds either a finished inline node or a plain string (text
that may still shrink, such as a delimiter run whose characters are being
consumed by emphasis). Wrapping a range of slots into an Emphasis or Link
node stores the node in the range's first slot and records a skip index so
later walks jump over the rest of the range.

Delimiter and bracket entries live in plain lists and refer to each other
and to slots by integer index.

Thread Safety:
Entries are created per parse call and never shared.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from tinta.nodes import Inline

DelimiterChar: TypeAlias = Literal["*", "_"]

# A slot: finished node, literal text, or None once absorbed into a wrapper
Slot: TypeAlias = Inline | str | None


@dataclass(slots=True)
class DelimiterEntry:
    """A run of ``*`` or ``_`` that may open or close emphasis.

    Attributes:
        char: The delimiter character
        length: Characters still available for matching
        orig_length: Run length as written (used by the rule of three)
        slot: Slot index holding the run's remaining text
        position: Index of the run in the leaf text
        can_open: Left-flanking (and, for ``_``, not inside a word)
        can_close: Right-flanking (and, for ``_``, not inside a word)
        prev: Index of the previous live entry, or -1
        next: Index of the next live entry, or -1

    """

    char: DelimiterChar
    length: int
    orig_length: int
    slot: int
    position: int
    can_open: bool
    can_close: bool
    prev: int = -1
    next: int = -1


@dataclass(slots=True)
class BracketEntry:
    """An unmatched ``[`` or ``![``.

    Attributes:
        slot: Slot index holding the literal ``[`` / ``![``
        position: Index just past the bracket in the leaf text
        image: True for ``![``
        delimiter_bottom: Number of delimiter entries when the bracket was
            seen; emphasis inside the link only uses entries above it
        active: False once a link has formed around it (links cannot nest)
        bracket_after: Another bracket opened after this one

    """

    slot: int
    position: int
    image: bool
    delimiter_bottom: int
    active: bool = True
    bracket_after: bool = False


__all__ = ["BracketEntry", "DelimiterChar", "DelimiterEntry", "Slot"]
