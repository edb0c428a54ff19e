"""Open-block frames and the container stack used by the block parser.

The block parser keeps every open block on a stack, document first and the
innermost block last. Frames are mutable while their block is open; once the
parse finishes they are converted into frozen AST nodes.

The stack also enforces the nesting guard: it counts open block quotes and
list items and raises ResourceLimitExceeded as soon as a push would exceed
``max_nesting_depth``.

Usage:
    stack = ContainerStack(max_depth=128)  # Initializes with DOCUMENT frame
    stack.push(frame, line)
    stack.pop()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from tinta.errors import ResourceLimitExceeded
from tinta.nodes import Alignment
from tinta.scanner import Line
from tinta.utils.logger import get_logger

if TYPE_CHECKING:
    from tinta.parsing.references import LinkReference

logger = get_logger(__name__)


class BlockKind(Enum):
    """Kinds of blocks that can sit on the stack."""

    DOCUMENT = auto()
    BLOCK_QUOTE = auto()
    LIST = auto()
    LIST_ITEM = auto()
    PARAGRAPH = auto()
    HEADING = auto()
    THEMATIC_BREAK = auto()
    FENCED_CODE = auto()
    INDENTED_CODE = auto()
    HTML_BLOCK = auto()
    TABLE = auto()


# Blocks counted by the nesting guard
NESTING_KINDS = frozenset({BlockKind.BLOCK_QUOTE, BlockKind.LIST_ITEM})

# Leaf blocks whose lines are collected as raw text
LINE_KINDS = frozenset(
    {
        BlockKind.PARAGRAPH,
        BlockKind.FENCED_CODE,
        BlockKind.INDENTED_CODE,
        BlockKind.HTML_BLOCK,
        BlockKind.TABLE,
    }
)


def can_contain(parent: BlockKind, child: BlockKind) -> bool:
    """Return True if a ``parent`` block may directly hold a ``child`` block."""
    match parent:
        case BlockKind.DOCUMENT | BlockKind.BLOCK_QUOTE | BlockKind.LIST_ITEM:
            return child is not BlockKind.LIST_ITEM
        case BlockKind.LIST:
            return child is BlockKind.LIST_ITEM
        case _:
            return False


@dataclass(frozen=True, slots=True)
class ListMarker:
    """A parsed list marker.

    Attributes:
        ordered: True for ``1.`` / ``1)`` markers
        marker: Bullet character, or the ordered delimiter (``.`` or ``)``)
        start: Number of an ordered marker
        marker_offset: Columns between the container edge and the marker
        padding: Marker width plus the spaces that belong to it

    """

    ordered: bool
    marker: str
    start: int
    marker_offset: int
    padding: int

    def same_list(self, other: ListMarker) -> bool:
        """Could an item with ``other`` continue a list started by this marker?"""
        return self.ordered == other.ordered and self.marker == other.marker


@dataclass(slots=True)
class ContainerFrame:
    """One open (or finished) block during block parsing.

    Attributes:
        kind: What the block is
        lineno: First line of the block
        col_offset: Column of the block start (1-indexed)
        offset: Byte offset where the block's first line starts
        end_lineno: Last line seen so far
        end_offset: Byte offset past the last line seen so far
        end_col_offset: Column just past the last line seen so far
        children: Child frames, in source order
        lines: Raw text lines of a leaf block
        last_line_blank: The most recent line of this block was blank
        open: False once the block has been finalized
        definitions: Reference definitions already stripped from the text
            of a paragraph or setext heading

    """

    kind: BlockKind
    lineno: int
    col_offset: int
    offset: int
    end_lineno: int
    end_offset: int
    end_col_offset: int = 1
    children: list[ContainerFrame] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)
    last_line_blank: bool = False
    last_line_checked: bool = False
    open: bool = True

    # Heading
    level: int = 0
    setext: bool = False
    content: str = ""
    definitions: list[LinkReference] = field(default_factory=list)

    # List and list item
    list_marker: ListMarker | None = None
    tight: bool = True

    # Fenced code
    fence_char: str = ""
    fence_length: int = 0
    fence_offset: int = 0
    info: str = ""

    # HTML block
    html_type: int = 0

    # Table
    header: str = ""
    alignments: tuple[Alignment, ...] = ()

    @property
    def last_child(self) -> ContainerFrame | None:
        return self.children[-1] if self.children else None

    def ends_with_blank_line(self) -> bool:
        """Does this block, or its trailing list descendants, end in a blank line?"""
        frame: ContainerFrame | None = self
        while frame is not None:
            if frame.last_line_blank:
                return True
            if not frame.last_line_checked and frame.kind in (
                BlockKind.LIST,
                BlockKind.LIST_ITEM,
            ):
                frame.last_line_checked = True
                frame = frame.last_child
            else:
                frame.last_line_checked = True
                break
        return False


class ContainerStack:
    """Stack of open blocks with a nesting guard.

    Invariant: ``frames[0]`` is always the DOCUMENT frame and ``frames[-1]``
    is the innermost open block.

    """

    __slots__ = ("_frames", "_max_depth", "_depth", "_source_file")

    def __init__(self, max_depth: int, source_file: str | None = None) -> None:
        self._frames: list[ContainerFrame] = [
            ContainerFrame(BlockKind.DOCUMENT, 1, 1, 0, 1, 0, 1)
        ]
        self._max_depth = max_depth
        self._depth = 0
        self._source_file = source_file

    @property
    def document(self) -> ContainerFrame:
        return self._frames[0]

    @property
    def tip(self) -> ContainerFrame:
        """Innermost open block."""
        return self._frames[-1]

    @property
    def depth(self) -> int:
        """Number of open block quotes and list items."""
        return self._depth

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> ContainerFrame:
        return self._frames[index]

    def push(self, frame: ContainerFrame, line: Line) -> None:
        """Open ``frame`` as a child of the current tip.

        Raises:
            ResourceLimitExceeded: If the frame would nest block quotes and
                list items deeper than the configured maximum
        """
        if frame.kind in NESTING_KINDS:
            if self._depth >= self._max_depth:
                logger.debug(
                    "Nesting limit %d exceeded at line %d", self._max_depth, line.lineno
                )
                raise ResourceLimitExceeded(
                    self._max_depth,
                    offset=line.offset,
                    lineno=line.lineno,
                    col_offset=frame.col_offset,
                    source_file=self._source_file,
                )
            self._depth += 1
        self.tip.children.append(frame)
        self._frames.append(frame)

    def pop(self) -> ContainerFrame:
        """Remove and return the innermost block (never the document)."""
        frame = self._frames.pop()
        if frame.kind in NESTING_KINDS:
            self._depth -= 1
        frame.open = False
        return frame

    def extend_to(self, line: Line) -> None:
        """Record that every open block spans at least through ``line``."""
        for frame in self._frames:
            frame.end_lineno = line.lineno
            frame.end_offset = line.end_offset
            frame.end_col_offset = len(line.text) + 1


__all__ = [
    "BlockKind",
    "ContainerFrame",
    "ContainerStack",
    "ListMarker",
    "LINE_KINDS",
    "NESTING_KINDS",
    "can_contain",
]
