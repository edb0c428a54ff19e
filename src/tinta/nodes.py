"""Typed AST nodes for Tinta.

All AST nodes are frozen dataclasses with slots, so a parsed Document can be
shared freely between threads and matched with ``match`` statements.

Node Hierarchy:
Node (base)
├── Block (block-level elements)
│   ├── Document
│   ├── Heading
│   ├── Paragraph
│   ├── CodeBlock
│   ├── BlockQuote
│   ├── List
│   ├── ListItem
│   ├── ThematicBreak
│   ├── HtmlBlock
│   └── Table (TableRow, TableCell)
└── Inline (inline elements)
    ├── Text
    ├── Emphasis
    ├── Strong
    ├── CodeSpan
    ├── Link
    ├── Image
    ├── Autolink
    ├── RawHtml
    ├── LineBreak
    └── Escape

Containers own their children as tuples. There are no parent pointers;
consumers walk the tree top-down.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from tinta.location import SourceLocation

Alignment: TypeAlias = Literal["left", "center", "right"] | None

# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes."""

    location: SourceLocation


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text. Escaped on output."""

    content: str


@dataclass(frozen=True, slots=True)
class Emphasis(Node):
    """Emphasized text.

    Markdown: *text* or _text_
    HTML: <em>text</em>

    """

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Strong(Node):
    """Strong text.

    Markdown: **text** or __text__
    HTML: <strong>text</strong>

    """

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class CodeSpan(Node):
    """Inline code. ``content`` is already normalized (newlines to spaces,
    one padding space stripped from each side)."""

    content: str


@dataclass(frozen=True, slots=True)
class Link(Node):
    """Hyperlink.

    Markdown: [text](url "title") or [text][label]
    HTML: <a href="url" title="title">text</a>

    """

    destination: str
    title: str | None
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Image(Node):
    """Image. The alt text is kept as inline children and flattened to plain
    text when rendered.

    Markdown: ![alt](url "title")
    HTML: <img src="url" alt="alt" title="title" />

    """

    destination: str
    title: str | None
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Autolink(Node):
    """Autolink: ``<https://x>``, ``<me@host>`` or a bare URL.

    ``uri`` is the link target (``mailto:`` or ``http://`` prefixed where the
    source omitted a scheme); ``text`` is what the reader sees.
    """

    uri: str
    text: str
    email: bool = False


@dataclass(frozen=True, slots=True)
class RawHtml(Node):
    """Inline HTML passed through verbatim (unsanitized)."""

    html: str


@dataclass(frozen=True, slots=True)
class LineBreak(Node):
    """Line break. ``hard`` breaks render as <br />, soft ones as a newline."""

    hard: bool


@dataclass(frozen=True, slots=True)
class Escape(Node):
    """Backslash-escaped ASCII punctuation character."""

    literal: str


Inline: TypeAlias = (
    Text
    | Emphasis
    | Strong
    | CodeSpan
    | Link
    | Image
    | Autolink
    | RawHtml
    | LineBreak
    | Escape
)


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Heading(Node):
    """ATX (``# Title``) or setext (underlined) heading."""

    level: Literal[1, 2, 3, 4, 5, 6]
    children: tuple[Inline, ...]
    style: Literal["atx", "setext"] = "atx"


@dataclass(frozen=True, slots=True)
class Paragraph(Node):
    """Paragraph of inline content."""

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class CodeBlock(Node):
    """Fenced or indented code block.

    Attributes:
        code: Verbatim content, ending with a newline unless empty
        language: First word of the info string, if any
        info: Full (unescaped) info string of a fenced block
        fenced: True for fenced blocks, False for indented ones

    """

    code: str
    language: str | None = None
    info: str | None = None
    fenced: bool = True


@dataclass(frozen=True, slots=True)
class BlockQuote(Node):
    """Block quote container."""

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class ListItem(Node):
    """One item of a List."""

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class List(Node):
    """Bullet or ordered list.

    Attributes:
        items: The list items
        ordered: True for ``1.`` style lists
        start: First number of an ordered list
        tight: True when no blank line separates items or their blocks
        marker: Bullet character, or ``.`` / ``)`` for ordered lists

    """

    items: tuple[ListItem, ...]
    ordered: bool = False
    start: int = 1
    tight: bool = True
    marker: str = "-"


@dataclass(frozen=True, slots=True)
class ThematicBreak(Node):
    """Horizontal rule."""


@dataclass(frozen=True, slots=True)
class HtmlBlock(Node):
    """Raw HTML block, passed through verbatim (unsanitized)."""

    html: str


@dataclass(frozen=True, slots=True)
class TableCell(Node):
    """Table cell with inline content."""

    children: tuple[Inline, ...]
    align: Alignment = None
    is_header: bool = False


@dataclass(frozen=True, slots=True)
class TableRow(Node):
    """Table row."""

    cells: tuple[TableCell, ...]
    is_header: bool = False


@dataclass(frozen=True, slots=True)
class Table(Node):
    """GFM pipe table.

    ``alignments`` holds one entry per column; every row has exactly that
    many cells.
    """

    head: TableRow
    body: tuple[TableRow, ...]
    alignments: tuple[Alignment, ...]


Block: TypeAlias = (
    Heading
    | Paragraph
    | CodeBlock
    | BlockQuote
    | List
    | ListItem
    | ThematicBreak
    | HtmlBlock
    | Table
)


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root node: the top-level blocks of one parsed document."""

    children: tuple[Block, ...]


__all__ = [
    "Alignment",
    "Node",
    "Text",
    "Emphasis",
    "Strong",
    "CodeSpan",
    "Link",
    "Image",
    "Autolink",
    "RawHtml",
    "LineBreak",
    "Escape",
    "Inline",
    "Heading",
    "Paragraph",
    "CodeBlock",
    "BlockQuote",
    "ListItem",
    "List",
    "ThematicBreak",
    "HtmlBlock",
    "TableCell",
    "TableRow",
    "Table",
    "Block",
    "Document",
]
