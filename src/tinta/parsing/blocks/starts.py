"""Block start recognition for the block parser.

Each ``_start_*`` method inspects the current line at the first non-space
character and, if its block type begins there, closes unmatched blocks,
opens the new block and returns STARTED_CONTAINER or STARTED_LEAF.
Otherwise it returns NO_START and leaves the line state untouched.

Order matters and follows the CommonMark precedence table: block quote,
ATX heading, fenced code, HTML block, table, setext underline, thematic
break, list item, indented code.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tinta.parsing.blocks.table import parse_delimiter_row, split_row
from tinta.parsing.containers import BlockKind, ContainerFrame, ListMarker
from tinta.parsing.html import html_block_start
from tinta.parsing.references import split_definitions

if TYPE_CHECKING:
    from tinta.config import ParseConfig
    from tinta.parsing.containers import ContainerStack

NO_START = 0
STARTED_CONTAINER = 1
STARTED_LEAF = 2

CODE_INDENT = 4

_ATX_OPEN = re.compile(r"#{1,6}(?: +|$)")
_ATX_CLOSING_ONLY = re.compile(r"^ *#+ *$")
_ATX_CLOSING = re.compile(r" +#+ *$")
_FENCE_OPEN = re.compile(r"`{3,}(?!.*`)|~{3,}")
_SETEXT_UNDERLINE = re.compile(r"(?:=+|-+) *$")
_THEMATIC_BREAK = re.compile(r"(?:(?:\* *){3,}|(?:_ *){3,}|(?:- *){3,})$")
_BULLET_MARKER = re.compile(r"[*+-]")
_ORDERED_MARKER = re.compile(r"(\d{1,9})([.)])")


class BlockStartsMixin:
    """Mixin recognizing the start of each block type.

    Required Host Attributes:
        - _config: ParseConfig
        - _stack: ContainerStack
        - _text, _offset, _next_nonspace, _indent, _indented, _blank, _all_closed

    Required Host Methods:
        - _advance_offset, _advance_next_nonspace, _close_unmatched,
          _add_child, _new_frame

    """

    _config: ParseConfig
    _stack: ContainerStack
    _text: str
    _offset: int
    _next_nonspace: int
    _indent: int
    _indented: bool
    _blank: bool
    _all_closed: bool

    def _advance_offset(self, count: int) -> None:
        raise NotImplementedError

    def _advance_next_nonspace(self) -> None:
        raise NotImplementedError

    def _close_unmatched(self) -> None:
        raise NotImplementedError

    def _add_child(self, frame: ContainerFrame) -> None:
        raise NotImplementedError

    def _new_frame(self, kind: BlockKind, column: int) -> ContainerFrame:
        raise NotImplementedError

    def _try_block_starts(self, container: ContainerFrame) -> int:
        """Try every block start in precedence order."""
        for start in (
            self._start_block_quote,
            self._start_atx_heading,
            self._start_fenced_code,
            self._start_html_block,
            self._start_table,
            self._start_setext_heading,
            self._start_thematic_break,
            self._start_list_item,
            self._start_indented_code,
        ):
            result = start(container)
            if result != NO_START:
                return result
        return NO_START

    def _consume_rest(self) -> None:
        self._advance_offset(len(self._text) - self._offset)

    def _start_block_quote(self, container: ContainerFrame) -> int:
        if self._indented or not self._text.startswith(">", self._next_nonspace):
            return NO_START
        column = self._next_nonspace
        self._advance_next_nonspace()
        self._advance_offset(1)
        if self._text.startswith(" ", self._offset):
            self._advance_offset(1)
        self._close_unmatched()
        self._add_child(self._new_frame(BlockKind.BLOCK_QUOTE, column))
        return STARTED_CONTAINER

    def _start_atx_heading(self, container: ContainerFrame) -> int:
        if self._indented:
            return NO_START
        match = _ATX_OPEN.match(self._text, self._next_nonspace)
        if match is None:
            return NO_START
        column = self._next_nonspace
        self._advance_next_nonspace()
        self._advance_offset(len(match.group()))
        self._close_unmatched()

        frame = self._new_frame(BlockKind.HEADING, column)
        frame.level = len(match.group().rstrip(" "))
        content = _ATX_CLOSING_ONLY.sub("", self._text[self._offset :])
        frame.content = _ATX_CLOSING.sub("", content).strip(" ")
        self._add_child(frame)
        self._consume_rest()
        return STARTED_LEAF

    def _start_fenced_code(self, container: ContainerFrame) -> int:
        if self._indented:
            return NO_START
        match = _FENCE_OPEN.match(self._text, self._next_nonspace)
        if match is None:
            return NO_START
        fence = match.group()
        self._close_unmatched()

        frame = self._new_frame(BlockKind.FENCED_CODE, self._next_nonspace)
        frame.fence_char = fence[0]
        frame.fence_length = len(fence)
        frame.fence_offset = self._indent
        self._add_child(frame)
        self._advance_next_nonspace()
        self._advance_offset(len(fence))
        return STARTED_LEAF

    def _start_html_block(self, container: ContainerFrame) -> int:
        if self._indented or not self._text.startswith("<", self._next_nonspace):
            return NO_START
        lazy = (
            not self._all_closed
            and not self._blank
            and self._stack.tip.kind is BlockKind.PARAGRAPH
        )
        html_type = html_block_start(
            self._text[self._next_nonspace :],
            interrupts_paragraph=lazy or container.kind is BlockKind.PARAGRAPH,
        )
        if not html_type:
            return NO_START
        self._close_unmatched()
        frame = self._new_frame(BlockKind.HTML_BLOCK, self._next_nonspace)
        frame.html_type = html_type
        self._add_child(frame)
        return STARTED_LEAF

    def _start_table(self, container: ContainerFrame) -> int:
        if (
            not self._config.tables_enabled
            or self._indented
            or container.kind is not BlockKind.PARAGRAPH
            or len(container.lines) != 1
        ):
            return NO_START
        alignments = parse_delimiter_row(self._text[self._next_nonspace :])
        if alignments is None:
            return NO_START
        header = container.lines[0]
        if len(split_row(header)) != len(alignments):
            return NO_START
        self._close_unmatched()
        container.kind = BlockKind.TABLE
        container.header = header
        container.alignments = alignments
        container.lines = []
        self._consume_rest()
        return STARTED_LEAF

    def _start_setext_heading(self, container: ContainerFrame) -> int:
        if self._indented or container.kind is not BlockKind.PARAGRAPH:
            return NO_START
        if _SETEXT_UNDERLINE.match(self._text, self._next_nonspace) is None:
            return NO_START
        text = "\n".join(container.lines)
        references, pos = split_definitions(text)
        container.definitions.extend(references)
        rest = text[pos:].strip(" \t\n")
        if not rest:
            # Only definitions: the underline continues the paragraph.
            container.lines = []
            return NO_START
        self._close_unmatched()
        container.kind = BlockKind.HEADING
        container.level = 1 if self._text[self._next_nonspace] == "=" else 2
        container.setext = True
        container.content = rest
        container.lines = []
        self._consume_rest()
        return STARTED_LEAF

    def _start_thematic_break(self, container: ContainerFrame) -> int:
        if self._indented or _THEMATIC_BREAK.match(self._text, self._next_nonspace) is None:
            return NO_START
        self._close_unmatched()
        self._add_child(self._new_frame(BlockKind.THEMATIC_BREAK, self._next_nonspace))
        self._consume_rest()
        return STARTED_LEAF

    def _start_list_item(self, container: ContainerFrame) -> int:
        parsed = self._parse_list_marker(container)
        if parsed is None:
            return NO_START
        marker, content_offset = parsed
        column = self._next_nonspace
        self._offset = content_offset
        self._close_unmatched()

        tip = self._stack.tip
        if (
            tip.kind is not BlockKind.LIST
            or tip.list_marker is None
            or not tip.list_marker.same_list(marker)
        ):
            lst = self._new_frame(BlockKind.LIST, column)
            lst.list_marker = marker
            self._add_child(lst)
        item = self._new_frame(BlockKind.LIST_ITEM, column)
        item.list_marker = marker
        self._add_child(item)
        return STARTED_CONTAINER

    def _start_indented_code(self, container: ContainerFrame) -> int:
        if (
            not self._indented
            or self._blank
            or self._stack.tip.kind is BlockKind.PARAGRAPH
        ):
            return NO_START
        self._advance_offset(CODE_INDENT)
        self._close_unmatched()
        self._add_child(self._new_frame(BlockKind.INDENTED_CODE, self._offset))
        return STARTED_LEAF

    def _parse_list_marker(self, container: ContainerFrame) -> tuple[ListMarker, int] | None:
        """Parse a list marker at the first non-space character.

        Returns the marker and the offset where the item's content begins,
        or None. A marker interrupting a paragraph must have content, and an
        ordered one must start at 1.
        """
        if self._indent >= CODE_INDENT:
            return None
        text = self._text
        start = self._next_nonspace
        in_paragraph = container.kind is BlockKind.PARAGRAPH

        match = _BULLET_MARKER.match(text, start)
        if match is not None:
            ordered, marker, number = False, match.group(), 1
        else:
            match = _ORDERED_MARKER.match(text, start)
            if match is None:
                return None
            number = int(match.group(1))
            if in_paragraph and number != 1:
                return None
            ordered, marker = True, match.group(2)

        marker_end = match.end()
        n = len(text)
        if marker_end < n and text[marker_end] != " ":
            return None
        if in_paragraph and not text[marker_end:].strip(" "):
            return None

        spaces = 0
        i = marker_end
        while i < n and text[i] == " " and spaces < 5:
            i += 1
            spaces += 1
        width = marker_end - start
        if spaces >= 5 or spaces < 1 or i >= n:
            # Blank item, or the content is indented code: one space belongs
            # to the marker
            padding = width + 1
            content_offset = marker_end + (1 if marker_end < n else 0)
        else:
            padding = width + spaces
            content_offset = marker_end + spaces
        return ListMarker(ordered, marker, number, self._indent, padding), content_offset


__all__ = [
    "BlockStartsMixin",
    "CODE_INDENT",
    "NO_START",
    "STARTED_CONTAINER",
    "STARTED_LEAF",
]
