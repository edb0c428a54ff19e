"""Block parser: logical lines to a tree of block frames.

Implements the line-by-line open-block strategy used by CommonMark parsers.
For each line:

1. Walk the open blocks from outermost to innermost, consuming each one's
   continuation prefix (``>`` for quotes, indentation for list items).
2. Try to open new blocks where the continued prefix ends.
3. Hand the rest of the line to the innermost leaf, letting an open
   paragraph absorb it lazily when nothing else claimed it.

Leaf text is kept raw; references and inlines are resolved by later stages.
Nothing here fails on malformed Markdown. The only error is the nesting
guard in ContainerStack.

Thread Safety:
A BlockParser holds per-document state. Create one per parse.

"""

from __future__ import annotations

import re
from collections.abc import Iterable

from tinta.config import ParseConfig
from tinta.parsing.blocks.starts import (
    CODE_INDENT,
    NO_START,
    STARTED_CONTAINER,
    STARTED_LEAF,
    BlockStartsMixin,
)
from tinta.parsing.charsets import BLOCK_START_CHARS, TABLE_START_CHARS
from tinta.parsing.containers import (
    LINE_KINDS,
    BlockKind,
    ContainerFrame,
    ContainerStack,
    can_contain,
)
from tinta.parsing.escapes import unescape_string
from tinta.parsing.html import html_block_ends
from tinta.scanner import Line
from tinta.utils.logger import get_logger

logger = get_logger(__name__)

# Results of continuing an open block
_MATCHED = 0
_FAILED = 1
_LINE_CONSUMED = 2

# Leaves whose content is taken verbatim; no block starts are tried inside
_VERBATIM_KINDS = frozenset(
    {BlockKind.FENCED_CODE, BlockKind.INDENTED_CODE, BlockKind.HTML_BLOCK}
)

_CLOSING_FENCE = re.compile(r"(?:`{3,}|~{3,}) *$")
_TRAILING_BLANK_LINES = re.compile(r"(?:\n *)+$")


class BlockParser(BlockStartsMixin):
    """Build the block frame tree for one document.

    Usage:
        root = BlockParser(ParseConfig()).parse(Scanner(text))

    """

    __slots__ = (
        "_config",
        "_source_file",
        "_start_chars",
        "_stack",
        "_line",
        "_text",
        "_offset",
        "_next_nonspace",
        "_indent",
        "_indented",
        "_blank",
        "_all_closed",
        "_last_matched",
    )

    def __init__(self, config: ParseConfig, source_file: str | None = None) -> None:
        self._config = config
        self._source_file = source_file
        self._start_chars = BLOCK_START_CHARS
        if config.tables_enabled:
            self._start_chars = BLOCK_START_CHARS | TABLE_START_CHARS

    def parse(self, lines: Iterable[Line]) -> ContainerFrame:
        """Consume ``lines`` and return the finished DOCUMENT frame.

        Raises:
            ResourceLimitExceeded: If containers nest deeper than
                ``max_nesting_depth``
        """
        self._stack = ContainerStack(self._config.max_nesting_depth, self._source_file)
        self._all_closed = True
        self._last_matched = 0
        for line in lines:
            self._incorporate_line(line)
        while len(self._stack) > 1:
            tip = self._stack.tip
            if tip.kind is BlockKind.FENCED_CODE:
                logger.debug(
                    "Fenced code block opened at line %d closed at end of input",
                    tip.lineno,
                )
            self._finalize_tip()
        return self._stack.document

    # -------------------------------------------------------------------------
    # Line state
    # -------------------------------------------------------------------------

    def _find_next_nonspace(self) -> None:
        text = self._text
        i = self._offset
        n = len(text)
        while i < n and text[i] == " ":
            i += 1
        self._next_nonspace = i
        self._indent = i - self._offset
        self._blank = i >= n
        self._indented = self._indent >= CODE_INDENT

    def _advance_offset(self, count: int) -> None:
        self._offset = min(self._offset + count, len(self._text))

    def _advance_next_nonspace(self) -> None:
        self._offset = self._next_nonspace

    # -------------------------------------------------------------------------
    # Tree operations
    # -------------------------------------------------------------------------

    def _new_frame(self, kind: BlockKind, column: int) -> ContainerFrame:
        line = self._line
        return ContainerFrame(
            kind=kind,
            lineno=line.lineno,
            col_offset=column + 1,
            offset=line.offset,
            end_lineno=line.lineno,
            end_offset=line.end_offset,
            end_col_offset=len(line.text) + 1,
        )

    def _add_child(self, frame: ContainerFrame) -> None:
        while not can_contain(self._stack.tip.kind, frame.kind):
            self._finalize_tip()
        self._stack.push(frame, self._line)

    def _add_line(self, frame: ContainerFrame) -> None:
        rest = self._text[self._offset :]
        if frame.kind is BlockKind.TABLE and not rest.strip(" "):
            return
        frame.lines.append(rest)

    def _close_unmatched(self) -> None:
        if not self._all_closed:
            while len(self._stack) - 1 > self._last_matched:
                self._finalize_tip()
            self._all_closed = True

    def _finalize_tip(self) -> None:
        """Close the innermost open block and compute its derived fields."""
        frame = self._stack.pop()
        match frame.kind:
            case BlockKind.PARAGRAPH:
                frame.content = "\n".join(frame.lines)
            case BlockKind.FENCED_CODE:
                first, *body = frame.lines or [""]
                frame.info = unescape_string(first.strip(" \t"))
                frame.content = "\n".join(body) + "\n" if body else ""
            case BlockKind.INDENTED_CODE:
                content = "\n".join(frame.lines) + "\n"
                frame.content = _TRAILING_BLANK_LINES.sub("\n", content)
            case BlockKind.HTML_BLOCK:
                frame.content = "\n".join(frame.lines)
            case BlockKind.LIST:
                frame.tight = self._is_tight(frame)
            case _:
                pass

    @staticmethod
    def _is_tight(frame: ContainerFrame) -> bool:
        """A list is loose if a blank line separates items, or separates
        blocks inside an item."""
        items = frame.children
        for index, item in enumerate(items):
            last_item = index == len(items) - 1
            if item.ends_with_blank_line() and not last_item:
                return False
            blocks = item.children
            for sub_index, block in enumerate(blocks):
                last_block = sub_index == len(blocks) - 1
                if block.ends_with_blank_line() and not (last_item and last_block):
                    return False
        return True

    # -------------------------------------------------------------------------
    # Per-line algorithm
    # -------------------------------------------------------------------------

    def _continue(self, frame: ContainerFrame) -> int:
        """Try to continue ``frame`` on the current line."""
        match frame.kind:
            case BlockKind.BLOCK_QUOTE:
                if self._indented or not self._text.startswith(">", self._next_nonspace):
                    return _FAILED
                self._advance_next_nonspace()
                self._advance_offset(1)
                if self._text.startswith(" ", self._offset):
                    self._advance_offset(1)
                return _MATCHED
            case BlockKind.LIST_ITEM:
                marker = frame.list_marker
                assert marker is not None
                width = marker.marker_offset + marker.padding
                if self._blank:
                    if not frame.children:
                        return _FAILED
                    self._advance_next_nonspace()
                elif self._indent >= width:
                    self._advance_offset(width)
                else:
                    return _FAILED
                return _MATCHED
            case BlockKind.FENCED_CODE:
                if (
                    self._indent < CODE_INDENT
                    and self._text.startswith(frame.fence_char, self._next_nonspace)
                ):
                    closing = _CLOSING_FENCE.match(self._text, self._next_nonspace)
                    if closing is not None and (
                        len(closing.group().rstrip(" ")) >= frame.fence_length
                    ):
                        return _LINE_CONSUMED
                skip = frame.fence_offset
                while skip > 0 and self._text.startswith(" ", self._offset):
                    self._advance_offset(1)
                    skip -= 1
                return _MATCHED
            case BlockKind.INDENTED_CODE:
                if self._indented:
                    self._advance_offset(CODE_INDENT)
                elif self._blank:
                    self._advance_next_nonspace()
                else:
                    return _FAILED
                return _MATCHED
            case BlockKind.HTML_BLOCK:
                if self._blank and frame.html_type >= 6:
                    return _FAILED
                return _MATCHED
            case BlockKind.PARAGRAPH | BlockKind.TABLE:
                return _FAILED if self._blank else _MATCHED
            case BlockKind.HEADING | BlockKind.THEMATIC_BREAK:
                return _FAILED
            case _:
                return _MATCHED

    def _incorporate_line(self, line: Line) -> None:
        self._line = line
        self._text = line.text
        self._offset = 0
        stack = self._stack

        # 1. Continue open blocks
        matched = 0
        for index in range(1, len(stack)):
            self._find_next_nonspace()
            result = self._continue(stack[index])
            if result == _MATCHED:
                matched = index
                continue
            if result == _LINE_CONSUMED:
                # Closing fence: the fenced block is the innermost block
                stack.extend_to(line)
                self._finalize_tip()
                return
            break

        self._last_matched = matched
        self._all_closed = matched == len(stack) - 1
        container = stack[matched]

        # 2. Open new blocks
        matched_leaf = container.kind in _VERBATIM_KINDS
        while not matched_leaf:
            self._find_next_nonspace()
            first = self._text[self._next_nonspace : self._next_nonspace + 1]
            if not self._indented and first not in self._start_chars:
                self._advance_next_nonspace()
                break
            result = self._try_block_starts(container)
            if result == STARTED_CONTAINER:
                container = stack.tip
                continue
            if result == STARTED_LEAF:
                container = stack.tip
                matched_leaf = True
                break
            self._advance_next_nonspace()
            break

        # 3. Add the remaining text
        tip = stack.tip
        if not self._all_closed and not self._blank and tip.kind is BlockKind.PARAGRAPH:
            # Lazy paragraph continuation
            self._add_line(tip)
        else:
            self._close_unmatched()
            container = stack.tip
            if self._blank and container.last_child is not None:
                container.last_child.last_line_blank = True
            kind = container.kind
            last_line_blank = self._blank and not (
                kind is BlockKind.BLOCK_QUOTE
                or kind is BlockKind.FENCED_CODE
                or (
                    kind is BlockKind.LIST_ITEM
                    and not container.children
                    and container.lineno == line.lineno
                )
            )
            for index in range(len(stack)):
                stack[index].last_line_blank = last_line_blank

            if kind in LINE_KINDS:
                self._add_line(container)
                if (
                    kind is BlockKind.HTML_BLOCK
                    and container.html_type <= 5
                    and html_block_ends(container.html_type, self._text[self._offset :])
                ):
                    stack.extend_to(line)
                    self._finalize_tip()
                    return
            elif self._offset < len(self._text) and not self._blank:
                paragraph = self._new_frame(BlockKind.PARAGRAPH, self._next_nonspace)
                self._add_child(paragraph)
                self._advance_next_nonspace()
                self._add_line(paragraph)

        stack.extend_to(line)


__all__ = ["BlockParser"]
