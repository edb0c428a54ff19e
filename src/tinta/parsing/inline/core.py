"""Inline parser: leaf block text to inline nodes.

Parsing runs in two phases over one leaf block's text:

1. Tokenize left to right into slots: text, finished nodes (code spans,
   autolinks, raw HTML, escapes, breaks), and delimiter runs recorded on the
   delimiter stack. Brackets are resolved as soon as their ``]`` is seen.
2. Resolve the remaining emphasis delimiters and flatten the slots into a
   tuple of inline nodes, merging adjacent text.

Nothing here raises: unmatched delimiters, brackets and unknown references
all come out as literal text.

Thread Safety:
An InlineParser keeps per-call state. Use one instance per thread.

"""

from __future__ import annotations

import re
from bisect import bisect_left
from typing import TYPE_CHECKING

from tinta.nodes import CodeSpan, Escape, Inline, LineBreak, Text
from tinta.parsing.charsets import ASCII_PUNCTUATION, INLINE_SPECIAL
from tinta.parsing.inline.emphasis import EmphasisMixin
from tinta.parsing.inline.links import LinkParsingMixin
from tinta.parsing.inline.special import SpecialInlineMixin, find_bare_url
from tinta.parsing.inline.tokens import BracketEntry, DelimiterEntry, Slot

if TYPE_CHECKING:
    from tinta.config import ParseConfig
    from tinta.location import SourceLocation
    from tinta.parsing.references import ReferenceTable

_BACKTICK_RUN = re.compile(r"`+")


class InlineParser(EmphasisMixin, LinkParsingMixin, SpecialInlineMixin):
    """Resolve inline content for the leaf blocks of one document.

    Usage:
        parser = InlineParser(references, config)
        children = parser.parse("*hello* world", location)

    """

    __slots__ = (
        "_references",
        "_config",
        "_text",
        "_location",
        "_slots",
        "_skip",
        "_depths",
        "_delimiters",
        "_brackets",
        "_find_cache",
        "_backtick_runs",
    )

    def __init__(self, references: ReferenceTable, config: ParseConfig) -> None:
        self._references = references
        self._config = config

    def parse(self, text: str, location: SourceLocation) -> tuple[Inline, ...]:
        """Parse ``text`` into inline nodes, all carrying ``location``."""
        text = text.strip(" \t\n")
        if not text:
            return ()
        self._text = text
        self._location = location
        self._slots: list[Slot] = []
        self._skip: list[int] = []
        self._depths: list[int] = []
        self._delimiters: list[DelimiterEntry] = []
        self._brackets: list[BracketEntry] = []
        self._find_cache: dict[str, tuple[int, int]] = {}
        self._backtick_runs: dict[int, list[int]] | None = None

        pos = 0
        n = len(text)
        while pos < n:
            match text[pos]:
                case "\n":
                    pos = self._line_break(pos)
                case "\\":
                    pos = self._backslash(pos)
                case "`":
                    pos = self._code_span(pos)
                case "*" | "_":
                    pos = self._scan_delimiter_run(pos)
                case "[":
                    pos = self._open_bracket(pos, image=False)
                case "!" if text.startswith("[", pos + 1):
                    pos = self._open_bracket(pos, image=True)
                case "]":
                    pos = self._close_bracket(pos)
                case "<":
                    pos = self._try_angle_bracket(pos)
                case "&":
                    pos = self._try_entity(pos)
                case _:
                    pos = self._text_run(pos)

        self._process_emphasis(0)
        children, _ = self._collect(0, len(self._slots))
        return children

    # -------------------------------------------------------------------------
    # Slots
    # -------------------------------------------------------------------------

    def _append_slot(self, item: Slot, depth: int = 0) -> int:
        index = len(self._slots)
        self._slots.append(item)
        self._skip.append(index + 1)
        self._depths.append(depth)
        return index

    def _collect(self, start: int, end: int) -> tuple[tuple[Inline, ...], int]:
        """Gather the live slots in ``[start, end)`` as inline nodes.

        Returns the nodes and the deepest nesting depth among them.
        """
        slots = self._slots
        skip = self._skip
        nodes: list[Inline] = []
        pending: list[str] = []
        depth = 0
        index = start
        while index < end:
            item = slots[index]
            if isinstance(item, str):
                if item:
                    pending.append(item)
            elif item is not None:
                if pending:
                    nodes.append(Text(location=self._location, content="".join(pending)))
                    pending = []
                nodes.append(item)
                depth = max(depth, self._depths[index])
            index = skip[index]
        if pending:
            nodes.append(Text(location=self._location, content="".join(pending)))
        return tuple(nodes), depth

    def _collapse(self, start: int, end: int, node: Inline, depth: int) -> None:
        """Replace the slots in ``[start, end)`` with ``node``."""
        self._slots[start] = node
        self._depths[start] = depth
        self._skip[start] = end

    # -------------------------------------------------------------------------
    # Tokenizer steps
    # -------------------------------------------------------------------------

    def _text_run(self, pos: int) -> int:
        text = self._text
        n = len(text)
        end = pos + 1
        while end < n and text[end] not in INLINE_SPECIAL:
            end += 1
        # Bare URLs are not linked inside bracketed text, which may become a link
        if self._config.autolinks_enabled and not self._brackets:
            url_at = find_bare_url(text, pos, end)
            if url_at != -1:
                if url_at > pos:
                    self._append_slot(text[pos:url_at])
                url_end = self._try_bare_url(url_at)
                if url_end != -1:
                    return url_end
                self._append_slot(text[url_at])
                return url_at + 1
        self._append_slot(text[pos:end])
        return end

    def _line_break(self, pos: int) -> int:
        """Newline: hard break after two or more spaces, else soft."""
        hard = self._config.hard_break_on_newline
        if self._slots:
            last = self._slots[-1]
            if isinstance(last, str) and last.endswith(" "):
                stripped = last.rstrip(" ")
                if len(last) - len(stripped) >= 2:
                    hard = True
                self._slots[-1] = stripped
        self._append_slot(LineBreak(location=self._location, hard=hard))
        return self._skip_leading_spaces(pos + 1)

    def _skip_leading_spaces(self, pos: int) -> int:
        text = self._text
        while pos < len(text) and text[pos] == " ":
            pos += 1
        return pos

    def _backslash(self, pos: int) -> int:
        """Backslash: escape, hard break before a newline, or literal."""
        nxt = self._text[pos + 1 : pos + 2]
        if nxt == "\n":
            self._append_slot(LineBreak(location=self._location, hard=True))
            return self._skip_leading_spaces(pos + 2)
        if nxt and nxt in ASCII_PUNCTUATION:
            self._append_slot(Escape(location=self._location, literal=nxt))
            return pos + 2
        self._append_slot("\\")
        return pos + 1

    def _code_span(self, pos: int) -> int:
        """Backtick run: a code span if a run of the same length follows."""
        text = self._text
        end = pos
        while end < len(text) and text[end] == "`":
            end += 1
        length = end - pos
        close = self._find_backtick_run(length, end)
        if close == -1:
            self._append_slot(text[pos:end])
            return end

        content = text[end:close].replace("\n", " ")
        if (
            len(content) >= 2
            and content[0] == " "
            and content[-1] == " "
            and content.strip(" ")
        ):
            content = content[1:-1]
        self._append_slot(CodeSpan(location=self._location, content=content))
        return close + length

    def _find_backtick_run(self, length: int, start: int) -> int:
        """Start of the first backtick run of exactly ``length`` at or after ``start``."""
        if self._backtick_runs is None:
            runs: dict[int, list[int]] = {}
            for match in _BACKTICK_RUN.finditer(self._text):
                runs.setdefault(match.end() - match.start(), []).append(match.start())
            self._backtick_runs = runs
        positions = self._backtick_runs.get(length)
        if not positions:
            return -1
        index = bisect_left(positions, start)
        return positions[index] if index < len(positions) else -1


__all__ = ["InlineParser"]
