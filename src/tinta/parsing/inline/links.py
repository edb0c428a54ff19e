"""Link and image parsing for the inline parser.

Module-level scanners cover the pieces of link syntax shared with reference
definitions: labels, destinations and titles. LinkParsingMixin handles
``[`` / ``![`` brackets and the ``]`` that may close them.

Scanners take the leaf text and a start index and return the parsed value
with the index just past it, or None / -1 when the syntax does not match.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tinta.nodes import Image, Inline, Link
from tinta.parsing.charsets import ASCII_PUNCTUATION
from tinta.parsing.escapes import unescape_string
from tinta.parsing.inline.tokens import BracketEntry, DelimiterEntry, Slot
from tinta.utils.logger import get_logger

if TYPE_CHECKING:
    from tinta.config import ParseConfig
    from tinta.location import SourceLocation
    from tinta.parsing.references import ReferenceTable

logger = get_logger(__name__)

MAX_LABEL_LENGTH = 999
_MAX_PAREN_DEPTH = 32
_LABEL_WHITESPACE = re.compile(r"[ \t\r\n]+")
_TITLE_CLOSERS = {'"': '"', "'": "'", "(": ")"}


def normalize_label(label: str) -> str:
    """Normalize a link label for matching.

    Collapses internal whitespace to one space, trims the ends and applies
    Unicode case folding.

    Example:
        >>> normalize_label("  Foo\\n  BAR ")
        'foo bar'
    """
    return _LABEL_WHITESPACE.sub(" ", label).strip(" ").casefold()


def skip_spaces(text: str, pos: int) -> int:
    """Skip spaces and tabs."""
    n = len(text)
    while pos < n and text[pos] in " \t":
        pos += 1
    return pos


def skip_spaces_newline(text: str, pos: int) -> int:
    """Skip spaces and tabs with at most one newline among them."""
    pos = skip_spaces(text, pos)
    if pos < len(text) and text[pos] == "\n":
        pos = skip_spaces(text, pos + 1)
    return pos


def scan_link_label(text: str, pos: int) -> int:
    """Scan ``[label]`` at ``pos`` and return the index past ``]``, or -1.

    Labels hold at most 999 characters and no unescaped brackets.
    """
    n = len(text)
    if pos >= n or text[pos] != "[":
        return -1
    i = pos + 1
    while i < n:
        if i - pos - 1 > MAX_LABEL_LENGTH:
            return -1
        char = text[i]
        if char == "\\" and i + 1 < n:
            i += 2
            continue
        if char == "[":
            return -1
        if char == "]":
            return i + 1
        i += 1
    return -1


def scan_link_destination(text: str, pos: int) -> tuple[str, int] | None:
    """Scan a link destination, either ``<...>`` or bare with balanced parens.

    A bare destination must be non-empty; ``<>`` gives an empty one.
    """
    n = len(text)
    if pos < n and text[pos] == "<":
        i = pos + 1
        while i < n:
            char = text[i]
            if char == "\\" and i + 1 < n and text[i + 1] in ASCII_PUNCTUATION:
                i += 2
                continue
            if char == ">":
                return unescape_string(text[pos + 1 : i]), i + 1
            if char == "<" or char == "\n":
                return None
            i += 1
        return None

    depth = 0
    i = pos
    while i < n:
        char = text[i]
        if char == "\\" and i + 1 < n and text[i + 1] in ASCII_PUNCTUATION:
            i += 2
            continue
        if char == "(":
            depth += 1
            if depth > _MAX_PAREN_DEPTH:
                return None
        elif char == ")":
            if depth == 0:
                break
            depth -= 1
        elif char == " " or char < " " or char == "\x7f":
            break
        i += 1
    if depth != 0 or i == pos:
        return None
    return unescape_string(text[pos:i]), i


def scan_link_title(text: str, pos: int) -> tuple[str, int] | None:
    """Scan a ``"title"``, ``'title'`` or ``(title)`` at ``pos``."""
    n = len(text)
    if pos >= n or text[pos] not in _TITLE_CLOSERS:
        return None
    opener = text[pos]
    closer = _TITLE_CLOSERS[opener]
    i = pos + 1
    while i < n:
        char = text[i]
        if char == "\\" and i + 1 < n and text[i + 1] in ASCII_PUNCTUATION:
            i += 2
            continue
        if char == closer:
            return unescape_string(text[pos + 1 : i]), i + 1
        if opener == "(" and char == "(":
            return None
        i += 1
    return None


def scan_inline_link(text: str, pos: int) -> tuple[str, str | None, int] | None:
    """Scan ``(destination "title")`` at ``pos``.

    Returns ``(destination, title, end)`` or None.
    """
    n = len(text)
    if pos >= n or text[pos] != "(":
        return None
    i = skip_spaces_newline(text, pos + 1)
    destination = ""
    if i < n and text[i] != ")":
        parsed = scan_link_destination(text, i)
        if parsed is None:
            return None
        destination, i = parsed

    title: str | None = None
    j = skip_spaces_newline(text, i)
    if j > i and j < n and text[j] in _TITLE_CLOSERS:
        parsed_title = scan_link_title(text, j)
        if parsed_title is not None:
            title, j = parsed_title
            j = skip_spaces_newline(text, j)
    if j < n and text[j] == ")":
        return destination, title, j + 1
    return None


class LinkParsingMixin:
    """Mixin for link and image resolution.

    Required Host Attributes:
        - _text: str
        - _config: ParseConfig
        - _location: SourceLocation
        - _references: ReferenceTable
        - _slots: list[Slot]
        - _delimiters: list[DelimiterEntry]
        - _brackets: list[BracketEntry]

    Required Host Methods:
        - _append_slot, _collect, _collapse, _process_emphasis

    """

    _text: str
    _config: ParseConfig
    _location: SourceLocation
    _references: ReferenceTable
    _slots: list[Slot]
    _delimiters: list[DelimiterEntry]
    _brackets: list[BracketEntry]

    def _append_slot(self, item: Slot, depth: int = 0) -> int:
        raise NotImplementedError

    def _collect(self, start: int, end: int) -> tuple[tuple[Inline, ...], int]:
        raise NotImplementedError

    def _collapse(self, start: int, end: int, node: Inline, depth: int) -> None:
        raise NotImplementedError

    def _process_emphasis(self, bottom: int) -> None:
        raise NotImplementedError

    def _open_bracket(self, pos: int, image: bool) -> int:
        """Record ``[`` (or ``![``) at ``pos`` and return the index past it."""
        marker = "![" if image else "["
        if self._brackets:
            self._brackets[-1].bracket_after = True
        slot = self._append_slot(marker)
        end = pos + len(marker)
        self._brackets.append(
            BracketEntry(
                slot=slot,
                position=end,
                image=image,
                delimiter_bottom=len(self._delimiters),
            )
        )
        return end

    def _close_bracket(self, pos: int) -> int:
        """Handle ``]`` at ``pos``; return the index to continue from."""
        after = pos + 1
        if not self._brackets:
            self._append_slot("]")
            return after
        opener = self._brackets[-1]
        if not opener.active:
            self._brackets.pop()
            self._append_slot("]")
            return after

        resolved = self._resolve_link_target(opener, pos)
        if resolved is None:
            self._brackets.pop()
            self._append_slot("]")
            return after
        destination, title, end = resolved

        self._process_emphasis(opener.delimiter_bottom)
        start = opener.slot + 1
        children, depth = self._collect(start, len(self._slots))
        if depth + 1 > self._config.max_nesting_depth:
            logger.debug(
                "Link at line %d left literal: nesting limit %d",
                self._location.lineno,
                self._config.max_nesting_depth,
            )
            self._brackets.pop()
            self._append_slot("]")
            return after

        node: Inline
        if opener.image:
            node = Image(
                location=self._location,
                destination=destination,
                title=title,
                children=children,
            )
        else:
            node = Link(
                location=self._location,
                destination=destination,
                title=title,
                children=children,
            )
        self._collapse(opener.slot, len(self._slots), node, depth + 1)
        self._brackets.pop()
        if not opener.image:
            # Links may not contain other links
            for bracket in self._brackets:
                if not bracket.image:
                    bracket.active = False
        return end

    def _resolve_link_target(
        self, opener: BracketEntry, pos: int
    ) -> tuple[str, str | None, int] | None:
        """Find the destination for brackets closed at ``pos``.

        Tries an inline ``(dest "title")`` first, then full, collapsed and
        shortcut reference forms.
        """
        text = self._text
        after = pos + 1
        inline = scan_inline_link(text, after)
        if inline is not None:
            return inline

        label_end = scan_link_label(text, after)
        if label_end > after + 2:
            label = text[after + 1 : label_end - 1]
            end = label_end
        elif not opener.bracket_after and pos - opener.position <= MAX_LABEL_LENGTH:
            label = text[opener.position : pos]
            end = label_end if label_end == after + 2 else after
        else:
            return None

        if not normalize_label(label):
            return None
        reference = self._references.lookup(label)
        if reference is None:
            return None
        return reference.destination, reference.title, end


__all__ = [
    "LinkParsingMixin",
    "MAX_LABEL_LENGTH",
    "normalize_label",
    "scan_inline_link",
    "scan_link_destination",
    "scan_link_label",
    "scan_link_title",
    "skip_spaces",
    "skip_spaces_newline",
]
