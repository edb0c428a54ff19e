"""Emphasis parsing for the inline parser.

Implements the CommonMark delimiter stack algorithm for emphasis and strong
emphasis. See: https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis

Delimiter entries sit in a list in source order. While a range of the list
is being resolved its entries are threaded together through their ``prev``
and ``next`` indices, so removing an entry is constant time and the
backward scan for an opener never revisits removed entries.

Thread Safety:
All state is instance-local. Use one parser instance per thread.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tinta.nodes import Emphasis, Inline, Strong
from tinta.parsing.charsets import is_unicode_punctuation, is_unicode_whitespace
from tinta.parsing.inline.tokens import DelimiterEntry, Slot
from tinta.utils.logger import get_logger

if TYPE_CHECKING:
    from tinta.config import ParseConfig
    from tinta.location import SourceLocation

logger = get_logger(__name__)


def classify_run(before: str, after: str, char: str) -> tuple[bool, bool]:
    """Return ``(can_open, can_close)`` for a delimiter run.

    Args:
        before: Character preceding the run ("" at the start of the text)
        after: Character following the run ("" at the end of the text)
        char: The delimiter character

    Example:
        >>> classify_run(" ", "a", "*")
        (True, False)
    """
    after_ws = is_unicode_whitespace(after)
    before_ws = is_unicode_whitespace(before)
    after_punct = is_unicode_punctuation(after)
    before_punct = is_unicode_punctuation(before)

    left = not after_ws and (not after_punct or before_ws or before_punct)
    right = not before_ws and (not before_punct or after_ws or after_punct)

    if char == "_":
        return (left and (not right or before_punct), right and (not left or after_punct))
    return left, right


class EmphasisMixin:
    """Mixin for emphasis delimiter processing.

    Required Host Attributes:
        - _text: str
        - _config: ParseConfig
        - _location: SourceLocation
        - _slots: list[Slot]
        - _delimiters: list[DelimiterEntry]

    Required Host Methods:
        - _append_slot
        - _collect
        - _collapse

    """

    _text: str
    _config: ParseConfig
    _location: SourceLocation
    _slots: list[Slot]
    _delimiters: list[DelimiterEntry]

    def _append_slot(self, item: Slot, depth: int = 0) -> int:
        raise NotImplementedError

    def _collect(self, start: int, end: int) -> tuple[tuple[Inline, ...], int]:
        raise NotImplementedError

    def _collapse(self, start: int, end: int, node: Inline, depth: int) -> None:
        raise NotImplementedError

    def _scan_delimiter_run(self, pos: int) -> int:
        """Record the ``*`` / ``_`` run at ``pos`` and return the index past it."""
        text = self._text
        char = text[pos]
        end = pos
        while end < len(text) and text[end] == char:
            end += 1
        before = text[pos - 1] if pos > 0 else ""
        after = text[end] if end < len(text) else ""
        can_open, can_close = classify_run(before, after, char)

        run = text[pos:end]
        slot = self._append_slot(run)
        if can_open or can_close:
            self._delimiters.append(
                DelimiterEntry(
                    char=char,  # type: ignore[arg-type]
                    length=len(run),
                    orig_length=len(run),
                    slot=slot,
                    position=pos,
                    can_open=can_open,
                    can_close=can_close,
                )
            )
        return end

    def _process_emphasis(self, bottom: int) -> None:
        """Resolve emphasis among delimiter entries at index ``bottom`` and above.

        All entries from ``bottom`` up are discarded afterwards; unmatched
        runs stay in their slots as literal text.
        """
        delimiters = self._delimiters
        count = len(delimiters)
        if bottom >= count:
            return
        for index in range(bottom, count):
            entry = delimiters[index]
            entry.prev = index - 1 if index > bottom else -1
            entry.next = index + 1 if index + 1 < count else -1

        # Lowest index an opener search may reach, per closer kind
        openers_bottom: dict[tuple[str, bool, int], int] = {}

        closer_index = bottom
        while closer_index != -1:
            closer = delimiters[closer_index]
            if not closer.can_close:
                closer_index = closer.next
                continue

            key = (closer.char, closer.can_open, closer.orig_length % 3)
            floor = openers_bottom.get(key, bottom - 1)
            opener_index = closer.prev
            found = False
            while opener_index != -1 and opener_index > floor:
                opener = delimiters[opener_index]
                if opener.char == closer.char and opener.can_open:
                    odd_match = (
                        (closer.can_open or opener.can_close)
                        and closer.orig_length % 3 != 0
                        and (opener.orig_length + closer.orig_length) % 3 == 0
                    )
                    if not odd_match:
                        found = self._wrap_emphasis(opener, closer)
                        break
                opener_index = opener.prev

            if found:
                opener = delimiters[opener_index]
                # Entries between the pair can no longer match anything
                opener.next = closer_index
                closer.prev = opener_index
                if opener.length == 0:
                    self._unlink(opener_index)
                if closer.length == 0:
                    next_index = closer.next
                    self._unlink(closer_index)
                    closer_index = next_index
                continue

            openers_bottom[key] = closer.prev
            next_index = closer.next
            if not closer.can_open:
                self._unlink(closer_index)
            closer_index = next_index

        del delimiters[bottom:]

    def _unlink(self, index: int) -> None:
        delimiters = self._delimiters
        entry = delimiters[index]
        if entry.prev != -1:
            delimiters[entry.prev].next = entry.next
        if entry.next != -1:
            delimiters[entry.next].prev = entry.prev

    def _wrap_emphasis(self, opener: DelimiterEntry, closer: DelimiterEntry) -> bool:
        """Wrap the slots between ``opener`` and ``closer`` in Emphasis or Strong.

        Returns False, leaving everything literal, when the new node would
        nest deeper than ``max_nesting_depth``.
        """
        start = opener.slot + 1
        end = closer.slot
        if start >= end:
            return False
        children, depth = self._collect(start, end)
        if depth + 1 > self._config.max_nesting_depth:
            logger.debug(
                "Emphasis at line %d left literal: nesting limit %d",
                self._location.lineno,
                self._config.max_nesting_depth,
            )
            return False

        use = 2 if opener.length >= 2 and closer.length >= 2 else 1
        opener.length -= use
        closer.length -= use
        self._slots[opener.slot] = opener.char * opener.length
        self._slots[closer.slot] = closer.char * closer.length

        node: Inline
        if use == 2:
            node = Strong(location=self._location, children=children)
        else:
            node = Emphasis(location=self._location, children=children)
        self._collapse(start, end, node, depth + 1)
        return True


__all__ = ["EmphasisMixin", "classify_run"]
