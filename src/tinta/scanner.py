"""Scanner: raw input to logical lines.

The scanner is the only stage that validates its input. It strips a leading
byte-order mark, unifies ``\\r\\n``, ``\\r`` and ``\\n`` into logical line
breaks, and expands tabs to the next multiple-of-4 column. Each produced
line remembers the byte offset where it started in the original input, so
later stages can report positions in terms the caller's file understands.

Iterating a Scanner twice yields the same lines; nothing is consumed.

Thread Safety:
Scanner instances are immutable after construction and may be iterated
from several threads at once.

"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from tinta.errors import InputEncodingError

_BOM = "\ufeff"
_BOM_BYTES = b"\xef\xbb\xbf"
_LINE_END = re.compile(r"\r\n|\r|\n")
_TAB_STOP = 4


@dataclass(frozen=True, slots=True)
class Line:
    """One logical line.

    Attributes:
        text: Line content, tabs expanded, without the line terminator
        lineno: Line number (1-indexed)
        offset: Byte offset of the line start in the original input
        end_offset: Byte offset just past the line content (terminator excluded)

    """

    text: str
    lineno: int
    offset: int
    end_offset: int


def expand_tabs(text: str) -> str:
    """Expand tabs to the next multiple-of-4 column."""
    if "\t" not in text:
        return text
    return text.expandtabs(_TAB_STOP)


class Scanner:
    """Restartable sequence of logical lines over one document.

    Args:
        source: Document text, either decoded ``str`` or UTF-8 ``bytes``
        source_file: Optional path, only used in error messages

    Raises:
        InputEncodingError: If ``source`` is not valid UTF-8 (undecodable
            bytes, or a ``str`` holding lone surrogates)

    Example:
        >>> [line.text for line in Scanner(b"a\\r\\n\\tb")]
        ['a', '    b']

    """

    __slots__ = ("_text", "_base_offset", "_source_file")

    def __init__(self, source: str | bytes, *, source_file: str | None = None) -> None:
        self._source_file = source_file
        self._base_offset = 0
        if isinstance(source, bytes):
            if source.startswith(_BOM_BYTES):
                source = source[len(_BOM_BYTES) :]
                self._base_offset = len(_BOM_BYTES)
            try:
                text = source.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise self._encoding_error(source, exc.start + self._base_offset, exc.reason) from exc
        else:
            text = source
            if text.startswith(_BOM):
                text = text[1:]
                self._base_offset = len(_BOM_BYTES)
            try:
                text.encode("utf-8")
            except UnicodeEncodeError as exc:
                prefix = text[: exc.start].encode("utf-8")
                raise self._encoding_error(
                    prefix, len(prefix) + self._base_offset, exc.reason
                ) from exc
        self._text = text

    @property
    def text(self) -> str:
        """Decoded text with the BOM removed (line endings untouched)."""
        return self._text

    @property
    def source_file(self) -> str | None:
        return self._source_file

    def __iter__(self) -> Iterator[Line]:
        return self.lines()

    def lines(self) -> Iterator[Line]:
        """Yield logical lines lazily, starting from the first line each call."""
        text = self._text
        offset = self._base_offset
        lineno = 1
        start = 0
        for match in _LINE_END.finditer(text):
            raw = text[start : match.start()]
            size = len(raw.encode("utf-8"))
            yield Line(expand_tabs(raw), lineno, offset, offset + size)
            offset += size + (match.end() - match.start())
            lineno += 1
            start = match.end()
        if start < len(text):
            raw = text[start:]
            yield Line(expand_tabs(raw), lineno, offset, offset + len(raw.encode("utf-8")))

    def _encoding_error(self, prefix: bytes, offset: int, reason: str) -> InputEncodingError:
        """Build an InputEncodingError for the byte at ``offset``."""
        before = prefix[: offset - self._base_offset].decode("utf-8", errors="replace")
        lineno = len(_LINE_END.findall(before)) + 1
        return InputEncodingError(
            f"input is not valid UTF-8: {reason}",
            offset=offset,
            lineno=lineno,
            source_file=self._source_file,
        )


__all__ = ["Line", "Scanner", "expand_tabs"]
