"""Link reference definitions.

Definitions such as ``[label]: /url "title"`` may open any paragraph. After
block parsing they are stripped from the paragraph text and collected into a
ReferenceTable, which the inline parser consults when it meets ``[text][label]``,
``[label][]`` or ``[label]``. Definitions ahead of a setext underline are
stripped while the heading is recognized and collected in the same pass.

Labels match case-insensitively after whitespace normalization. When a label
is defined twice, the first definition in document order wins.

Thread Safety:
ReferenceTable is read-only after construction and safe to share.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from tinta.parsing.containers import BlockKind, ContainerFrame
from tinta.parsing.inline.links import (
    normalize_label,
    scan_link_destination,
    scan_link_label,
    scan_link_title,
    skip_spaces,
    skip_spaces_newline,
)
from tinta.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LinkReference:
    """One link reference definition.

    Attributes:
        label: Normalized label
        destination: Unescaped destination URL
        title: Unescaped title, if any

    """

    label: str
    destination: str
    title: str | None = None


class ReferenceTable(Mapping[str, LinkReference]):
    """Read-only mapping from normalized label to definition."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, LinkReference] | None = None) -> None:
        self._entries = MappingProxyType(dict(entries or {}))

    def __getitem__(self, label: str) -> LinkReference:
        return self._entries[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, label: str) -> LinkReference | None:
        """Find the definition for a raw (unnormalized) label."""
        return self._entries.get(normalize_label(label))


def _end_of_line(text: str, pos: int) -> int:
    """Index past the line ending if only spaces remain on the line, else -1."""
    pos = skip_spaces(text, pos)
    if pos == len(text):
        return pos
    if text[pos] == "\n":
        return pos + 1
    return -1


def parse_reference_definition(text: str, pos: int = 0) -> tuple[LinkReference, int] | None:
    """Parse one definition at ``pos``.

    Returns the definition and the index where the following line starts,
    or None when ``text`` does not hold a definition there.

    Example:
        >>> ref, end = parse_reference_definition('[Foo]: /url "t"')
        >>> (ref.label, ref.destination, ref.title)
        ('foo', '/url', 't')
    """
    pos = skip_spaces(text, pos)
    label_end = scan_link_label(text, pos)
    if label_end == -1 or not text.startswith(":", label_end):
        return None
    label = normalize_label(text[pos + 1 : label_end - 1])
    if not label:
        return None

    i = skip_spaces_newline(text, label_end + 1)
    parsed = scan_link_destination(text, i)
    if parsed is None:
        return None
    destination, after_destination = parsed

    j = skip_spaces_newline(text, after_destination)
    if j > after_destination:
        parsed_title = scan_link_title(text, j)
        if parsed_title is not None:
            title, after_title = parsed_title
            end = _end_of_line(text, after_title)
            if end != -1:
                return LinkReference(label, destination, title), end

    end = _end_of_line(text, after_destination)
    if end == -1:
        return None
    return LinkReference(label, destination), end


def split_definitions(text: str) -> tuple[list[LinkReference], int]:
    """Parse the definitions that open ``text``.

    Returns the definitions in source order and the index where the rest of
    the text begins.
    """
    references: list[LinkReference] = []
    pos = 0
    while pos < len(text) and text[pos] == "[":
        parsed = parse_reference_definition(text, pos)
        if parsed is None:
            break
        reference, pos = parsed
        references.append(reference)
    return references, pos


def _register(
    references: list[LinkReference], found: dict[str, LinkReference], lineno: int
) -> None:
    for reference in references:
        if reference.label in found:
            logger.debug("Duplicate reference [%s] at line %d ignored", reference.label, lineno)
        else:
            found[reference.label] = reference


def _walk(document: ContainerFrame, found: dict[str, LinkReference]) -> None:
    """Collect definitions in document order and drop emptied paragraphs."""
    parents: list[ContainerFrame] = []
    stack = [document]
    while stack:
        frame = stack.pop()
        # Setext headings carry the definitions stripped from their text.
        _register(frame.definitions, found, frame.lineno)
        if frame.kind is BlockKind.PARAGRAPH:
            references, pos = split_definitions(frame.content)
            _register(references, found, frame.lineno)
            if pos:
                frame.content = frame.content[pos:]
        elif frame.children:
            parents.append(frame)
            stack.extend(reversed(frame.children))

    for frame in parents:
        frame.children = [
            child
            for child in frame.children
            if child.kind is not BlockKind.PARAGRAPH or child.content.strip(" \t\n")
        ]


def collect_references(document: ContainerFrame) -> ReferenceTable:
    """Strip definitions from every paragraph under ``document``.

    Paragraphs left empty are removed from the tree. Returns the collected
    definitions.
    """
    found: dict[str, LinkReference] = {}
    _walk(document, found)
    return ReferenceTable(found)


__all__ = [
    "LinkReference",
    "ReferenceTable",
    "collect_references",
    "parse_reference_definition",
    "split_definitions",
]
