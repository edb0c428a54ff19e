"""Parser facade: source text to a typed, immutable Document.

Runs the pipeline stages in order, each taking explicit inputs and
returning explicit outputs:

1. Scanner: text or UTF-8 bytes to logical lines
2. BlockParser: lines to a tree of block frames
3. collect_references: strip definitions, build the ReferenceTable
4. Assembly: frames to frozen nodes, leaf text through the InlineParser

Thread Safety:
A Parser holds only its configuration and may be shared. All per-document
state lives in objects created inside parse(). The resulting AST is
immutable and thread-safe.

"""

from __future__ import annotations

from tinta.config import ParseConfig, get_parse_config
from tinta.location import SourceLocation
from tinta.nodes import (
    Alignment,
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Heading,
    HtmlBlock,
    List,
    ListItem,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    ThematicBreak,
)
from tinta.parsing.blocks import BlockParser
from tinta.parsing.blocks.table import fit_row, split_row
from tinta.parsing.containers import BlockKind, ContainerFrame
from tinta.parsing.inline import InlineParser
from tinta.parsing.references import collect_references
from tinta.scanner import Scanner
from tinta.utils.logger import get_logger

logger = get_logger(__name__)


class Parser:
    """Markdown parser producing a typed AST.

    Usage:
        >>> doc = Parser().parse("# Hello")
        >>> doc.children[0].level
        1

    Configuration:
        When ``config`` is None the parser reads the context default
        (see ``tinta.config.get_parse_config``) at construction time.

    """

    __slots__ = ("_config", "_source_file")

    def __init__(
        self,
        config: ParseConfig | None = None,
        *,
        source_file: str | None = None,
    ) -> None:
        """Initialize parser.

        Args:
            config: Parse options (defaults to the context config)
            source_file: Optional source file path for error messages
        """
        self._config = config if config is not None else get_parse_config()
        self._source_file = source_file

    @property
    def config(self) -> ParseConfig:
        return self._config

    def parse(self, source: str | bytes) -> Document:
        """Parse ``source`` into a Document.

        Raises:
            InputEncodingError: If ``source`` is not valid UTF-8
            ResourceLimitExceeded: If block containers nest deeper than
                ``max_nesting_depth``
        """
        scanner = Scanner(source, source_file=self._source_file)
        root = BlockParser(self._config, self._source_file).parse(scanner)
        references = collect_references(root)
        builder = _TreeBuilder(InlineParser(references, self._config), self._source_file)

        size = len(source) if isinstance(source, bytes) else len(source.encode("utf-8"))
        location = SourceLocation(
            lineno=1,
            col_offset=1,
            offset=0,
            end_offset=size,
            end_lineno=root.end_lineno,
            end_col_offset=root.end_col_offset,
            source_file=self._source_file,
        )
        logger.debug(
            "Parsed %d bytes, %d top-level blocks, %d references",
            size,
            len(root.children),
            len(references),
        )
        return Document(location=location, children=builder.build_children(root))


_CONTAINER_KINDS = frozenset({BlockKind.BLOCK_QUOTE, BlockKind.LIST, BlockKind.LIST_ITEM})


class _TreeBuilder:
    """Convert finished block frames into frozen nodes."""

    __slots__ = ("_inline", "_source_file")

    def __init__(self, inline: InlineParser, source_file: str | None) -> None:
        self._inline = inline
        self._source_file = source_file

    def build_children(self, root: ContainerFrame) -> tuple[Block, ...]:
        """Build the nodes under ``root``.

        Frames are visited with an explicit stack. A container is revisited
        after its children, once their nodes exist, so assembly depth is not
        bounded by the interpreter's recursion limit.
        """
        top: list[Block] = []
        stack: list[tuple[ContainerFrame, list[Block], list[Block] | None]] = [
            (child, top, None) for child in reversed(root.children)
        ]
        while stack:
            frame, out, built = stack.pop()
            if frame.kind not in _CONTAINER_KINDS:
                out.append(self._build_leaf(frame))
            elif built is None:
                built = []
                stack.append((frame, out, built))
                stack.extend((child, built, None) for child in reversed(frame.children))
            else:
                out.append(self._build_container(frame, tuple(built)))
        return tuple(top)

    def _location(self, frame: ContainerFrame) -> SourceLocation:
        return SourceLocation(
            lineno=frame.lineno,
            col_offset=frame.col_offset,
            offset=frame.offset,
            end_offset=frame.end_offset,
            end_lineno=frame.end_lineno,
            end_col_offset=frame.end_col_offset,
            source_file=self._source_file,
        )

    def _build_container(self, frame: ContainerFrame, children: tuple[Block, ...]) -> Block:
        location = self._location(frame)
        match frame.kind:
            case BlockKind.BLOCK_QUOTE:
                return BlockQuote(location=location, children=children)
            case BlockKind.LIST:
                marker = frame.list_marker
                assert marker is not None
                return List(
                    location=location,
                    items=children,  # type: ignore[arg-type]
                    ordered=marker.ordered,
                    start=marker.start,
                    tight=frame.tight,
                    marker=marker.marker,
                )
            case BlockKind.LIST_ITEM:
                return ListItem(location=location, children=children)
            case _:
                raise AssertionError(f"unexpected container kind {frame.kind}")

    def _build_leaf(self, frame: ContainerFrame) -> Block:
        location = self._location(frame)
        match frame.kind:
            case BlockKind.PARAGRAPH:
                return Paragraph(
                    location=location, children=self._inline.parse(frame.content, location)
                )
            case BlockKind.HEADING:
                return Heading(
                    location=location,
                    level=frame.level,  # type: ignore[arg-type]
                    children=self._inline.parse(frame.content, location),
                    style="setext" if frame.setext else "atx",
                )
            case BlockKind.FENCED_CODE:
                info = frame.info or None
                return CodeBlock(
                    location=location,
                    code=frame.content,
                    language=info.split()[0] if info else None,
                    info=info,
                    fenced=True,
                )
            case BlockKind.INDENTED_CODE:
                return CodeBlock(location=location, code=frame.content, fenced=False)
            case BlockKind.HTML_BLOCK:
                return HtmlBlock(location=location, html=frame.content)
            case BlockKind.THEMATIC_BREAK:
                return ThematicBreak(location=location)
            case BlockKind.TABLE:
                return self._build_table(frame, location)
            case _:
                raise AssertionError(f"unexpected block kind {frame.kind}")

    def _build_table(self, frame: ContainerFrame, location: SourceLocation) -> Table:
        alignments = frame.alignments
        head = self._build_row(frame.header, alignments, location, is_header=True)
        body = tuple(
            self._build_row(line, alignments, location, is_header=False)
            for line in frame.lines
        )
        return Table(location=location, head=head, body=body, alignments=alignments)

    def _build_row(
        self,
        line: str,
        alignments: tuple[Alignment, ...],
        location: SourceLocation,
        *,
        is_header: bool,
    ) -> TableRow:
        texts = fit_row(split_row(line), len(alignments))
        cells = tuple(
            TableCell(
                location=location,
                children=self._inline.parse(text, location),
                align=align,
                is_header=is_header,
            )
            for text, align in zip(texts, alignments, strict=True)
        )
        return TableRow(location=location, cells=cells, is_header=is_header)


__all__ = ["Parser"]
