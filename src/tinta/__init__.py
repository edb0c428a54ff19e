"""
Tinta: Markdown parse-and-render engine

Turns Markdown text into an immutable, typed document tree and renders that
tree to HTML together with a heading outline and a word count. Malformed
Markdown never raises: it degrades to literal text. The only errors are
invalid UTF-8 input and block nesting beyond ``max_nesting_depth``.

Quick Start:
    >>> from tinta import parse, render
    >>> doc = parse("# Hello, World!")
    >>> print(render(doc))
    <h1>Hello, World!</h1>

    >>> # HTML plus metadata in one call
    >>> from tinta import convert
    >>> result = convert("# Intro\\n\\nTwo words.")
    >>> result.headings[0].slug, result.word_count
    ('intro', 3)

    >>> # Or use the reusable Markdown processor
    >>> from tinta import Markdown, ParseConfig
    >>> md = Markdown(ParseConfig(autolinks_enabled=True))
    >>> html = md("see https://example.com")

The HTML output is NOT sanitized; raw HTML in the source passes through.

Installation:
    pip install tinta              # zero runtime dependencies
"""

from collections.abc import Iterable

from tinta.config import (
    DEFAULT_MAX_NESTING_DEPTH,
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from tinta.errors import (
    InputEncodingError,
    ResourceLimitExceeded,
    SourceError,
    TintaError,
)
from tinta.location import SourceLocation
from tinta.nodes import (
    Autolink,
    Block,
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    Emphasis,
    Escape,
    Heading,
    HtmlBlock,
    Image,
    Inline,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    RawHtml,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from tinta.parser import Parser
from tinta.renderers.html import HeadingInfo, HtmlRenderer, RenderResult
from tinta.text import extract_text

__version__ = "0.1.0"


def parse(
    source: str | bytes,
    *,
    source_file: str | None = None,
    config: ParseConfig | None = None,
) -> Document:
    """Parse Markdown source into a typed AST.

    Args:
        source: Markdown source, as text or UTF-8 bytes
        source_file: Optional source file path for error messages
        config: Parse options (defaults to the context config)

    Returns:
        Document AST root node

    Raises:
        InputEncodingError: If ``source`` is not valid UTF-8
        ResourceLimitExceeded: If block quotes and list items nest deeper
            than ``config.max_nesting_depth``

    Example:
        >>> doc = parse("# Hello **World**")
        >>> doc.children[0].level
        1
    """
    return Parser(config, source_file=source_file).parse(source)


def render(doc: Document, *, heading_ids: bool = False) -> str:
    """Render an AST Document to HTML.

    Args:
        doc: Document AST to render
        heading_ids: Emit ``id="slug"`` attributes on headings

    Example:
        >>> print(render(parse("# Hello"), heading_ids=True))
        <h1 id="hello">Hello</h1>
    """
    return HtmlRenderer(heading_ids=heading_ids).render(doc)


def convert(
    source: str | bytes,
    *,
    source_file: str | None = None,
    config: ParseConfig | None = None,
    heading_ids: bool = False,
) -> RenderResult:
    """Parse and render in one call, returning HTML plus metadata.

    Example:
        >>> result = convert("# A\\n\\n## A")
        >>> [h.slug for h in result.headings]
        ['a', 'a-1']
    """
    doc = parse(source, source_file=source_file, config=config)
    return HtmlRenderer(heading_ids=heading_ids).render_with_metadata(doc)


class Markdown:
    """Reusable Markdown processor bound to one configuration.

    Usage:
        >>> md = Markdown()
        >>> md("# Hello **World**")
        '<h1>Hello <strong>World</strong></h1>\\n'

        >>> # Access the AST
        >>> doc = md.parse("# Heading")
        >>> print(doc.children[0].level)
        1

    Thread Safety:
        Holds only a frozen ParseConfig and a stateless renderer. One
        instance may be shared by any number of threads.

    """

    __slots__ = ("_config", "_renderer")

    def __init__(self, config: ParseConfig | None = None, *, heading_ids: bool = False) -> None:
        """Initialize Markdown processor.

        Args:
            config: Parse options (captured from the context config if None)
            heading_ids: Emit ``id="slug"`` attributes on headings
        """
        self._config = config if config is not None else get_parse_config()
        self._renderer = HtmlRenderer(heading_ids=heading_ids)

    @property
    def config(self) -> ParseConfig:
        return self._config

    def __call__(self, source: str | bytes) -> str:
        """Parse and render Markdown in one call."""
        return self._renderer.render(self.parse(source))

    def parse(self, source: str | bytes, *, source_file: str | None = None) -> Document:
        """Parse Markdown source into AST."""
        return Parser(self._config, source_file=source_file).parse(source)

    def parse_many(
        self,
        sources: Iterable[str | bytes],
        *,
        source_file: str | None = None,
    ) -> list[Document]:
        """Parse multiple Markdown sources into AST documents.

        Example:
            >>> md = Markdown()
            >>> docs = md.parse_many(["# Doc 1", "# Doc 2", "# Doc 3"])
            >>> len(docs)
            3
        """
        parser = Parser(self._config, source_file=source_file)
        return [parser.parse(source) for source in sources]

    def render(self, doc: Document) -> str:
        """Render AST to HTML."""
        return self._renderer.render(doc)

    def convert(self, source: str | bytes, *, source_file: str | None = None) -> RenderResult:
        """Parse and render, returning HTML plus headings and word count."""
        return self._renderer.render_with_metadata(self.parse(source, source_file=source_file))


__all__ = [
    # High-level API
    "parse",
    "render",
    "convert",
    "extract_text",
    "Markdown",
    # Low-level API
    "Parser",
    "HtmlRenderer",
    "RenderResult",
    "HeadingInfo",
    # Configuration
    "DEFAULT_MAX_NESTING_DEPTH",
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Errors
    "TintaError",
    "SourceError",
    "InputEncodingError",
    "ResourceLimitExceeded",
    # Location
    "SourceLocation",
    # Nodes
    "Node",
    "Block",
    "Inline",
    "Document",
    "Heading",
    "Paragraph",
    "CodeBlock",
    "BlockQuote",
    "List",
    "ListItem",
    "ThematicBreak",
    "HtmlBlock",
    "Table",
    "TableRow",
    "TableCell",
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
]
