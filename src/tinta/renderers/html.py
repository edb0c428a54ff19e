"""HTML renderer using StringBuilder pattern.

Renders typed AST to HTML with O(n) performance using StringBuilder.

Text is escaped; RawHtml and HtmlBlock content is emitted verbatim. The
output is NOT sanitized: run it through an HTML sanitizer before showing
untrusted documents to users.

Thread Safety:
All per-render state is encapsulated in RenderContext, created fresh for each
render() call. Multiple threads can safely share a single HtmlRenderer instance
and call render() concurrently without synchronization.

Single-Pass Heading Collection:
Heading slugs are generated during the AST walk, so the table of contents
comes out of the same pass as the HTML. So does the word count.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import TypeAlias, assert_never
from urllib.parse import quote as url_quote

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
    Paragraph,
    RawHtml,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from tinta.stringbuilder import StringBuilder
from tinta.text import extract_text
from tinta.utils.text import count_words, slugify

logger = logging.getLogger(__name__)


def html_escape(s: str) -> str:
    """Escape HTML special characters.

    CommonMark-compliant: escapes <, >, &, " but NOT single quotes.
    """
    return html.escape(s, quote=False).replace('"', "&quot;")


def _encode_url(url: str) -> str:
    """Percent-encode a link destination.

    Destinations are entity-decoded by the parser; here spaces, backslashes
    and non-ASCII characters are percent-encoded while reserved characters
    and existing escapes are kept. The result still needs html_escape.
    """
    return url_quote(url, safe="/:?#[]@!$&'()*+,;=-_.~%")


@dataclass(frozen=True, slots=True)
class HeadingInfo:
    """Heading metadata collected during rendering.

    Used to build a table of contents without post-render scanning.
    """

    level: int
    text: str
    slug: str


@dataclass(frozen=True, slots=True)
class RenderResult:
    """HTML plus the metadata derived from the same tree walk.

    Attributes:
        html: The rendered HTML fragment (unsanitized)
        headings: Headings in document order
        word_count: Number of words in the rendered text, code included,
            raw HTML and image alt text excluded

    """

    html: str
    headings: tuple[HeadingInfo, ...]
    word_count: int


@dataclass(slots=True)
class RenderContext:
    """Per-render mutable state.

    ``text`` collects the plain text seen during the walk; the word count is
    taken from it once the walk finishes.

    Thread Safety:
        Each render() call creates its own RenderContext instance.
    """

    headings: list[HeadingInfo] = field(default_factory=list)
    seen_slugs: set[str] = field(default_factory=set)
    text: list[str] = field(default_factory=list)


_Renderable: TypeAlias = Block | Inline | TableRow | TableCell


@dataclass(frozen=True, slots=True)
class _Close:
    """Closing markup queued behind a node's children."""

    html: str
    cr: bool = False


# A whitespace-only line inside code; its newline is written as &#10; so the
# output never contains a blank line.
_BLANK_CODE_LINE = re.compile(r"(?<=\n)([ \t]*)\n")


class HtmlRenderer:
    """Render AST to HTML using StringBuilder pattern.

    The tree is walked with an explicit stack, so documents nested as deeply
    as the parser allows render without growing the Python call stack.

    Usage:
        >>> from tinta import parse
        >>> renderer = HtmlRenderer()
        >>> renderer.render(parse("# Hello **World**"))
        '<h1>Hello <strong>World</strong></h1>\\n'

    Thread Safety:
        Stateless after construction. Safe to share across threads.

    """

    __slots__ = ("_heading_ids",)

    def __init__(self, *, heading_ids: bool = False) -> None:
        """Initialize renderer.

        Args:
            heading_ids: Emit ``id="slug"`` attributes on headings
        """
        self._heading_ids = heading_ids

    def render(self, node: Document) -> str:
        """Render document AST to HTML string."""
        return self._render_document(node, RenderContext())

    def render_with_metadata(self, node: Document) -> RenderResult:
        """Render document AST and collect headings and word count."""
        ctx = RenderContext()
        output = self._render_document(node, ctx)
        words = count_words("".join(ctx.text))
        logger.debug(
            "Rendered %d headings, %d words", len(ctx.headings), words
        )
        return RenderResult(html=output, headings=tuple(ctx.headings), word_count=words)

    def _render_document(self, node: Document, ctx: RenderContext) -> str:
        sb = StringBuilder()
        stack: list[tuple[_Renderable, bool] | _Close] = []
        _push(stack, node.children, tight=False)
        while stack:
            step = stack.pop()
            if isinstance(step, _Close):
                if step.cr:
                    sb.cr()
                sb.append(step.html)
                continue
            current, tight = step
            self._render_node(current, tight, sb, ctx, stack)
        return sb.build()

    def _render_node(
        self,
        node: _Renderable,
        tight: bool,
        sb: StringBuilder,
        ctx: RenderContext,
        stack: list[tuple[_Renderable, bool] | _Close],
    ) -> None:
        """Write a node's opening markup and queue its children and closer.

        ``tight`` is set for the children of a tight list item, whose
        paragraphs render without ``<p>`` tags.
        """
        match node:
            # Blocks
            case Heading():
                ctx.text.append("\n")
                self._open_heading(node, sb, ctx)
                stack.append(_Close(f"</h{node.level}>\n"))
                _push(stack, node.children)
            case Paragraph():
                ctx.text.append("\n")
                if not tight:
                    sb.cr().append("<p>")
                    stack.append(_Close("</p>\n"))
                _push(stack, node.children)
            case CodeBlock():
                ctx.text.extend(("\n", node.code))
                self._render_code_block(node, sb)
            case BlockQuote():
                ctx.text.append("\n")
                sb.cr().append("<blockquote>\n")
                stack.append(_Close("</blockquote>\n", cr=True))
                _push(stack, node.children)
            case List():
                ctx.text.append("\n")
                if node.ordered:
                    start_attr = f' start="{node.start}"' if node.start != 1 else ""
                    sb.cr().append(f"<ol{start_attr}>\n")
                    stack.append(_Close("</ol>\n"))
                else:
                    sb.cr().append("<ul>\n")
                    stack.append(_Close("</ul>\n"))
                stack.extend((item, node.tight) for item in reversed(node.items))
            case ListItem():
                ctx.text.append("\n")
                sb.append("<li>")
                stack.append(_Close("</li>\n"))
                _push(stack, node.children, tight=tight)
            case ThematicBreak():
                sb.cr().append("<hr />\n")
            case HtmlBlock():
                sb.cr().append(node.html).append("\n")
            case Table():
                ctx.text.append("\n")
                sb.cr().append("<table>\n<thead>\n")
                stack.append(_Close("</table>\n"))
                if node.body:
                    stack.append(_Close("</tbody>\n"))
                    _push(stack, node.body)
                    stack.append(_Close("</thead>\n<tbody>\n"))
                else:
                    stack.append(_Close("</thead>\n"))
                stack.append((node.head, False))
            case TableRow():
                ctx.text.append("\n")
                sb.append("<tr>\n")
                stack.append(_Close("</tr>\n"))
                _push(stack, node.cells)
            case TableCell():
                ctx.text.append(" ")
                tag = "th" if node.is_header else "td"
                style = f' style="text-align: {node.align}"' if node.align else ""
                sb.append(f"<{tag}{style}>")
                stack.append(_Close(f"</{tag}>\n"))
                _push(stack, node.children)

            # Inlines
            case Text():
                ctx.text.append(node.content)
                sb.append(html_escape(node.content))
            case Escape():
                ctx.text.append(node.literal)
                sb.append(html_escape(node.literal))
            case Emphasis():
                sb.append("<em>")
                stack.append(_Close("</em>"))
                _push(stack, node.children)
            case Strong():
                sb.append("<strong>")
                stack.append(_Close("</strong>"))
                _push(stack, node.children)
            case Link():
                href = html_escape(_encode_url(node.destination))
                title = f' title="{html_escape(node.title)}"' if node.title else ""
                sb.append(f'<a href="{href}"{title}>')
                stack.append(_Close("</a>"))
                _push(stack, node.children)
            case Image():
                src = html_escape(_encode_url(node.destination))
                alt = html_escape(extract_text(node, line_break="\n"))
                title = f' title="{html_escape(node.title)}"' if node.title else ""
                sb.append(f'<img src="{src}" alt="{alt}"{title} />')
            case Autolink():
                ctx.text.append(node.text)
                href = html_escape(_encode_url(node.uri))
                sb.append(f'<a href="{href}">{html_escape(node.text)}</a>')
            case CodeSpan():
                ctx.text.append(node.content)
                sb.append("<code>")
                sb.append(html_escape(node.content))
                sb.append("</code>")
            case LineBreak():
                ctx.text.append(" ")
                sb.append("<br />\n" if node.hard else "\n")
            case RawHtml():
                sb.append(node.html)
            case _:
                assert_never(node)

    def _open_heading(self, heading: Heading, sb: StringBuilder, ctx: RenderContext) -> None:
        """Open heading, recording its slug for the table of contents."""
        text = extract_text(heading)
        slug = slugify(text)

        # Ensure unique slug
        original_slug = slug
        counter = 1
        while slug in ctx.seen_slugs:
            slug = f"{original_slug}-{counter}"
            counter += 1
        ctx.seen_slugs.add(slug)
        ctx.headings.append(HeadingInfo(level=heading.level, text=text, slug=slug))

        id_attr = f' id="{html_escape(slug)}"' if self._heading_ids else ""
        sb.cr().append(f"<h{heading.level}{id_attr}>")

    def _render_code_block(self, code: CodeBlock, sb: StringBuilder) -> None:
        """Render fenced or indented code block."""
        lang_class = f' class="language-{html_escape(code.language)}"' if code.language else ""
        sb.cr().append(f"<pre><code{lang_class}>")
        sb.append(_BLANK_CODE_LINE.sub(r"\1&#10;", html_escape(code.code)))
        sb.append("</code></pre>\n")


def _push(
    stack: list[tuple[_Renderable, bool] | _Close],
    nodes: tuple[_Renderable, ...],
    *,
    tight: bool = False,
) -> None:
    """Queue ``nodes`` so they pop in document order.

    A ListItem queued outside a List renders tight.
    """
    stack.extend((node, tight or isinstance(node, ListItem)) for node in reversed(nodes))


__all__ = [
    "HeadingInfo",
    "HtmlRenderer",
    "RenderContext",
    "RenderResult",
    "html_escape",
]
