"""Block structure tests: headings, code, quotes, lists, HTML blocks and tables."""

from __future__ import annotations

import pytest

from tinta import (
    BlockQuote,
    CodeBlock,
    Heading,
    HtmlBlock,
    List,
    Paragraph,
    ParseConfig,
    Table,
    ThematicBreak,
    parse,
    render,
)


def to_html(source: str, **options: object) -> str:
    config = ParseConfig(**options) if options else None  # type: ignore[arg-type]
    return render(parse(source, config=config))


class TestHeadings:
    """ATX and setext headings."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("# Hello", "<h1>Hello</h1>\n"),
            ("###### six", "<h6>six</h6>\n"),
            ("# Title ##", "<h1>Title</h1>\n"),
            ("## Title #not closing", "<h2>Title #not closing</h2>\n"),
            ("#", "<h1></h1>\n"),
            ("   # indented", "<h1>indented</h1>\n"),
            ("#5 bolt", "<p>#5 bolt</p>\n"),
            ("####### seven", "<p>####### seven</p>\n"),
        ],
    )
    def test_atx(self, source: str, expected: str) -> None:
        """ATX headings need a space after 1-6 hashes; closing hashes drop."""
        assert to_html(source) == expected

    def test_setext(self) -> None:
        """= underlines give level 1, - underlines level 2."""
        assert to_html("Title\n=====") == "<h1>Title</h1>\n"
        assert to_html("Sub\n---") == "<h2>Sub</h2>\n"

    def test_setext_multiline_content(self) -> None:
        """All paragraph lines become the heading text."""
        assert to_html("one\ntwo\n===") == "<h1>one\ntwo</h1>\n"

    def test_heading_node_fields(self) -> None:
        """Heading nodes record level and style."""
        atx, setext = parse("## A\n\nB\n=").children
        assert isinstance(atx, Heading) and atx.level == 2 and atx.style == "atx"
        assert isinstance(setext, Heading) and setext.level == 1 and setext.style == "setext"

    def test_thematic_break_after_blank_line(self) -> None:
        """--- after a blank line is a thematic break, not an underline."""
        assert to_html("a\n\n---") == "<p>a</p>\n<hr />\n"


class TestThematicBreaks:
    """Thematic breaks."""

    @pytest.mark.parametrize("source", ["***", "---", "___", "* * *", " - - -", "_____"])
    def test_breaks(self, source: str) -> None:
        """Three or more matching characters make a rule."""
        assert to_html(source) == "<hr />\n"

    def test_node(self) -> None:
        """The node type is ThematicBreak."""
        assert isinstance(parse("***").children[0], ThematicBreak)

    @pytest.mark.parametrize("source", ["**", "*-*", "--a"])
    def test_not_breaks(self, source: str) -> None:
        """Too few or mixed characters stay text."""
        assert "<hr />" not in to_html(source)


class TestCodeBlocks:
    """Fenced and indented code."""

    def test_fenced_with_language(self) -> None:
        """The first info word becomes the language class."""
        html = to_html("```py\nx = 1\n```")
        assert html == '<pre><code class="language-py">x = 1\n</code></pre>\n'

    def test_fenced_node_fields(self) -> None:
        """CodeBlock keeps code, language and the full info string."""
        block = parse("~~~ py title=x\nprint()\n~~~").children[0]
        assert isinstance(block, CodeBlock)
        assert block.fenced
        assert block.language == "py"
        assert block.info == "py title=x"
        assert block.code == "print()\n"

    def test_content_is_verbatim(self) -> None:
        """Markdown inside a fence is not interpreted."""
        html = to_html("```\n# not a heading\n*x*\n```")
        assert html == "<pre><code># not a heading\n*x*\n</code></pre>\n"

    def test_unterminated_fence_runs_to_end(self) -> None:
        """An unclosed fence closes at end of input without error."""
        assert to_html("```\nabc\n\ndef") == "<pre><code>abc\n&#10;def\n</code></pre>\n"

    def test_empty_fence(self) -> None:
        """A fence with no body renders an empty code element."""
        assert to_html("```\n```") == "<pre><code></code></pre>\n"

    def test_closing_fence_must_be_long_enough(self) -> None:
        """A shorter run of the fence character does not close the block."""
        assert to_html("````\na\n```\n````") == "<pre><code>a\n```\n</code></pre>\n"

    def test_closing_fence_must_match_char(self) -> None:
        """A tilde run does not close a backtick fence."""
        assert to_html("```\na\n~~~") == "<pre><code>a\n~~~\n</code></pre>\n"

    def test_fence_indentation_removed(self) -> None:
        """Up to the opening fence's indentation is stripped from content."""
        assert to_html("  ```\n  a\n   b\n  ```") == "<pre><code>a\n b\n</code></pre>\n"

    def test_info_string_unescaped(self) -> None:
        """Entities in the info string are decoded before use."""
        html = to_html("~~~ &lt;x&gt;\ny\n~~~")
        assert html == '<pre><code class="language-&lt;x&gt;">y\n</code></pre>\n'

    def test_indented(self) -> None:
        """Four spaces of indentation make a code block."""
        assert to_html("    code\n      more") == "<pre><code>code\n  more\n</code></pre>\n"

    def test_indented_trailing_blank_lines_dropped(self) -> None:
        """Blank lines at the end of indented code are not part of it."""
        block = parse("    a\n\n    b\n\n\n").children[0]
        assert isinstance(block, CodeBlock)
        assert not block.fenced
        assert block.code == "a\n\nb\n"

    def test_indented_code_cannot_interrupt_paragraph(self) -> None:
        """An indented line after a paragraph continues it."""
        assert to_html("a\n    b") == "<p>a\nb</p>\n"

    def test_tab_indented(self) -> None:
        """A tab counts as four columns."""
        assert to_html("\tcode") == "<pre><code>code\n</code></pre>\n"


class TestBlockQuotes:
    """Block quotes and lazy continuation."""

    def test_simple(self) -> None:
        """Consecutive > lines form one quote."""
        assert to_html("> a\n> b") == "<blockquote>\n<p>a\nb</p>\n</blockquote>\n"

    def test_lazy_continuation(self) -> None:
        """A paragraph continues into a following line without >."""
        assert to_html("> a\nb") == "<blockquote>\n<p>a\nb</p>\n</blockquote>\n"

    def test_blank_line_ends_quote(self) -> None:
        """A blank line closes the quote."""
        assert to_html("> a\n\nb") == "<blockquote>\n<p>a</p>\n</blockquote>\n<p>b</p>\n"

    def test_nested(self) -> None:
        """>> nests two quotes."""
        doc = parse(">> deep")
        outer = doc.children[0]
        assert isinstance(outer, BlockQuote)
        inner = outer.children[0]
        assert isinstance(inner, BlockQuote)
        assert isinstance(inner.children[0], Paragraph)

    def test_empty_quote(self) -> None:
        """A lone > is an empty quote."""
        assert to_html(">") == "<blockquote>\n</blockquote>\n"

    def test_quote_containing_list(self) -> None:
        """Lists nest inside quotes."""
        html = to_html("> - a\n> - b")
        assert html == "<blockquote>\n<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n</blockquote>\n"


class TestLists:
    """Bullet and ordered lists, tight and loose."""

    def test_tight_bullets(self) -> None:
        """Items without blank lines render without <p>."""
        assert to_html("- a\n- b") == "<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n"

    def test_loose_bullets(self) -> None:
        """A blank line between items makes the list loose."""
        expected = "<ul>\n<li>\n<p>a</p>\n</li>\n<li>\n<p>b</p>\n</li>\n</ul>\n"
        assert to_html("- a\n\n- b") == expected

    def test_blank_line_inside_item_makes_loose(self) -> None:
        """Two blocks separated by a blank line inside one item."""
        assert to_html("- a\n\n  b") == "<ul>\n<li>\n<p>a</p>\n<p>b</p>\n</li>\n</ul>\n"

    def test_trailing_blank_line_keeps_tight(self) -> None:
        """A blank line after the last item does not loosen the list."""
        lst = parse("- a\n- b\n\n").children[0]
        assert isinstance(lst, List)
        assert lst.tight

    def test_nested(self) -> None:
        """Indented markers open a sublist inside the item."""
        expected = "<ul>\n<li>a\n<ul>\n<li>b</li>\n</ul>\n</li>\n</ul>\n"
        assert to_html("- a\n  - b") == expected

    def test_ordered_start(self) -> None:
        """Ordered lists keep their first number."""
        assert to_html("3. a\n4. b") == '<ol start="3">\n<li>a</li>\n<li>b</li>\n</ol>\n'
        assert to_html("1. a") == "<ol>\n<li>a</li>\n</ol>\n"

    def test_list_node_fields(self) -> None:
        """List nodes record ordering, start and marker."""
        lst = parse("7) x").children[0]
        assert isinstance(lst, List)
        assert lst.ordered
        assert lst.start == 7
        assert lst.marker == ")"

    def test_changing_bullet_starts_new_list(self) -> None:
        """A different bullet character starts a new list."""
        assert len(parse("- a\n* b").children) == 2

    def test_list_interrupts_paragraph(self) -> None:
        """A bullet can interrupt a paragraph."""
        assert to_html("a\n- b") == "<p>a</p>\n<ul>\n<li>b</li>\n</ul>\n"

    def test_ordered_not_one_cannot_interrupt_paragraph(self) -> None:
        """Only an ordered list starting at 1 can interrupt a paragraph."""
        assert to_html("a\n2. b") == "<p>a\n2. b</p>\n"

    def test_empty_item(self) -> None:
        """A bare marker is an empty item."""
        assert to_html("-") == "<ul>\n<li></li>\n</ul>\n"

    def test_tab_after_marker(self) -> None:
        """A tab after the marker is expanded before measuring indentation."""
        assert to_html("-\tfoo") == "<ul>\n<li>foo</li>\n</ul>\n"

    def test_item_with_code_block(self) -> None:
        """Blocks after a paragraph in a tight item start on a new line."""
        html = to_html("- a\n  ```\n  b\n  ```")
        assert html == "<ul>\n<li>a\n<pre><code>b\n</code></pre>\n</li>\n</ul>\n"


class TestHtmlBlocks:
    """Raw HTML blocks are passed through verbatim."""

    def test_type6_block(self) -> None:
        """A block-level tag starts a block that ends at a blank line."""
        assert to_html("<div>\n*hi*\n</div>") == "<div>\n*hi*\n</div>\n"

    def test_type6_ends_at_blank_line(self) -> None:
        """Markdown resumes after the blank line."""
        assert to_html("<div>\n\n*hi*") == "<div>\n<p><em>hi</em></p>\n"

    def test_comment(self) -> None:
        """A comment block ends on the line containing -->."""
        assert to_html("<!-- x -->\nfoo") == "<!-- x -->\n<p>foo</p>\n"

    def test_pre_keeps_blank_lines(self) -> None:
        """Raw-text blocks run until their closing tag."""
        assert to_html("<pre>\n\nx\n</pre>") == "<pre>\n\nx\n</pre>\n"

    def test_type7_alone_on_line(self) -> None:
        """Any complete tag alone on a line starts a block."""
        doc = parse("<span>\n*x*")
        assert isinstance(doc.children[0], HtmlBlock)
        assert to_html("<span>\n*x*") == "<span>\n*x*\n"

    def test_type7_cannot_interrupt_paragraph(self) -> None:
        """Inside a paragraph such a tag is inline HTML."""
        assert to_html("a\n<span>") == "<p>a\n<span></p>\n"


class TestTables:
    """GFM pipe tables."""

    SOURCE = "| a | b |\n|:--|--:|\n| 1 | 2 |"

    def test_table(self) -> None:
        """Header, alignment row and body render with alignment styles."""
        expected = (
            "<table>\n<thead>\n<tr>\n"
            '<th style="text-align: left">a</th>\n'
            '<th style="text-align: right">b</th>\n'
            "</tr>\n</thead>\n<tbody>\n<tr>\n"
            '<td style="text-align: left">1</td>\n'
            '<td style="text-align: right">2</td>\n'
            "</tr>\n</tbody>\n</table>\n"
        )
        assert to_html(self.SOURCE) == expected

    def test_table_node(self) -> None:
        """Table nodes carry alignments and header flags."""
        table = parse("a | b\n:-: | ---\nx | y\nz").children[0]
        assert isinstance(table, Table)
        assert table.alignments == ("center", None)
        assert table.head.is_header
        assert [len(row.cells) for row in table.body] == [2, 2]

    def test_header_only(self) -> None:
        """A table needs no body rows."""
        expected = "<table>\n<thead>\n<tr>\n<th>a</th>\n</tr>\n</thead>\n</table>\n"
        assert to_html("| a |\n| - |") == expected

    def test_short_rows_padded_long_rows_truncated(self) -> None:
        """Every row has exactly one cell per column."""
        html = to_html("| a | b |\n| - | - |\n| 1 |\n| 1 | 2 | 3 |")
        assert "<td>1</td>\n<td></td>" in html
        assert "3" not in html

    def test_escaped_pipe(self) -> None:
        """\\| is a literal pipe inside a cell."""
        assert "<th>a | b</th>" in to_html("| a \\| b |\n| --- |")

    def test_inline_content_in_cells(self) -> None:
        """Cells are parsed as inline content."""
        assert "<td><em>x</em></td>" in to_html("| h |\n| - |\n| *x* |")

    def test_column_count_mismatch_is_paragraph(self) -> None:
        """The delimiter row must match the header's cell count."""
        assert to_html("| a | b |\n| - |") == "<p>| a | b |\n| - |</p>\n"

    def test_blank_line_ends_table(self) -> None:
        """Rows stop at a blank line."""
        html = to_html(self.SOURCE + "\n\nafter")
        assert html.endswith("</table>\n<p>after</p>\n")

    def test_disabled(self) -> None:
        """With tables disabled the lines are a paragraph."""
        html = to_html(self.SOURCE, tables_enabled=False)
        assert html == "<p>| a | b |\n|:--|--:|\n| 1 | 2 |</p>\n"


class TestLocations:
    """Source locations of blocks."""

    def test_block_locations(self) -> None:
        """Blocks record their line and byte range."""
        doc = parse("a\n\n# B")
        paragraph, heading = doc.children
        assert (paragraph.location.lineno, paragraph.location.offset) == (1, 0)
        assert paragraph.location.end_offset == 1
        assert (heading.location.lineno, heading.location.offset) == (3, 3)
        assert doc.location.end_offset == 6

    def test_children_inside_parent(self) -> None:
        """A child's byte range lies within its container's range."""
        doc = parse("> a\n> b\n\n- x\n  y")
        quote, lst = doc.children
        assert isinstance(quote, BlockQuote) and isinstance(lst, List)
        assert doc.location.contains(quote.location)
        assert quote.location.contains(quote.children[0].location)
        assert lst.location.contains(lst.items[0].location)
        assert quote.location.end_offset <= lst.location.offset

    def test_source_file_recorded(self) -> None:
        """The source file name is attached to every location."""
        doc = parse("# T", source_file="t.md")
        assert doc.location.source_file == "t.md"
        assert doc.children[0].location.source_file == "t.md"

    def test_end_position(self) -> None:
        """Blocks end at the column just past their last line."""
        paragraph = parse("ab\ncde").children[0]
        assert (paragraph.location.end_lineno, paragraph.location.end_col_offset) == (2, 4)
        heading = parse("# Title").children[0]
        assert (heading.location.end_lineno, heading.location.end_col_offset) == (1, 8)

    def test_container_end_position(self) -> None:
        doc = parse("> a\n> bcd\n\nx")
        quote = doc.children[0]
        assert (quote.location.end_lineno, quote.location.end_col_offset) == (2, 6)
        assert (doc.location.end_lineno, doc.location.end_col_offset) == (4, 2)
