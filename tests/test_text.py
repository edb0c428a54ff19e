"""Tests for extract_text(), slugify() and count_words()."""

import pytest

from tinta import parse
from tinta.location import SourceLocation
from tinta.nodes import (
    CodeSpan,
    Emphasis,
    Heading,
    Image,
    LineBreak,
    Link,
    Paragraph,
    RawHtml,
    Strong,
    Text,
)
from tinta.text import extract_text
from tinta.utils.logger import get_logger
from tinta.utils.text import count_words, slugify

LOC = SourceLocation(lineno=1, col_offset=1)


def _text(s: str) -> Text:
    return Text(location=LOC, content=s)


class TestExtractText:
    """Plain text from nodes and trees."""

    def test_nested_inlines(self) -> None:
        heading = Heading(
            location=LOC,
            level=1,
            children=(
                _text("Hello "),
                Strong(location=LOC, children=(Emphasis(location=LOC, children=(_text("big"),)),)),
                _text(" "),
                CodeSpan(location=LOC, content="world"),
            ),
        )
        assert extract_text(heading) == "Hello big world"

    def test_link_text(self) -> None:
        link = Link(location=LOC, destination="/x", title="t", children=(_text("label"),))
        assert extract_text(link) == "label"

    def test_raw_html_dropped(self) -> None:
        para = Paragraph(location=LOC, children=(_text("a"), RawHtml(location=LOC, html="<b>")))
        assert extract_text(para) == "a"

    def test_line_break_is_space(self) -> None:
        para = Paragraph(
            location=LOC,
            children=(_text("a"), LineBreak(location=LOC, hard=False), _text("b")),
        )
        assert extract_text(para) == "a b"

    def test_line_break_replacement(self) -> None:
        para = Paragraph(
            location=LOC,
            children=(_text("a"), LineBreak(location=LOC, hard=True), _text("b")),
        )
        assert extract_text(para, line_break="\n") == "a\nb"

    def test_image_alt_text_optional(self) -> None:
        image = Image(location=LOC, destination="/i", title=None, children=(_text("alt"),))
        assert extract_text(image) == "alt"
        assert extract_text(image, alt_text=False) == ""

    def test_document_blocks_joined_by_newline(self) -> None:
        doc = parse("# Title\n\n- one\n- two\n\n> quote")
        assert extract_text(doc) == "Title\none\ntwo\nquote"

    def test_code_block(self) -> None:
        doc = parse("    code here")
        assert extract_text(doc) == "code here\n"

    def test_table(self) -> None:
        doc = parse("| a | b |\n| - | - |\n| 1 | 2 |")
        assert extract_text(doc) == "a b\n1 2"

    def test_html_block_dropped(self) -> None:
        assert extract_text(parse("<div>\nhidden\n</div>")) == ""

    def test_deeply_nested_tree(self) -> None:
        """Depth is bounded by memory, not the interpreter's recursion limit."""
        node = _text("core")
        for _ in range(5000):
            node = Emphasis(location=LOC, children=(node,))
        assert extract_text(Paragraph(location=LOC, children=(node,))) == "core"


class TestSlugify:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hello World!", "hello-world"),
            ("Test & Code", "test-code"),
            ("  spaced   out  ", "spaced-out"),
            ("Café", "café"),
            ("snake_case", "snake_case"),
            ("--dashes--", "dashes"),
            ("!!!", ""),
            ("", ""),
        ],
    )
    def test_slugify(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    def test_custom_separator(self) -> None:
        assert slugify("a b c", separator="_") == "a_b_c"


class TestCountWords:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hello, world!", 2),
            ("don't well-known 3.14", 3),
            ("", 0),
            ("  \n\t ", 0),
            ("— – …", 0),
            ("naïve café", 2),
            ("Привет мир", 2),
            ("end.", 1),
        ],
    )
    def test_count_words(self, text: str, expected: int) -> None:
        assert count_words(text) == expected


class TestGetLogger:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("scanner", "tinta.scanner"), ("tinta.parser", "tinta.parser"), ("tinta", "tinta")],
    )
    def test_namespace(self, name: str, expected: str) -> None:
        assert get_logger(name).name == expected
