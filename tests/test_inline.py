"""Inline parsing tests: emphasis, code spans, links, autolinks, HTML and breaks."""

from __future__ import annotations

import pytest

from tinta import (
    Autolink,
    CodeSpan,
    Emphasis,
    Escape,
    Image,
    LineBreak,
    Link,
    Paragraph,
    ParseConfig,
    RawHtml,
    Strong,
    Text,
    parse,
    render,
)


def inline_html(source: str, **options: object) -> str:
    """Render a single paragraph and strip its <p> wrapper."""
    config = ParseConfig(**options) if options else None  # type: ignore[arg-type]
    html = render(parse(source, config=config))
    assert html.startswith("<p>") and html.endswith("</p>\n"), html
    return html[3:-5]


def children(source: str) -> tuple:
    paragraph = parse(source).children[0]
    assert isinstance(paragraph, Paragraph)
    return paragraph.children


class TestEmphasis:
    """Delimiter runs and the flanking rules."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("*em*", "<em>em</em>"),
            ("_em_", "<em>em</em>"),
            ("**strong**", "<strong>strong</strong>"),
            ("__strong__", "<strong>strong</strong>"),
            ("***both***", "<em><strong>both</strong></em>"),
            ("*a **b** c*", "<em>a <strong>b</strong> c</em>"),
            ("**a *b* c**", "<strong>a <em>b</em> c</strong>"),
            ("**a*", "*<em>a</em>"),
            ("*a**", "<em>a</em>*"),
            ("a_b_c", "a_b_c"),
            ("a*b*c", "a<em>b</em>c"),
            ("a * not em *", "a * not em *"),
            ("*unclosed", "*unclosed"),
            ("_a*", "_a*"),
            ("*foo**bar**baz*", "<em>foo<strong>bar</strong>baz</em>"),
            ("*foo**bar*", "<em>foo**bar</em>"),
        ],
    )
    def test_emphasis(self, source: str, expected: str) -> None:
        """Emphasis follows the CommonMark delimiter rules."""
        assert inline_html(source) == expected

    def test_node_structure(self) -> None:
        """Strong nested in Emphasis for a triple run."""
        (node,) = children("***x***")
        assert isinstance(node, Emphasis)
        (inner,) = node.children
        assert isinstance(inner, Strong)
        assert inner.children == (Text(location=inner.location, content="x"),)

    def test_punctuation_flanking(self) -> None:
        """A run between punctuation and a letter can open."""
        assert inline_html('*"quoted"*') == "<em>&quot;quoted&quot;</em>"

    def test_unicode_whitespace_blocks_opening(self) -> None:
        """A non-breaking space after the run prevents opening."""
        assert inline_html("*\u00a0a*") == "*\u00a0a*"

    def test_mixed_delimiters_follow_flanking(self) -> None:
        """A ``*`` between a letter and ``_`` can only close."""
        expected = "<em><em>a</em><em>b</em><em>c</em></em>"
        assert inline_html("**a*_b_*c**") == expected


class TestCodeSpans:
    """Backtick counting."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("`code`", "<code>code</code>"),
            ("`` `code` ``", "<code>`code`</code>"),
            ("`` a ` b ``", "<code>a ` b</code>"),
            ("` `", "<code> </code>"),
            ("`  a  `", "<code> a </code>"),
            ("`a\nb`", "<code>a b</code>"),
            ("`*not em*`", "<code>*not em*</code>"),
            ("`<b>`", "<code>&lt;b&gt;</code>"),
            ("`a", "`a"),
            ("``a`", "``a`"),
            ("`a``b`", "<code>a``b</code>"),
        ],
    )
    def test_code_spans(self, source: str, expected: str) -> None:
        """A run of n backticks closes at the next run of exactly n."""
        assert inline_html(source) == expected

    def test_code_span_node(self) -> None:
        """CodeSpan content is normalized."""
        (node,) = children("`` x ``")
        assert isinstance(node, CodeSpan)
        assert node.content == "x"

    def test_backslash_inside_code_is_literal(self) -> None:
        """Escapes do not apply inside code spans."""
        assert inline_html("`a\\*b`") == "<code>a\\*b</code>"


class TestLinks:
    """Inline and reference links, images."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("[text](http://x)", '<a href="http://x">text</a>'),
            ('[a](/u "t")', '<a href="/u" title="t">a</a>'),
            ("[a](/u 'single')", '<a href="/u" title="single">a</a>'),
            ("[a](/u (paren))", '<a href="/u" title="paren">a</a>'),
            ("[a](<b c>)", '<a href="b%20c">a</a>'),
            ("[a]()", '<a href="">a</a>'),
            ("[a](/p(q))", '<a href="/p(q)">a</a>'),
            ("[a](/é)", '<a href="/%C3%A9">a</a>'),
            ("[a](/x?a=1&b=2)", '<a href="/x?a=1&amp;b=2">a</a>'),
            ("[a](/x&amp;y)", '<a href="/x&amp;y">a</a>'),
            ("[*em* link](/u)", '<a href="/u"><em>em</em> link</a>'),
            ("[a] (/u)", "[a] (/u)"),
            ("[a](/u", "[a](/u"),
            ("[a", "[a"),
            ("a]", "a]"),
        ],
    )
    def test_inline_links(self, source: str, expected: str) -> None:
        """Destinations, titles and failure cases."""
        assert inline_html(source) == expected

    def test_links_do_not_nest(self) -> None:
        """An inner link deactivates the outer bracket."""
        assert inline_html("[a [b](/c)](/d)") == '[a <a href="/c">b</a>](/d)'

    def test_image(self) -> None:
        """Images flatten their alt text."""
        html = inline_html('![alt *x*](/i.png "T")')
        assert html == '<img src="/i.png" alt="alt x" title="T" />'

    def test_image_node(self) -> None:
        """Image keeps alt text as inline children."""
        (node,) = children("![a *b*](/i)")
        assert isinstance(node, Image)
        assert node.destination == "/i"
        assert isinstance(node.children[1], Emphasis)

    def test_link_inside_image(self) -> None:
        """Images may contain links."""
        html = inline_html("![[a](/b)](/c)")
        assert html == '<img src="/c" alt="a" />'

    def test_link_node(self) -> None:
        """Link nodes carry destination, title and children."""
        (node,) = children('[x](/d "t")')
        assert isinstance(node, Link)
        assert (node.destination, node.title) == ("/d", "t")

    def test_escaped_destination(self) -> None:
        """Backslash escapes are resolved in destinations."""
        (node,) = children("[x](/a\\_b)")
        assert isinstance(node, Link)
        assert node.destination == "/a_b"

    def test_code_span_binds_tighter_than_link(self) -> None:
        """A ] inside a code span does not close the bracket."""
        assert inline_html("[a`]`") == "[a<code>]</code>"


class TestReferenceLinks:
    """Links resolved through definitions."""

    def test_full_reference(self) -> None:
        """[text][label] looks the label up."""
        html = render(parse("[foo][bar]\n\n[bar]: /b"))
        assert html == '<p><a href="/b">foo</a></p>\n'

    def test_collapsed_reference(self) -> None:
        """[label][] uses the link text as label."""
        html = render(parse("[X][]\n\n[x]: /u"))
        assert html == '<p><a href="/u">X</a></p>\n'

    def test_shortcut_reference(self) -> None:
        """[label] alone resolves when defined."""
        html = render(parse('[x]: /u "t"\n\n[x]'))
        assert html == '<p><a href="/u" title="t">x</a></p>\n'

    def test_first_definition_wins(self) -> None:
        """Later duplicate definitions are ignored."""
        html = render(parse('[x]: /u "t"\n[x]: /other\n\n[x]'))
        assert html == '<p><a href="/u" title="t">x</a></p>\n'

    def test_undefined_label_is_literal(self) -> None:
        """Unresolved references stay text."""
        assert inline_html("[nope]") == "[nope]"
        assert inline_html("[a][nope]") == "[a][nope]"

    def test_label_normalization(self) -> None:
        """Labels match case-insensitively with whitespace collapsed."""
        html = render(parse("[Foo \n  BAR]\n\n[foo bar]: /fb"))
        assert html == '<p><a href="/fb">Foo\nBAR</a></p>\n'

    def test_inline_link_preferred(self) -> None:
        """An inline destination wins over a definition."""
        html = render(parse("[x](/inline)\n\n[x]: /ref"))
        assert html == '<p><a href="/inline">x</a></p>\n'

    def test_reference_image(self) -> None:
        """Images resolve references too."""
        html = render(parse("![logo]\n\n[logo]: /l.png"))
        assert html == '<p><img src="/l.png" alt="logo" /></p>\n'


class TestAutolinks:
    """Angle-bracket autolinks and bare URLs."""

    def test_uri_autolink(self) -> None:
        """<scheme:...> becomes a link."""
        assert inline_html("<http://a.b/c>") == '<a href="http://a.b/c">http://a.b/c</a>'

    def test_email_autolink(self) -> None:
        """<user@host> becomes a mailto link."""
        (node,) = children("<me@x.org>")
        assert isinstance(node, Autolink)
        assert node.email
        assert inline_html("<me@x.org>") == '<a href="mailto:me@x.org">me@x.org</a>'

    def test_not_autolink(self) -> None:
        """Spaces are not allowed inside an autolink."""
        assert inline_html("<http://a b>") == "&lt;http://a b&gt;"

    def test_bare_url_disabled_by_default(self) -> None:
        """Bare URLs stay text unless enabled."""
        assert inline_html("see https://x.org") == "see https://x.org"

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("see https://x.org.", 'see <a href="https://x.org">https://x.org</a>.'),
            ("www.example.com", '<a href="http://www.example.com">www.example.com</a>'),
            ("(http://a.b/c)", '(<a href="http://a.b/c">http://a.b/c</a>)'),
            ("http://a.b/x_y_z", '<a href="http://a.b/x_y_z">http://a.b/x_y_z</a>'),
            ("xhttp://a.b", "xhttp://a.b"),
            ("http://", "http://"),
        ],
    )
    def test_bare_urls(self, source: str, expected: str) -> None:
        """Bare URLs are linked with trailing punctuation trimmed."""
        assert inline_html(source, autolinks_enabled=True) == expected

    def test_bare_url_in_link_text_not_linked(self) -> None:
        """Link text does not get a nested autolink."""
        html = inline_html("[http://a.b](/c)", autolinks_enabled=True)
        assert html == '<a href="/c">http://a.b</a>'


class TestRawHtml:
    """Inline HTML passes through unescaped."""

    @pytest.mark.parametrize(
        "source",
        [
            'a <span class="x">b</span>',
            "a <br/> b",
            "a <!-- note --> b",
            "a <?php echo 1; ?> b",
            "a <![CDATA[x]]> b",
            "a <!DOCTYPE html> b",
            "a <x-y data-z='1' flag> b",
        ],
    )
    def test_passthrough(self, source: str) -> None:
        """Tags, comments, processing instructions and declarations."""
        assert inline_html(source) == source

    def test_node(self) -> None:
        """RawHtml keeps the tag text."""
        node = children("a <b>")[1]
        assert isinstance(node, RawHtml)
        assert node.html == "<b>"

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("a < b", "a &lt; b"),
            ("<a href='x>", "&lt;a href='x&gt;"),
            ("<1>", "&lt;1&gt;"),
            ("a <!-- open", "a &lt;!-- open"),
        ],
    )
    def test_invalid_html_is_text(self, source: str, expected: str) -> None:
        """Malformed tags are escaped as text."""
        assert inline_html(source) == expected


class TestEscapesAndEntities:
    """Backslash escapes and character references."""

    def test_escaped_delimiters(self) -> None:
        """Escaped asterisks do not form emphasis."""
        assert inline_html("\\*not em\\*") == "*not em*"

    def test_escape_node(self) -> None:
        """Escapes become Escape nodes."""
        nodes = children("\\#")
        assert nodes == (Escape(location=nodes[0].location, literal="#"),)

    def test_backslash_before_letter_is_literal(self) -> None:
        """Only ASCII punctuation can be escaped."""
        assert inline_html("\\a") == "\\a"

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("&amp; &copy;", "&amp; ©"),
            ("&#35; &#x22;", "# &quot;"),
            ("&#0;", "\ufffd"),
            ("&nope; &", "&amp;nope; &amp;"),
            ("&#xZZ;", "&amp;#xZZ;"),
        ],
    )
    def test_entities(self, source: str, expected: str) -> None:
        """Valid references decode; invalid ones stay literal."""
        assert inline_html(source) == expected

    def test_entity_does_not_make_delimiter(self) -> None:
        """&#42; is a literal asterisk."""
        assert inline_html("&#42;a&#42;") == "*a*"


class TestLineBreaks:
    """Hard and soft breaks."""

    def test_soft_break(self) -> None:
        """A plain newline is a soft break."""
        assert inline_html("a\nb") == "a\nb"
        (_, brk, _) = children("a\nb")
        assert isinstance(brk, LineBreak) and not brk.hard

    def test_two_spaces(self) -> None:
        """Two trailing spaces make a hard break."""
        assert inline_html("a  \nb") == "a<br />\nb"

    def test_one_space_is_soft(self) -> None:
        """A single trailing space is dropped."""
        assert inline_html("a \nb") == "a\nb"

    def test_backslash(self) -> None:
        """A backslash before the newline makes a hard break."""
        assert inline_html("a\\\nb") == "a<br />\nb"

    def test_leading_spaces_of_next_line_dropped(self) -> None:
        """Indentation of continuation lines is not content."""
        assert inline_html("a\n   b") == "a\nb"

    def test_hard_break_on_newline(self) -> None:
        """The option turns every newline into a hard break."""
        assert inline_html("a\nb", hard_break_on_newline=True) == "a<br />\nb"

    def test_trailing_spaces_at_end_dropped(self) -> None:
        """Spaces at the end of a paragraph do not make a break."""
        assert render(parse("a  ")) == "<p>a</p>\n"


class TestInlineNestingLimit:
    """Inline nesting beyond the limit degrades to text."""

    def test_emphasis_degrades(self) -> None:
        """The outer pair is left literal."""
        assert inline_html("***a***", max_nesting_depth=1) == "*<strong>a</strong>*"

    def test_link_degrades(self) -> None:
        """A link that would exceed the limit stays text."""
        html = inline_html("[*a*](/u)", max_nesting_depth=1)
        assert html == "[<em>a</em>](/u)"

    def test_within_limit(self) -> None:
        """Nesting up to the limit is kept."""
        assert inline_html("***a***", max_nesting_depth=2) == "<em><strong>a</strong></em>"
