"""HTML grammar shared by HTML blocks and raw inline HTML.

Block start conditions follow CommonMark 4.6 (types 1-7); inline raw HTML
follows CommonMark 6.6. Open tags are scanned by hand rather than with a
single regex so attribute validation stays linear on hostile input.

Scanners return the index just past the construct, or -1 if there is none.
"""

from __future__ import annotations

import re
import string
from collections.abc import Callable

# CommonMark HTML block type 1 tags (case-insensitive)
HTML_BLOCK_TYPE1_TAGS = frozenset({"pre", "script", "style", "textarea"})

# CommonMark HTML block type 6 tags (case-insensitive)
HTML_BLOCK_TYPE6_TAGS = frozenset(
    {
        "address", "article", "aside", "base", "basefont", "blockquote",
        "body", "caption", "center", "col", "colgroup", "dd", "details",
        "dialog", "dir", "div", "dl", "dt", "fieldset", "figcaption",
        "figure", "footer", "form", "frame", "frameset", "h1", "h2", "h3",
        "h4", "h5", "h6", "head", "header", "hr", "html", "iframe",
        "legend", "li", "link", "main", "menu", "menuitem", "nav",
        "noframes", "ol", "optgroup", "option", "p", "param", "search",
        "section", "summary", "table", "tbody", "td", "tfoot", "th",
        "thead", "title", "tr", "track", "ul",
    }
)  # fmt: skip

_LETTERS = frozenset(string.ascii_letters)
_TAG_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "-")
_ATTR_NAME_START = frozenset(string.ascii_letters + "_:")
_ATTR_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_.:-")
_UNQUOTED_STOP = frozenset("\"'=<>` \t\n")
_TAG_SPACE = frozenset(" \t\n")

_TYPE1_START = re.compile(r"<(?:script|pre|textarea|style)(?:[ \t>]|$)", re.IGNORECASE)
_TYPE1_END = re.compile(r"</(?:script|pre|textarea|style)>", re.IGNORECASE)
_TYPE6_START = re.compile(r"</?([A-Za-z][A-Za-z0-9-]*)(?:[ \t]|/?>|$)")

# End markers for block types 2-5; types 6 and 7 end at a blank line
_BLOCK_END_MARKERS: dict[int, str] = {2: "-->", 3: "?>", 4: ">", 5: "]]>"}


def scan_open_tag(text: str, pos: int) -> int:
    """Scan an HTML open tag starting at ``text[pos] == "<"``.

    Tag names are ASCII letters followed by letters, digits or hyphens.
    Attributes need leading whitespace; values may be unquoted, single- or
    double-quoted. An optional ``/`` may precede the closing ``>``.
    """
    n = len(text)
    if pos >= n or text[pos] != "<":
        return -1
    i = pos + 1
    if i >= n or text[i] not in _LETTERS:
        return -1
    while i < n and text[i] in _TAG_NAME_CHARS:
        i += 1

    while True:
        ws_start = i
        while i < n and text[i] in _TAG_SPACE:
            i += 1
        if i >= n:
            return -1
        char = text[i]
        if char == ">":
            return i + 1
        if char == "/":
            return i + 2 if i + 1 < n and text[i + 1] == ">" else -1
        if i == ws_start or char not in _ATTR_NAME_START:
            return -1
        while i < n and text[i] in _ATTR_NAME_CHARS:
            i += 1

        # Optional value
        j = i
        while j < n and text[j] in _TAG_SPACE:
            j += 1
        if j < n and text[j] == "=":
            j += 1
            while j < n and text[j] in _TAG_SPACE:
                j += 1
            if j >= n:
                return -1
            quote = text[j]
            if quote == '"' or quote == "'":
                close = text.find(quote, j + 1)
                if close == -1:
                    return -1
                i = close + 1
            else:
                k = j
                while k < n and text[k] not in _UNQUOTED_STOP:
                    k += 1
                if k == j:
                    return -1
                i = k


def scan_closing_tag(text: str, pos: int) -> int:
    """Scan ``</tagname>`` with optional whitespace before ``>``."""
    n = len(text)
    if not text.startswith("</", pos):
        return -1
    i = pos + 2
    if i >= n or text[i] not in _LETTERS:
        return -1
    while i < n and text[i] in _TAG_NAME_CHARS:
        i += 1
    while i < n and text[i] in _TAG_SPACE:
        i += 1
    if i < n and text[i] == ">":
        return i + 1
    return -1


def scan_html_inline(
    text: str,
    pos: int,
    find: Callable[[str, int], int] | None = None,
) -> int:
    """Scan raw inline HTML at ``pos``.

    Recognizes open tags, closing tags, comments, processing instructions,
    declarations and CDATA sections.

    Args:
        text: Leaf block text
        pos: Index of the ``<``
        find: Substring search used for terminators; the inline parser passes
            a memoized search so repeated failures stay linear.
    """
    if find is None:
        find = text.find
    n = len(text)
    if pos + 1 >= n:
        return -1
    nxt = text[pos + 1]
    if nxt in _LETTERS:
        return scan_open_tag(text, pos)
    if nxt == "/":
        return scan_closing_tag(text, pos)
    if nxt == "?":
        close = find("?>", pos + 2)
        return close + 2 if close != -1 else -1
    if nxt != "!":
        return -1
    if text.startswith("<!--", pos):
        if text.startswith("<!-->", pos):
            return pos + 5
        if text.startswith("<!--->", pos):
            return pos + 6
        close = find("-->", pos + 4)
        return close + 3 if close != -1 else -1
    if text.startswith("<![CDATA[", pos):
        close = find("]]>", pos + 9)
        return close + 3 if close != -1 else -1
    if pos + 2 < n and text[pos + 2] in _LETTERS:
        close = find(">", pos + 3)
        return close + 1 if close != -1 else -1
    return -1


def html_block_start(text: str, *, interrupts_paragraph: bool) -> int:
    """Return the HTML block type (1-7) that ``text`` opens, or 0.

    Args:
        text: Line content from the first non-space character
        interrupts_paragraph: True when the line would otherwise continue an
            open paragraph; type 7 blocks cannot interrupt one.
    """
    if not text.startswith("<"):
        return 0
    if _TYPE1_START.match(text):
        return 1
    if text.startswith("<!--"):
        return 2
    if text.startswith("<?"):
        return 3
    if text.startswith("<![CDATA["):
        return 5
    if len(text) > 2 and text[1] == "!" and text[2] in _LETTERS:
        return 4
    match = _TYPE6_START.match(text)
    if match and match.group(1).lower() in HTML_BLOCK_TYPE6_TAGS:
        return 6
    if interrupts_paragraph:
        return 0
    end = scan_open_tag(text, 0)
    if end == -1:
        end = scan_closing_tag(text, 0)
    if end != -1 and not text[end:].strip(" \t"):
        name_match = _TYPE6_START.match(text)
        if name_match and name_match.group(1).lower() in HTML_BLOCK_TYPE1_TAGS:
            return 0
        return 7
    return 0


def html_block_ends(block_type: int, text: str) -> bool:
    """Return True if ``text`` satisfies the end condition of a type 1-5 block."""
    if block_type == 1:
        return _TYPE1_END.search(text) is not None
    marker = _BLOCK_END_MARKERS.get(block_type)
    return marker is not None and marker in text


__all__ = [
    "HTML_BLOCK_TYPE1_TAGS",
    "HTML_BLOCK_TYPE6_TAGS",
    "scan_open_tag",
    "scan_closing_tag",
    "scan_html_inline",
    "html_block_start",
    "html_block_ends",
]
