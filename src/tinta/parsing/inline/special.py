"""Special inline constructs: autolinks, raw HTML, entities and bare URLs.

Handles everything that starts with ``<`` or ``&``, plus the optional
detection of bare ``http://``, ``https://`` and ``www.`` URLs.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tinta.nodes import Autolink, RawHtml
from tinta.parsing.escapes import decode_entity
from tinta.parsing.html import scan_html_inline
from tinta.parsing.inline.tokens import Slot

if TYPE_CHECKING:
    from tinta.location import SourceLocation


# CommonMark autolink patterns (section 6.5)
# URI autolink: scheme of 2-32 characters, then no spaces, < or >
_URI_AUTOLINK_RE = re.compile(r"<([a-zA-Z][a-zA-Z0-9+.\-]{1,31}:[^\x00-\x20<>]*)>")
_EMAIL_AUTOLINK_RE = re.compile(
    r"<([a-zA-Z0-9.!#$%&'*+/=?^_`{|}~\-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*)>"
)

# Bare URLs (GFM extended autolinks)
_BARE_URL_START = re.compile(r"(?<![\w.+\-/])(?:https?://|www\.)", re.IGNORECASE)
_BARE_URL_BODY = re.compile(r"(?:https?://|www\.)[^\s<]*", re.IGNORECASE)
_BARE_URL_PREFIX = re.compile(r"https?://|www\.", re.IGNORECASE)
_BARE_URL_TRAILING = frozenset("?!.,:*_~'\"")


def find_bare_url(text: str, start: int, stop: int) -> int:
    """Index of the first bare URL start in ``text[start:stop]``, or -1."""
    match = _BARE_URL_START.search(text, start, stop)
    return match.start() if match else -1


def _trim_bare_url(url: str) -> str:
    """Drop trailing punctuation and unbalanced closing parentheses."""
    while url:
        last = url[-1]
        if last in _BARE_URL_TRAILING:
            url = url[:-1]
        elif last == ")" and url.count(")") > url.count("("):
            url = url[:-1]
        else:
            break
    return url


class SpecialInlineMixin:
    """Mixin for ``<`` / ``&`` constructs and bare URLs.

    Required Host Attributes:
        - _text: str
        - _location: SourceLocation
        - _find_cache: dict[str, tuple[int, int]]

    Required Host Methods:
        - _append_slot

    """

    _text: str
    _location: SourceLocation
    _find_cache: dict[str, tuple[int, int]]

    def _append_slot(self, item: Slot, depth: int = 0) -> int:
        raise NotImplementedError

    def _find(self, needle: str, start: int) -> int:
        """``str.find`` remembering its last answer per needle.

        An answer found from ``s`` is still valid for any later start up to
        the match, and a miss stays a miss, so repeated searches for the
        same terminator stay linear overall.
        """
        cached = self._find_cache.get(needle)
        if cached is not None:
            searched_from, found = cached
            if searched_from <= start and (found == -1 or found >= start):
                return found
        found = self._text.find(needle, start)
        self._find_cache[needle] = (start, found)
        return found

    def _try_angle_bracket(self, pos: int) -> int:
        """Handle ``<`` at ``pos``: autolink, raw HTML, or literal text."""
        text = self._text
        match = _URI_AUTOLINK_RE.match(text, pos)
        if match is not None:
            uri = match.group(1)
            self._append_slot(Autolink(location=self._location, uri=uri, text=uri))
            return match.end()

        match = _EMAIL_AUTOLINK_RE.match(text, pos)
        if match is not None:
            address = match.group(1)
            self._append_slot(
                Autolink(
                    location=self._location,
                    uri=f"mailto:{address}",
                    text=address,
                    email=True,
                )
            )
            return match.end()

        end = scan_html_inline(text, pos, self._find)
        if end != -1:
            self._append_slot(RawHtml(location=self._location, html=text[pos:end]))
            return end

        self._append_slot("<")
        return pos + 1

    def _try_entity(self, pos: int) -> int:
        """Handle ``&`` at ``pos``: decoded character reference or literal."""
        decoded = decode_entity(self._text, pos)
        if decoded is None:
            self._append_slot("&")
            return pos + 1
        value, end = decoded
        self._append_slot(value)
        return end

    def _try_bare_url(self, pos: int) -> int:
        """Emit the bare URL starting at ``pos``; return -1 if there is none."""
        match = _BARE_URL_BODY.match(self._text, pos)
        if match is None:
            return -1
        url = _trim_bare_url(match.group())
        prefix = _BARE_URL_PREFIX.match(url)
        if prefix is None or prefix.end() == len(url):
            return -1
        uri = f"http://{url}" if url[:4].lower() == "www." else url
        self._append_slot(Autolink(location=self._location, uri=uri, text=url))
        return pos + len(url)


__all__ = ["SpecialInlineMixin", "find_bare_url"]
