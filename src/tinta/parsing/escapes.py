"""Backslash escapes and character references.

Used by the inline parser for text, and by link destinations, link titles
and fenced-code info strings, which accept both forms.
"""

from __future__ import annotations

import re
from html.entities import html5

# Backslash + ASCII punctuation, or a complete entity / numeric reference
_ESCAPE_OR_ENTITY = re.compile(
    r"\\([!-/:-@\[-`{-~])"
    r"|&(#[xX][0-9a-fA-F]{1,6};|#[0-9]{1,7};|[A-Za-z][A-Za-z0-9]{1,31};)"
)
_ENTITY = re.compile(r"&(?:#[xX]([0-9a-fA-F]{1,6})|#([0-9]{1,7})|([A-Za-z][A-Za-z0-9]{1,31}));")


def _codepoint(value: int) -> str:
    # U+0000 and values outside Unicode become the replacement character
    if value == 0 or value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
        return "\ufffd"
    return chr(value)


def decode_entity(text: str, pos: int) -> tuple[str, int] | None:
    """Decode the character reference starting at ``text[pos] == "&"``.

    Returns ``(decoded, end)`` or None when the text there is not a valid
    named, decimal or hexadecimal reference.

    Example:
        >>> decode_entity("a &amp; b", 2)
        ('&', 7)
    """
    match = _ENTITY.match(text, pos)
    if match is None:
        return None
    hex_digits, dec_digits, name = match.groups()
    if hex_digits is not None:
        return _codepoint(int(hex_digits, 16)), match.end()
    if dec_digits is not None:
        return _codepoint(int(dec_digits)), match.end()
    decoded = html5.get(f"{name};")
    if decoded is None:
        return None
    return decoded, match.end()


def _replace(match: re.Match[str]) -> str:
    escaped = match.group(1)
    if escaped is not None:
        return escaped
    decoded = decode_entity(match.group(0), 0)
    return decoded[0] if decoded is not None else match.group(0)


def unescape_string(text: str) -> str:
    """Resolve backslash escapes and character references in ``text``."""
    if "\\" not in text and "&" not in text:
        return text
    return _ESCAPE_OR_ENTITY.sub(_replace, text)


__all__ = ["decode_entity", "unescape_string"]
