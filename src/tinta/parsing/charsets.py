"""Character sets and classifiers shared by the block and inline parsers.

Flanking decisions use the Unicode category table of the running
interpreter (``unicodedata``). Punctuation means any P* or S* category,
whitespace means ASCII whitespace or category Zs. Combining marks (M*)
count as neither, so a delimiter next to one behaves as if next to a letter.

Usage:
    from tinta.parsing.charsets import ASCII_PUNCTUATION

    if char in ASCII_PUNCTUATION:
        ...
"""

import unicodedata

# https://spec.commonmark.org/0.31.2/#ascii-punctuation-character
ASCII_PUNCTUATION: frozenset[str] = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

WHITESPACE: frozenset[str] = frozenset(" \t\n\r\f\v")


def is_unicode_punctuation(char: str) -> bool:
    """Check if character is Unicode punctuation or symbol (P* or S*).

    The empty string (start or end of text) is not punctuation.
    """
    if not char:
        return False
    if char in ASCII_PUNCTUATION:
        return True
    cat = unicodedata.category(char)
    return cat[0] == "P" or cat[0] == "S"


def is_unicode_whitespace(char: str) -> bool:
    """Check if character is Unicode whitespace (ASCII whitespace or Zs).

    The empty string counts as whitespace so that the start and end of a
    leaf block behave like spaces for flanking checks.
    """
    if not char:
        return True
    if char in WHITESPACE:
        return True
    return unicodedata.category(char) == "Zs"


# Characters that stop a plain text run in the inline tokenizer
INLINE_SPECIAL: frozenset[str] = frozenset("*_`[]!\\\n<&")

# First characters that may open a block other than a paragraph
BLOCK_START_CHARS: frozenset[str] = frozenset("#`~*+_=<>-0123456789")

# Extra block-start characters when tables are enabled (delimiter rows)
TABLE_START_CHARS: frozenset[str] = frozenset("|:")
