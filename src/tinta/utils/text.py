"""Text processing utilities for Tinta.

Provides slugification for heading ids and the word counter behind
``RenderResult.word_count``.

Example:
    >>> from tinta.utils.text import slugify
    >>> slugify("Hello World!")
    'hello-world'
"""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s]+")

# Word characters plus combining marks, so decomposed accents stay inside a word
_WORD_CHAR = r"[\w\u0300-\u036f\u1ab0-\u1aff\u20d0-\u20ff]"

# A word is a run of word characters, optionally joined by an inner
# apostrophe, hyphen or period: "don't", "well-known", "3.14"
_WORD = re.compile(rf"{_WORD_CHAR}+(?:['’\-.]{_WORD_CHAR}+)*")


def slugify(text: str, separator: str = "-") -> str:
    """Convert heading text to a URL-safe slug with Unicode support.

    Preserves Unicode word characters (letters, digits, underscore) to
    support international content.

    Args:
        text: Plain heading text
        separator: Character to use between words (default: '-')

    Returns:
        Lowercase slug of word characters and separators

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Test & Code")
        'test-code'
        >>> slugify("Café")
        'café'
    """
    if not text:
        return ""
    text = text.lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATORS.sub(separator, text)
    return text.strip(separator)


def count_words(text: str) -> int:
    """Count the words in ``text``.

    Examples:
        >>> count_words("Hello, world!")
        2
        >>> count_words("don't stop-motion 3.14")
        3
    """
    return sum(1 for _ in _WORD.finditer(text))


__all__ = ["count_words", "slugify"]
