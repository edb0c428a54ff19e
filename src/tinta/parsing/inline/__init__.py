"""Inline parsing: leaf block text to inline nodes."""

from tinta.parsing.inline.core import InlineParser

__all__ = ["InlineParser"]
