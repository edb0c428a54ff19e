"""Shared helpers: logging and text processing."""

from tinta.utils.logger import get_logger
from tinta.utils.text import count_words, slugify

__all__ = ["count_words", "get_logger", "slugify"]
