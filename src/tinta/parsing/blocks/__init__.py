"""Block-level parsing: logical lines to a tree of block frames."""

from tinta.parsing.blocks.core import BlockParser

__all__ = ["BlockParser"]
