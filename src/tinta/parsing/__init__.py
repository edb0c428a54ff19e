"""Block and inline parsing stages.

The block stage (``tinta.parsing.blocks``) turns scanned lines into a tree of
open-block frames, the reference pass (``tinta.parsing.references``) pulls
link reference definitions out of paragraphs, and the inline stage
(``tinta.parsing.inline``) resolves each leaf block's text into inline nodes.
"""
