"""Renderers for Tinta AST."""

from tinta.renderers.html import HeadingInfo, HtmlRenderer, RenderResult

__all__ = ["HeadingInfo", "HtmlRenderer", "RenderResult"]
