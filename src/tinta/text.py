"""Extract plain text from Tinta AST nodes.

Used for heading slugs and image alt text.

Example:
    >>> from tinta import parse, extract_text
    >>> doc = parse("# Hello **World**")
    >>> extract_text(doc.children[0])
    'Hello World'
"""

from tinta.nodes import (
    Autolink,
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Document,
    Emphasis,
    Escape,
    Heading,
    HtmlBlock,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    RawHtml,
    Strong,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)


def extract_text(node: Node, *, alt_text: bool = True, line_break: str = " ") -> str:
    """Extract plain text from any AST node.

    Walks the tree with an explicit stack, so arbitrarily deep trees are
    handled without recursion. Raw HTML contributes nothing. Block-level
    children are separated by newlines.

    Args:
        node: Any AST node (block or inline).
        alt_text: Include the alt text of images.
        line_break: Text substituted for soft and hard line breaks.

    Returns:
        Concatenated plain text from the node and its descendants.

    """
    parts: list[str] = []
    stack: list[Node | str] = [node]
    while stack:
        item = stack.pop()
        match item:
            case str():
                parts.append(item)
            case Text():
                parts.append(item.content)
            case Escape():
                parts.append(item.literal)
            case CodeSpan():
                parts.append(item.content)
            case Autolink():
                parts.append(item.text)
            case LineBreak():
                parts.append(line_break)
            case RawHtml() | HtmlBlock() | ThematicBreak():
                pass
            case Image():
                if alt_text:
                    _push(stack, item.children, "")
            case Emphasis() | Strong() | Link() | Heading() | Paragraph() | TableCell():
                _push(stack, item.children, "")
            case CodeBlock():
                parts.append(item.code)
            case Document() | BlockQuote() | ListItem():
                _push(stack, item.children, "\n")
            case List():
                _push(stack, item.items, "\n")
            case TableRow():
                _push(stack, item.cells, " ")
            case Table():
                _push(stack, (item.head, *item.body), "\n")
    return "".join(parts)


def _push(stack: list[Node | str], nodes: tuple[Node, ...], separator: str) -> None:
    """Queue ``nodes`` so they pop in source order, ``separator`` between them."""
    for index, child in enumerate(reversed(nodes)):
        if index and separator:
            stack.append(separator)
        stack.append(child)


__all__ = ["extract_text"]
