"""Plain-text flattening of markdown-it syntax tree nodes"""

from markdown_it.tree import SyntaxTreeNode


_LITERAL_TYPES = {"text", "code_inline"}
_BREAK_TYPES = {"softbreak", "hardbreak"}
_SILENT_TYPES = {"fence", "code_block", "html_block", "html_inline"}


def _text(node: SyntaxTreeNode) -> str:
    if node.type in _LITERAL_TYPES:
        return node.content
    if node.type in _BREAK_TYPES:
        return " "
    if node.type in _SILENT_TYPES:
        return ""

    children = node.children
    if any(not child.block for child in children):
        return "".join(_text(child) for child in children)
    parts = (_text(child).strip() for child in children)
    return "\n".join(part for part in parts if part)


def plain_text(node: SyntaxTreeNode) -> str:
    """Concatenated text of a node: raw HTML and code blocks are dropped, inline code kept."""
    return _text(node).strip()
