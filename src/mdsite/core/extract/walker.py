"""Walk a markdown-it syntax tree into content elements, links, and images"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from markdown_it.tree import SyntaxTreeNode

from mdsite.core.extract.text import plain_text
from mdsite.core.models import (
    CodeBlock,
    Heading,
    Image,
    Link,
    ListBlock,
    Paragraph,
    Table,
)
from mdsite.core.utils.slug import heading_id
from mdsite.core.utils.tokens import heading_level, is_external_url


class NodeKind(str, Enum):
    """Closed set of node kinds the walker distinguishes; everything else is OTHER."""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    FENCE = "fence"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    LINK = "link"
    IMAGE = "image"
    OTHER = "other"

    @classmethod
    def of(cls, node: SyntaxTreeNode) -> "NodeKind":
        try:
            return cls(node.type)
        except ValueError:
            return cls.OTHER


@dataclass
class WalkResult:
    elements:        list = field(default_factory=list)
    links:           list[Link] = field(default_factory=list)
    images:          list[Image] = field(default_factory=list)
    first_paragraph: Optional[str] = None


def _collect_inline(node: SyntaxTreeNode, result: WalkResult) -> None:
    """Append every link and image under node, in document order."""
    for child in node.children:
        kind = NodeKind.of(child)
        if kind is NodeKind.LINK:
            url = child.attrs.get("href", "")
            result.links.append(Link(text=plain_text(child), url=url, is_external=is_external_url(url)))
        elif kind is NodeKind.IMAGE:
            result.images.append(Image(alt=plain_text(child) or None, url=child.attrs.get("src", "")))
            continue
        _collect_inline(child, result)


def _heading(node: SyntaxTreeNode, result: WalkResult) -> None:
    text = plain_text(node)
    result.elements.append(Heading(level=heading_level(node), text=text, id=heading_id(text)))
    _collect_inline(node, result)


def _paragraph(node: SyntaxTreeNode, result: WalkResult) -> None:
    text = plain_text(node)
    result.elements.append(Paragraph(text=text))
    if result.first_paragraph is None and text:
        result.first_paragraph = text
    _collect_inline(node, result)


def _list(node: SyntaxTreeNode, result: WalkResult) -> None:
    items = [plain_text(item) for item in node.children]
    result.elements.append(ListBlock(items=items, ordered=NodeKind.of(node) is NodeKind.ORDERED_LIST))
    _collect_inline(node, result)


def _code(node: SyntaxTreeNode, result: WalkResult) -> None:
    info = node.info.strip() if node.info else ""
    language = info.split()[0] if info else None
    result.elements.append(CodeBlock(language=language, content=node.content.strip("\n")))


def _table(node: SyntaxTreeNode, result: WalkResult) -> None:
    headers: list[str] = []
    rows: list[list[str]] = []
    for section in node.children:
        for row in section.children:
            cells = [plain_text(cell) for cell in row.children]
            if section.type == "thead":
                headers = cells
            else:
                rows.append(cells)
    result.elements.append(Table(headers=headers, rows=rows))
    _collect_inline(node, result)


_HANDLERS: dict[NodeKind, Callable[[SyntaxTreeNode, WalkResult], None]] = {
    NodeKind.HEADING: _heading,
    NodeKind.PARAGRAPH: _paragraph,
    NodeKind.BULLET_LIST: _list,
    NodeKind.ORDERED_LIST: _list,
    NodeKind.FENCE: _code,
    NodeKind.CODE_BLOCK: _code,
    NodeKind.TABLE: _table,
}


def _walk(node: SyntaxTreeNode, result: WalkResult) -> None:
    for child in node.children:
        handler = _HANDLERS.get(NodeKind.of(child))
        if handler:
            handler(child, result)
        else:
            # blockquotes and other containers are transparent
            _walk(child, result)


def walk_document(root: SyntaxTreeNode, result: Optional[WalkResult] = None) -> WalkResult:
    """Walk the tree in document order; pass `result` to accumulate across several trees."""
    result = result if result is not None else WalkResult()
    _walk(root, result)
    return result
