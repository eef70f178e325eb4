"""Unit tests for core/models.py"""

from pathlib import Path

import pytest
from pydantic import TypeAdapter, ValidationError

from mdsite.core.models import (
    CodeBlock,
    ContentElement,
    ContentItem,
    Heading,
    Paragraph,
    ParsedDocument,
    Table,
)


def test_content_element_discriminator():
    """Element dicts validate into the model named by `kind`."""
    adapter = TypeAdapter(ContentElement)
    element = adapter.validate_python({"kind": "heading", "level": 2, "text": "T", "id": "t"})
    assert isinstance(element, Heading)


def test_heading_level_bounds():
    with pytest.raises(ValidationError):
        Heading(level=7, text="x", id="x")


def test_parsed_document_views():
    """Derived views filter elements by kind."""
    doc = ParsedDocument(elements=[
        Heading(level=1, text="T", id="t"),
        Paragraph(text="p"),
        CodeBlock(language=None, content="c"),
    ])
    assert [h.text for h in doc.headings] == ["T"]
    assert [p.text for p in doc.paragraphs] == ["p"]
    assert doc.has_code_blocks
    assert not doc.has_tables
    assert doc.tables == [] and doc.lists == []


def test_parsed_document_is_frozen():
    doc = ParsedDocument(elements=[Table(headers=["a"])])
    with pytest.raises(ValidationError):
        doc.html = "<script>"


def test_content_item_for_path_uses_front_matter_slug():
    item = ContentItem.for_path(Path("content/posts/My File.md"), {"slug": "custom"}, content="")
    assert item.slug == "custom"
    assert item.type == "post"


def test_content_item_for_path_defaults():
    """Without a slug the stem is slugified; outside posts/ the type is page."""
    item = ContentItem.for_path(Path("content/About Us.md"), None, content="<p>x</p>")
    assert item.slug == "about-us"
    assert item.type == "page"
    assert item.front_matter == {}
    assert item.streamed is False
