"""Document model produced by the parse, walk, and streaming pipeline"""

from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from mdsite.core.utils.slug import slugify


class Heading(BaseModel):
    """A heading with its naive anchor id (duplicates are not disambiguated)."""
    kind:  Literal["heading"] = "heading"
    level: int = Field(..., ge=1, le=6)
    text:  str
    id:    str


class Paragraph(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    text: str


class ListBlock(BaseModel):
    """A list flattened to the plain text of each top-level item."""
    kind:    Literal["list"] = "list"
    items:   list[str] = Field(default_factory=list)
    ordered: bool = False


class CodeBlock(BaseModel):
    kind:     Literal["code_block"] = "code_block"
    language: Optional[str] = None
    content:  str


class Table(BaseModel):
    kind:    Literal["table"] = "table"
    headers: list[str] = Field(default_factory=list)
    rows:    list[list[str]] = Field(default_factory=list)


ContentElement = Annotated[
    Union[Heading, Paragraph, ListBlock, CodeBlock, Table],
    Field(discriminator="kind"),
]


class Link(BaseModel):
    text:        str
    url:         str
    is_external: bool = False


class Image(BaseModel):
    alt: Optional[str] = None
    url: str


class ParsedDocument(BaseModel):
    """Result of one eager parse call; owned by the caller, never shared."""
    model_config = ConfigDict(frozen=True)

    front_matter: Optional[dict[str, Any]] = None
    elements:     list[ContentElement] = Field(default_factory=list)
    links:        list[Link] = Field(default_factory=list)
    images:       list[Image] = Field(default_factory=list)
    excerpt:      Optional[str] = None
    html:         str = ""              # sanitized rendering of the body

    @property
    def headings(self) -> list[Heading]:
        return [e for e in self.elements if isinstance(e, Heading)]

    @property
    def paragraphs(self) -> list[Paragraph]:
        return [e for e in self.elements if isinstance(e, Paragraph)]

    @property
    def lists(self) -> list[ListBlock]:
        return [e for e in self.elements if isinstance(e, ListBlock)]

    @property
    def code_blocks(self) -> list[CodeBlock]:
        return [e for e in self.elements if isinstance(e, CodeBlock)]

    @property
    def tables(self) -> list[Table]:
        return [e for e in self.elements if isinstance(e, Table)]

    @property
    def has_code_blocks(self) -> bool:
        return bool(self.code_blocks)

    @property
    def has_tables(self) -> bool:
        return bool(self.tables)


class ContentItem(BaseModel):
    """Per-file result handed to the site builder (eager or streamed)."""
    path:         str
    slug:         str
    type:         Literal["post", "page"] = "page"
    front_matter: dict[str, Any] = Field(default_factory=dict)
    content:      str                   # sanitized HTML, or the excerpt in metadata-only mode
    excerpt:      Optional[str] = None
    streamed:     bool = False

    @classmethod
    def for_path(cls, path: Path, front_matter: Optional[dict[str, Any]], **kwargs) -> "ContentItem":
        """Build an item whose slug and type derive from the front matter and file location."""
        front_matter = front_matter or {}
        slug = front_matter.get("slug")
        if not isinstance(slug, str) or not slug:
            slug = slugify(path.stem)
        return cls(
            path=str(path),
            slug=slug,
            type="post" if "posts" in path.parts else "page",
            front_matter=front_matter,
            **kwargs,
        )
