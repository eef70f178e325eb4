"""File discovery, eager parsing, and eager/streaming dispatch"""

from pathlib import Path

import structlog
from markdown_it.tree import SyntaxTreeNode

from mdsite.core.errors import InvalidEncodingError, MarkdownError
from mdsite.core.extract.walker import walk_document
from mdsite.core.frontmatter import extract_front_matter
from mdsite.core.limits import DEFAULT_LIMITS, Limits
from mdsite.core.models import ContentItem, ParsedDocument
from mdsite.core.render import make_parser, render_safe
from mdsite.core.stream import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_EXCERPT_LENGTH,
    METADATA_EXCERPT_LENGTH,
    stream_file,
)
from mdsite.core.utils.excerpt import resolve_excerpt
from mdsite.core.validate.source import check_size, validate_source


logger = structlog.get_logger(__name__)

MD_EXTENSIONS = {'.md', '.markdown'}
DEFAULT_STREAMING_THRESHOLD = 1_048_576


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.markdown files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def parse_text(
    text: str,
    limits: Limits = DEFAULT_LIMITS,
    *,
    trusted: bool = False,
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
    parser_config: str = 'gfm-like',
) -> ParsedDocument:
    """Validate, parse, walk, and render a whole document held in memory."""
    check_size(text, limits)
    front_matter, body = extract_front_matter(text, limits)
    validate_source(body, limits, trusted=trusted)

    md = make_parser(parser_config)
    tokens = md.parse(body)
    walked = walk_document(SyntaxTreeNode(tokens))
    logger.debug('document_parsed', elements=len(walked.elements), links=len(walked.links))

    return ParsedDocument(
        front_matter=front_matter,
        elements=walked.elements,
        links=walked.links,
        images=walked.images,
        excerpt=resolve_excerpt(front_matter, walked.first_paragraph, excerpt_length),
        html=render_safe(md, tokens),
    )


def read_text(path: Path) -> str:
    """Read a file as strict UTF-8, mapping decode failures to InvalidEncodingError."""
    raw = path.read_bytes()
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(f'{path.name} is not valid UTF-8 at byte {e.start}') from e


def parse_file(
    path: Path,
    limits: Limits = DEFAULT_LIMITS,
    *,
    extract_only: bool = False,
    streaming: bool = True,
    streaming_threshold: int = DEFAULT_STREAMING_THRESHOLD,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    trusted: bool = False,
    excerpt_length: int | None = None,
    parser_config: str = 'gfm-like',
) -> ContentItem:
    """Parse one file into a ContentItem, streaming large files or metadata-only requests.

    OS errors such as FileNotFoundError propagate unchanged.
    """
    path = Path(path)
    size = path.stat().st_size
    if excerpt_length is None:
        excerpt_length = METADATA_EXCERPT_LENGTH if extract_only else DEFAULT_EXCERPT_LENGTH

    try:
        if streaming and (size > streaming_threshold or extract_only):
            logger.debug('parse_streaming', path=str(path), size=size, extract_only=extract_only)
            return stream_file(
                path, limits,
                extract_only=extract_only, chunk_size=chunk_size, trusted=trusted,
                excerpt_length=excerpt_length, parser_config=parser_config,
            )
        doc = parse_text(
            read_text(path), limits,
            trusted=trusted, excerpt_length=excerpt_length, parser_config=parser_config,
        )
    except MarkdownError as e:
        logger.warning('document_rejected', path=str(path), error=type(e).__name__, limit=e.limit)
        raise

    return ContentItem.for_path(
        path, doc.front_matter,
        content=(doc.excerpt or '') if extract_only else doc.html,
        excerpt=doc.excerpt,
    )
