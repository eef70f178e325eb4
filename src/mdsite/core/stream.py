"""Chunked ingestion of large markdown files and metadata-only extraction"""

import codecs
import re
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple, Optional

import structlog
from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdsite.core.errors import ContentTooLargeError, InvalidEncodingError
from mdsite.core.extract.text import plain_text
from mdsite.core.extract.walker import WalkResult, walk_document
from mdsite.core.frontmatter import decode_front_matter
from mdsite.core.limits import DEFAULT_LIMITS, Limits
from mdsite.core.models import ContentItem
from mdsite.core.render import make_parser, render_safe
from mdsite.core.utils.excerpt import make_excerpt, resolve_excerpt
from mdsite.core.validate.source import (
    check_dangerous_patterns,
    check_nesting,
    check_repetition,
)


logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 65_536
DEFAULT_EXCERPT_LENGTH = 500
METADATA_EXCERPT_LENGTH = 200

UTF8_BOM = codecs.BOM_UTF8
OPENING_DELIMITERS = (b"---\n", b"---\r\n")
TERMINATOR_RE = re.compile(rb"\r?\n---\r?(?:\n|\Z)")
FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})")
LIST_ITEM_RE = re.compile(r"^(?:[-*+]|\d{1,9}[.)])(?:[ \t]|$)")

# html blocks that run across blank lines until their end marker (CommonMark types 1-5)
HTML_BLOCK_RULES = (
    (re.compile(r"^ {0,3}<(?:script|pre|style|textarea)(?=\s|>|$)", re.IGNORECASE),
     re.compile(r"</(?:script|pre|style|textarea)>", re.IGNORECASE)),
    (re.compile(r"^ {0,3}<!--"), re.compile(r"-->")),
    (re.compile(r"^ {0,3}<\?"), re.compile(r"\?>")),
    (re.compile(r"^ {0,3}<![A-Z]"), re.compile(r">")),
    (re.compile(r"^ {0,3}<!\[CDATA\["), re.compile(r"\]\]>")),
)


def _html_block_end(line: str) -> Optional[re.Pattern]:
    """End marker of the html block this line opens, or None if it opens none or closes it itself."""
    for opener, closer in HTML_BLOCK_RULES:
        if opener.match(line):
            return None if closer.search(line) else closer
    return None


class FrontMatterHead(NamedTuple):
    front_matter: Optional[dict]
    body_offset:  int


def _decode(data: bytes, decoder, final: bool) -> str:
    try:
        return decoder.decode(data, final=final)
    except UnicodeDecodeError as e:
        raise InvalidEncodingError(f"malformed UTF-8 sequence ({e.reason})") from e


def read_front_matter(handle: BinaryIO, limits: Limits = DEFAULT_LIMITS, file_size: int | None = None) -> FrontMatterHead:
    """Read front matter from a bounded head of the file.

    A block whose closing delimiter does not appear within the head is not
    treated as front matter; the body then starts at offset 0.
    """
    handle.seek(0)
    head = handle.read(limits.max_front_matter_size)
    start = len(UTF8_BOM) if head.startswith(UTF8_BOM) else 0
    opener = next((d for d in OPENING_DELIMITERS if head.startswith(d, start)), None)
    if opener is None:
        return FrontMatterHead(None, 0)

    open_end = start + len(opener)
    whole_file = file_size is not None and file_size <= len(head)
    for match in TERMINATOR_RE.finditer(head, open_end - 1):
        if match.end() == len(head) and not match.group().endswith(b"\n") and not whole_file:
            # "---" at the end of a truncated head may continue past it
            continue
        payload = head[open_end:max(open_end, match.start())]
        front_matter = decode_front_matter(_decode(payload, codecs.getincrementaldecoder("utf-8")(), True), limits)
        return FrontMatterHead(front_matter, match.end())

    logger.warning("front_matter_unterminated", limit=f"max_front_matter_size={limits.max_front_matter_size}")
    return FrontMatterHead(None, 0)


def extract_metadata(
    handle: BinaryIO,
    head: FrontMatterHead,
    limits: Limits = DEFAULT_LIMITS,
    *,
    excerpt_length: int = METADATA_EXCERPT_LENGTH,
    trusted: bool = False,
    parser_config: str = "gfm-like",
) -> Optional[str]:
    """Excerpt from front matter, or from a window of about twice the excerpt length after it."""
    front_matter = head.front_matter or {}
    if isinstance(front_matter.get("excerpt"), str):
        return make_excerpt(front_matter["excerpt"], excerpt_length)

    window_chars = excerpt_length * 2
    handle.seek(head.body_offset)
    raw = handle.read(window_chars * 4)
    at_eof = not handle.read(1)
    window = _decode(raw, codecs.getincrementaldecoder("utf-8")(), at_eof)[:window_chars]

    check_nesting(window, limits)
    if not trusted:
        check_dangerous_patterns(window)
    check_repetition(window, limits)

    root = SyntaxTreeNode(make_parser(parser_config).parse(window))
    candidate = walk_document(root).first_paragraph or plain_text(root)
    return make_excerpt(candidate, excerpt_length) if candidate else None


def _flush_point(buffer: str) -> Optional[int]:
    """Offset of the last top-level block start after a blank line, outside fenced code and html blocks."""
    fence = None
    html_end = None
    blank_before = False
    cut = None
    pos = 0
    for line in buffer.split("\n")[:-1]:
        if html_end is not None:
            if html_end.search(line):
                html_end = None
            blank_before = False
            pos += len(line) + 1
            continue

        if fence is None and blank_before and line[:1] not in ("", " ", "\t", "\r") \
                and not LIST_ITEM_RE.match(line):
            cut = pos
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group("fence")
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence) and not line[fence_match.end():].strip():
                fence = None
        elif fence is None:
            html_end = _html_block_end(line)
        blank_before = fence is None and html_end is None and not line.strip()
        pos += len(line) + 1
    return cut


def iter_segments(
    handle: BinaryIO,
    offset: int,
    limits: Limits = DEFAULT_LIMITS,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[str]:
    """Yield decoded body text in block-aligned segments, reading `chunk_size` bytes at a time."""
    handle.seek(offset)
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    total = 0
    while chunk := handle.read(chunk_size):
        total += len(chunk)
        if total > limits.max_markdown_file_size:
            raise ContentTooLargeError(
                f"body exceeds maximum of {limits.max_markdown_file_size} bytes",
                limit=f"max_markdown_file_size={limits.max_markdown_file_size}",
            )
        buffer += _decode(chunk, decoder, False)

        cut = _flush_point(buffer)
        if cut is None and len(buffer) > 2 * chunk_size:
            cut = buffer.rfind("\n") + 1 or len(buffer)
            logger.debug("stream_forced_flush", buffered=len(buffer))
        if cut:
            yield buffer[:cut]
            buffer = buffer[cut:]

    buffer += _decode(b"", decoder, True)
    if buffer:
        yield buffer


def iter_html(
    handle: BinaryIO,
    offset: int,
    limits: Limits = DEFAULT_LIMITS,
    *,
    md: MarkdownIt | None = None,
    result: WalkResult | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    trusted: bool = False,
) -> Iterator[str]:
    """Validate, parse, and render each segment, yielding sanitized HTML.

    When `result` is given the walked elements of every segment accumulate in it.
    """
    md = md or make_parser()
    # one env for the whole body so reference definitions resolve in later segments
    env: dict = {}
    tail = ""
    for segment in iter_segments(handle, offset, limits, chunk_size=chunk_size):
        # carry a tail so patterns and runs split across segments are still seen
        window = tail + segment
        check_nesting(segment, limits)
        if not trusted:
            check_dangerous_patterns(window)
        check_repetition(window, limits)
        tail = window[-limits.max_repeated_chars:]

        tokens = md.parse(segment, env)
        if result is not None:
            walk_document(SyntaxTreeNode(tokens), result)
        yield render_safe(md, tokens, env)


def stream_file(
    path: Path,
    limits: Limits = DEFAULT_LIMITS,
    *,
    extract_only: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    trusted: bool = False,
    excerpt_length: int | None = None,
    parser_config: str = "gfm-like",
) -> ContentItem:
    """Ingest a file without loading it whole; `extract_only` stops after the excerpt."""
    path = Path(path)
    file_size = path.stat().st_size
    with path.open("rb") as handle:
        head = read_front_matter(handle, limits, file_size)

        if extract_only:
            excerpt = extract_metadata(
                handle, head, limits,
                excerpt_length=excerpt_length or METADATA_EXCERPT_LENGTH,
                trusted=trusted, parser_config=parser_config,
            )
            return ContentItem.for_path(path, head.front_matter, content=excerpt or "", excerpt=excerpt, streamed=True)

        walked = WalkResult()
        html = "".join(iter_html(
            handle, head.body_offset, limits,
            md=make_parser(parser_config), result=walked, chunk_size=chunk_size, trusted=trusted,
        ))

    logger.debug("document_streamed", path=str(path), size=file_size, elements=len(walked.elements))
    excerpt = resolve_excerpt(head.front_matter, walked.first_paragraph, excerpt_length or DEFAULT_EXCERPT_LENGTH)
    return ContentItem.for_path(path, head.front_matter, content=html, excerpt=excerpt, streamed=True)
