"""YAML front matter splitting and decoding"""

from typing import Any, NamedTuple, Optional

import structlog
import yaml

from mdsite.core.errors import (
    ExcessiveNestingError,
    FrontMatterTooLargeError,
    InvalidFrontMatterError,
)
from mdsite.core.limits import DEFAULT_LIMITS, Limits
from mdsite.core.validate.front_matter import validate_front_matter


logger = structlog.get_logger(__name__)

BOM = "\ufeff"
DELIMITERS = ("---", "---\r")


class FrontMatterSplit(NamedTuple):
    payload: Optional[str]   # None when the document has no front matter block
    body:    str


def split_front_matter(text: str, limits: Limits = DEFAULT_LIMITS) -> FrontMatterSplit:
    """Split `text` into (YAML payload, markdown body).

    The block must open on the very first line. The closing delimiter is searched
    for within `max_front_matter_size` bytes of payload; a block that never
    closes is an error rather than swallowing the rest of the document.
    """
    start = 1 if text.startswith(BOM) else 0
    first_nl = text.find("\n", start)
    first_line = text[start:] if first_nl == -1 else text[start:first_nl]
    if first_line not in DELIMITERS:
        return FrontMatterSplit(None, text)

    payload_start = first_nl + 1 if first_nl != -1 else len(text)
    pos = payload_start
    scanned = 0
    while first_nl != -1 and pos <= len(text):
        nl = text.find("\n", pos)
        line_end = len(text) if nl == -1 else nl
        line = text[pos:line_end]
        if line in DELIMITERS:
            body = "" if nl == -1 else text[nl + 1:]
            return FrontMatterSplit(text[payload_start:pos], body)

        scanned += len(line.encode("utf-8")) + 1
        if scanned > limits.max_front_matter_size or nl == -1:
            break
        pos = nl + 1

    raise InvalidFrontMatterError(
        f"closing delimiter not found within {limits.max_front_matter_size} bytes",
        limit=f"max_front_matter_size={limits.max_front_matter_size}",
    )


def decode_front_matter(payload: str, limits: Limits = DEFAULT_LIMITS) -> dict[str, Any]:
    """Decode a YAML payload with `yaml.safe_load` and validate the result."""
    size = len(payload.encode("utf-8"))
    if size > limits.max_front_matter_size:
        raise FrontMatterTooLargeError(
            f"{size} bytes exceeds maximum of {limits.max_front_matter_size}",
            limit=f"max_front_matter_size={limits.max_front_matter_size}",
        )

    try:
        data = yaml.safe_load(payload)
    except RecursionError as e:
        raise ExcessiveNestingError(
            "front matter YAML is nested too deeply to decode",
            limit=f"max_front_matter_depth={limits.max_front_matter_depth}",
        ) from e
    except yaml.YAMLError as e:
        # report the problem and position only, the YAML message quotes the source
        problem = getattr(e, "problem", None) or type(e).__name__
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}" if mark is not None else ""
        raise InvalidFrontMatterError(f"YAML could not be decoded: {problem}{where}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidFrontMatterError(f"expected a mapping, got {type(data).__name__}")

    validate_front_matter(data, limits)
    return data


def extract_front_matter(text: str, limits: Limits = DEFAULT_LIMITS) -> tuple[Optional[dict[str, Any]], str]:
    """Return (front_matter or None, body) for a whole document."""
    payload, body = split_front_matter(text, limits)
    if payload is None:
        return None, body
    front_matter = decode_front_matter(payload, limits)
    logger.debug("front_matter_extracted", keys=len(front_matter))
    return front_matter, body
