"""Pre-parse gates on raw markdown: size, nesting, dangerous patterns, repetition"""

import re

from mdsite.core.errors import (
    ContentTooLargeError,
    DangerousContentError,
    ExcessiveNestingError,
    ExcessiveRepetitionError,
)
from mdsite.core.limits import DEFAULT_LIMITS, Limits


DANGEROUS_SOURCE_PATTERNS = (
    "<script", "</script>", "javascript:", "vbscript:",
    "onload=", "onerror=", "onclick=", "onmouseover=",
    "onfocus=", "onblur=", "onchange=", "onsubmit=",
)
REPEATABLE_CHARS = ("-", "=", "*", "#", "`", "~")

_QUOTE_PREFIX_RE = re.compile(r"[> ]*")


def check_size(body: str, limits: Limits = DEFAULT_LIMITS) -> None:
    size = len(body.encode("utf-8"))
    if size > limits.max_markdown_file_size:
        raise ContentTooLargeError(
            f"{size} bytes exceeds maximum of {limits.max_markdown_file_size}",
            limit=f"max_markdown_file_size={limits.max_markdown_file_size}",
        )


def line_nesting(line: str) -> int:
    """Estimate the structural depth of one source line.

    Heading marker runs and blockquote markers count one level each; otherwise
    every two columns of leading indentation count as one level.
    """
    stripped = line.lstrip()
    if stripped.startswith("#"):
        return len(stripped) - len(stripped.lstrip("#"))
    if stripped.startswith(">"):
        return _QUOTE_PREFIX_RE.match(stripped).group().count(">")
    if line[:1] in (" ", "\t"):
        return (len(line) - len(line.lstrip(" \t"))) // 2
    return 0


def check_nesting(body: str, limits: Limits = DEFAULT_LIMITS) -> None:
    deepest = 0
    for number, line in enumerate(body.splitlines(), start=1):
        deepest = max(deepest, line_nesting(line))
        if deepest > limits.max_markdown_nesting:
            raise ExcessiveNestingError(
                f"line {number} nests deeper than {limits.max_markdown_nesting} levels",
                limit=f"max_markdown_nesting={limits.max_markdown_nesting}",
            )


def check_dangerous_patterns(body: str) -> None:
    lowered = body.lower()
    for pattern in DANGEROUS_SOURCE_PATTERNS:
        if pattern in lowered:
            raise DangerousContentError(f"pattern {pattern!r} is not allowed in markdown", limit=pattern)


def check_repetition(body: str, limits: Limits = DEFAULT_LIMITS) -> None:
    for char in REPEATABLE_CHARS:
        if char * (limits.max_repeated_chars + 1) in body:
            raise ExcessiveRepetitionError(
                f"run of {char!r} longer than {limits.max_repeated_chars}",
                limit=f"max_repeated_chars={limits.max_repeated_chars}",
            )


def validate_source(body: str, limits: Limits = DEFAULT_LIMITS, trusted: bool = False, check_length: bool = True) -> None:
    """Run every pre-parse gate in order; the dangerous-pattern gate is skipped for trusted content.

    `check_length=False` is used on partial windows whose total size is enforced elsewhere.
    """
    if check_length:
        check_size(body, limits)
    check_nesting(body, limits)
    if not trusted:
        check_dangerous_patterns(body)
    check_repetition(body, limits)
