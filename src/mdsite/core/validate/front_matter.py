"""Recursive whitelist validation of decoded YAML front matter"""

from datetime import date, datetime
from typing import Any

from mdsite.core.errors import (
    DangerousContentError,
    ExcessiveNestingError,
    FrontMatterValueTooLargeError,
    InvalidFrontMatterError,
)
from mdsite.core.limits import DEFAULT_LIMITS, Limits


DANGEROUS_FRONT_MATTER_PATTERNS = ("<script", "javascript:", "vbscript:", "file://", "ftp://")
_SAFE_SCALARS = (bool, int, float, date, datetime)


def _check_key(key: Any, limits: Limits) -> None:
    if not isinstance(key, str):
        raise InvalidFrontMatterError(
            f"front matter keys must be strings, got {type(key).__name__}",
            limit="string keys",
        )
    if len(key) > limits.max_front_matter_key_length:
        raise FrontMatterValueTooLargeError(
            f"front matter key exceeds {limits.max_front_matter_key_length} characters",
            limit=f"max_front_matter_key_length={limits.max_front_matter_key_length}",
        )


def _check_string(value: str, limits: Limits) -> None:
    if len(value) > limits.max_front_matter_string_length:
        raise FrontMatterValueTooLargeError(
            f"front matter string value exceeds {limits.max_front_matter_string_length} characters",
            limit=f"max_front_matter_string_length={limits.max_front_matter_string_length}",
        )
    lowered = value.lower()
    for pattern in DANGEROUS_FRONT_MATTER_PATTERNS:
        if pattern in lowered:
            raise DangerousContentError(f"dangerous pattern in front matter: {pattern}", limit=pattern)


def _validate_value(value: Any, depth: int, limits: Limits, seen: dict[int, int]) -> None:
    """Validate one value at `depth` (0 for top-level values)."""
    if depth >= limits.max_front_matter_depth:
        raise ExcessiveNestingError(
            f"front matter nesting exceeds maximum depth of {limits.max_front_matter_depth}",
            limit=f"max_front_matter_depth={limits.max_front_matter_depth}",
        )

    if value is None or isinstance(value, _SAFE_SCALARS):
        return
    if isinstance(value, str):
        _check_string(value, limits)
        return
    if not isinstance(value, (list, dict)):
        raise InvalidFrontMatterError(
            f"unsupported value type in front matter: {type(value).__name__}",
            limit="supported value types",
        )

    # YAML aliases share one object; a container passed at this depth or shallower needs no rewalk
    if seen.get(id(value), depth + 1) <= depth:
        return

    if isinstance(value, list):
        if len(value) > limits.max_front_matter_array_length:
            raise FrontMatterValueTooLargeError(
                f"front matter array exceeds {limits.max_front_matter_array_length} items",
                limit=f"max_front_matter_array_length={limits.max_front_matter_array_length}",
            )
        for item in value:
            _validate_value(item, depth + 1, limits, seen)
    else:
        if len(value) > limits.max_front_matter_object_keys:
            raise FrontMatterValueTooLargeError(
                f"front matter mapping exceeds {limits.max_front_matter_object_keys} keys",
                limit=f"max_front_matter_object_keys={limits.max_front_matter_object_keys}",
            )
        for key, item in value.items():
            _check_key(key, limits)
            _validate_value(item, depth + 1, limits, seen)

    seen[id(value)] = depth


def validate_front_matter(front_matter: dict[str, Any], limits: Limits = DEFAULT_LIMITS) -> None:
    """Validate every key and value of a decoded front matter mapping; raise on first violation."""
    seen: dict[int, int] = {}
    for key, value in front_matter.items():
        _check_key(key, limits)
        _validate_value(value, 0, limits, seen)
