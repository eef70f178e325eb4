"""Excerpt truncation"""

ELLIPSIS = "..."


def make_excerpt(text: str, max_length: int) -> str:
    """Truncate text to at most `max_length` characters.

    Cuts after the last sentence end inside the window when there is one,
    otherwise at the last word boundary with an ellipsis, otherwise hard.
    """
    text = text.strip()
    if len(text) <= max_length:
        return text

    window = text[:max_length]
    period = window.rfind(".")
    if period != -1:
        return window[:period + 1]

    if max_length <= len(ELLIPSIS):
        return window
    window = text[:max_length - len(ELLIPSIS)]
    space = window.rfind(" ")
    if space > 0:
        return window[:space].rstrip() + ELLIPSIS
    return window + ELLIPSIS


def resolve_excerpt(front_matter: dict | None, first_paragraph: str | None, max_length: int) -> str | None:
    """Front matter `excerpt` wins over the first paragraph; both are truncated."""
    explicit = (front_matter or {}).get("excerpt")
    if isinstance(explicit, str):
        return make_excerpt(explicit, max_length)
    if first_paragraph:
        return make_excerpt(first_paragraph, max_length)
    return None
