"""markdown-it parser construction and sanitized HTML rendering"""

from typing import Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdsite.core.sanitize import sanitize_html


def make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def render_tokens(md: MarkdownIt, tokens: list[Token], env: Optional[dict] = None) -> str:
    """Render tokens to unsanitized HTML; markdown-it escapes text and attribute values."""
    return md.renderer.render(tokens, md.options, env if env is not None else {})


def render_safe(md: MarkdownIt, tokens: list[Token], env: Optional[dict] = None) -> str:
    return sanitize_html(render_tokens(md, tokens, env))


def render_markdown(text: str, preset: str = "gfm-like") -> str:
    """Parse and render a markdown fragment to sanitized HTML."""
    md = make_parser(preset)
    return render_safe(md, md.parse(text))
