"""CLI command implementations"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from mdsite.config import Settings, load_config
from mdsite.core.errors import MarkdownError
from mdsite.core.parse import parse_file, parse_text, read_text
from mdsite.core.sanitize import sanitize_html
from mdsite.util.log import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(ctx: typer.Context, overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging from it."""
    overrides = dict(overrides or {})
    if ctx.obj:
        overrides.update(ctx.obj)
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(settings.log_level)
    return settings


def render_cmd(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Markdown file to render")],
    out: Annotated[Optional[str], typer.Option("--out", help="Write HTML to this file instead of stdout")] = None,
    trusted: Annotated[bool, typer.Option("--trusted", help="Skip the dangerous-pattern source gate")] = False,
    ):
    """Render a markdown file to sanitized HTML."""
    settings = _settings(ctx, overrides={"trusted_content": trusted or None})
    try:
        item = parse_file(
            Path(path), settings.limits,
            streaming=settings.enable_streaming,
            streaming_threshold=settings.streaming_threshold,
            chunk_size=settings.chunk_size,
            trusted=settings.trusted_content,
            excerpt_length=settings.excerpt_length,
            parser_config=settings.parser_config,
        )
    except (MarkdownError, OSError) as e:
        _fail(str(e))

    if out:
        Path(out).write_text(item.content, encoding="utf-8")
        typer.echo(f"  {path} -> {out}")
    else:
        typer.echo(item.content, nl=False)


def inspect_cmd(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Markdown file to inspect")],
    ):
    """Print the parsed document model (front matter, elements, links, images, excerpt) as JSON."""
    settings = _settings(ctx)
    try:
        doc = parse_text(
            read_text(Path(path)), settings.limits,
            trusted=settings.trusted_content,
            excerpt_length=settings.excerpt_length,
            parser_config=settings.parser_config,
        )
    except (MarkdownError, OSError) as e:
        _fail(str(e))
    typer.echo(doc.model_dump_json(indent=2, exclude={"html"}))


def excerpt_cmd(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Markdown file to summarize")],
    length: Annotated[Optional[int], typer.Option("--length", min=1, help="Maximum excerpt length")] = None,
    ):
    """Extract front matter and excerpt without rendering the whole file."""
    settings = _settings(ctx, overrides={"metadata_excerpt_length": length})
    try:
        item = parse_file(
            Path(path), settings.limits,
            extract_only=True,
            streaming=settings.enable_streaming,
            trusted=settings.trusted_content,
            excerpt_length=settings.metadata_excerpt_length,
            parser_config=settings.parser_config,
        )
    except (MarkdownError, OSError) as e:
        _fail(str(e))
    typer.echo(item.model_dump_json(indent=2, include={"slug", "type", "front_matter", "excerpt"}))


def sanitize_cmd(
    ctx: typer.Context,
    path: Annotated[Optional[str], typer.Argument(help="HTML file to sanitize; reads stdin when omitted")] = None,
    ):
    """Sanitize an HTML fragment against the tag, attribute, and URL whitelist."""
    _settings(ctx)
    try:
        markup = Path(path).read_text(encoding="utf-8") if path else typer.get_text_stream("stdin").read()
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}", e)
    typer.echo(sanitize_html(markup), nl=False)
