"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated, Optional

import typer

from mdsite.cli.commands import excerpt_cmd, inspect_cmd, render_cmd, sanitize_cmd


app = typer.Typer(name="mdsite", no_args_is_help=True, help="Hardened markdown rendering for static sites")


@app.callback()
def main(
    ctx: typer.Context,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")] = None,
    ):
    """Hardened markdown rendering for static sites."""
    ctx.obj = {"log_level": log_level.upper() if log_level else None}


app.command(name="render")(render_cmd)
app.command(name="inspect")(inspect_cmd)
app.command(name="excerpt")(excerpt_cmd)
app.command(name="sanitize")(sanitize_cmd)
