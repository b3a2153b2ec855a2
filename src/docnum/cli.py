"""Root CLI group for docnum with global flags and command registration."""

from __future__ import annotations

import click

from docnum import __version__
from docnum.commands import register_commands
from docnum.commands._context import AppContext
from docnum.config.logging import bind_command
from docnum.config.settings import DocnumSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="docnum")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (bare numbers).")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--no-interact", is_flag=True, help="Non-interactive mode (no prompts).")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_interact: bool,
    config_path: str | None,
) -> None:
    """docnum — collision-safe document and entity numbering."""
    settings = DocnumSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_interact=no_interact,
    )
    app = AppContext(settings)
    bind_command(ctx.invoked_subcommand)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
