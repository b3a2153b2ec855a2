"""Commands: statistics, reset, and workspace initialization."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docnum.commands._base import DocnumCommand

if TYPE_CHECKING:
    from docnum.commands._context import AppContext


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum stats
  docnum stats invoice
  docnum -v stats""",
)
@click.argument("number_type", required=False)
@click.pass_obj
def stats(app: AppContext, number_type: str | None) -> None:
    """Show counters, usage, and the next number for one or all types."""
    if number_type is None:
        app.emit(app.service.all_statistics())
    else:
        app.emit(app.service.statistics(number_type))


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum reset movement
  docnum reset invoice --keep-config --yes
  docnum reset --all --yes""",
)
@click.argument("number_type", required=False)
@click.option("--all", "reset_all", is_flag=True, help="Reset every known type.")
@click.option("--keep-config", is_flag=True, help="Keep the stored configuration.")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def reset(
    app: AppContext,
    number_type: str | None,
    reset_all: bool,
    keep_config: bool,
    yes: bool,
) -> None:
    """Clear the counter and used numbers of NUMBER_TYPE (or --all)."""
    if reset_all == (number_type is not None):
        raise click.UsageError("Give either NUMBER_TYPE or --all.")

    target = "ALL number types" if reset_all else number_type
    if not yes:
        if not app.interactive:
            click.echo("Refusing to reset without --yes in non-interactive mode.", err=True)
            raise SystemExit(1)
        click.confirm(f"Reset {target}? Issued numbers may be reissued", abort=True)

    if reset_all:
        app.emit(app.service.reset_all(keep_config=keep_config))
    else:
        assert number_type is not None
        app.emit(app.service.reset(number_type, keep_config=keep_config))


@click.command(
    "init",
    cls=DocnumCommand,
    examples="""\
  docnum init
  docnum init --no-config""",
)
@click.option(
    "--config/--no-config",
    "write_config",
    default=True,
    help="Write a commented docnum.toml if none exists.",
)
@click.pass_obj
def init_cmd(app: AppContext, write_config: bool) -> None:
    """Create the numbering database and seed every built-in type."""
    app.emit(app.service.init(write_config=write_config))


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum ping
  docnum --json ping""",
)
@click.pass_obj
def ping(app: AppContext) -> None:
    """Probe the remote numbering authority.

    The probe asks for a real number under the configured probe token.
    """
    app.emit(app.service.check_remote())
