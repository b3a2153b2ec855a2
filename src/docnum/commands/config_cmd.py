"""Command group: inspect and change per-type numbering configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docnum.commands._base import DocnumGroup
from docnum.domain.types import SUPPORTED_DATE_FORMATS, NumberFormat, ResetFrequency

if TYPE_CHECKING:
    from docnum.commands._context import AppContext

_CONFIG_EXAMPLES = """\
  docnum config show invoice
  docnum config set invoice --prefix INV- --pad 6
  docnum config set journal --format custom --pattern "{prefix}-{date}-{sequence}" \\
      --date-format YYYYMM --reset-frequency monthly
  docnum config set journal --format sequential --clear-pattern --clear-date-format"""


@click.group(cls=DocnumGroup, examples=_CONFIG_EXAMPLES)
def config() -> None:
    """Show or change how a number type is formatted."""


@config.command("show")
@click.argument("number_type")
@click.pass_obj
def show(app: AppContext, number_type: str) -> None:
    """Print the configuration of NUMBER_TYPE."""
    app.emit(app.service.show_config(number_type))


@config.command("set")
@click.argument("number_type")
@click.option("--prefix", default=None, help="Literal text before the number.")
@click.option("--start", "starting_number", type=click.IntRange(min=1), default=None,
              help="First sequence integer after init or reset.")
@click.option("--pad", "pad_length", type=click.IntRange(min=0), default=None,
              help="Minimum digits of the sequence part.")
@click.option("--format", "number_format",
              type=click.Choice([f.value for f in NumberFormat]), default=None,
              help="Rendering strategy.")
@click.option("--date-format", type=click.Choice(SUPPORTED_DATE_FORMATS), default=None,
              help="Date token for date_based and custom formats.")
@click.option("--pattern", "custom_pattern", default=None,
              help="Custom template using {prefix}, {date}, {sequence}.")
@click.option("--reset-frequency", type=click.Choice([r.value for r in ResetFrequency]),
              default=None, help="When the counter rewinds.")
@click.option("--clear-pattern", is_flag=True, help="Unset the custom pattern.")
@click.option("--clear-date-format", is_flag=True, help="Unset the date format.")
@click.pass_obj
def set_config(
    app: AppContext,
    number_type: str,
    prefix: str | None,
    starting_number: int | None,
    pad_length: int | None,
    number_format: str | None,
    date_format: str | None,
    custom_pattern: str | None,
    reset_frequency: str | None,
    clear_pattern: bool,
    clear_date_format: bool,
) -> None:
    """Update fields of the NUMBER_TYPE configuration."""
    clear = [
        field
        for field, flag in (("custom_pattern", clear_pattern), ("date_format", clear_date_format))
        if flag
    ]
    app.emit(
        app.service.update_config(
            number_type,
            clear=clear,
            prefix=prefix,
            starting_number=starting_number,
            pad_length=pad_length,
            format=number_format,
            date_format=date_format,
            custom_pattern=custom_pattern,
            reset_frequency=reset_frequency,
        )
    )
