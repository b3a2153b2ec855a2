"""Commands: issue and preview numbers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docnum.commands._base import DocnumCommand

if TYPE_CHECKING:
    from docnum.commands._context import AppContext


@click.command(
    "next",
    cls=DocnumCommand,
    examples="""\
  docnum next invoice
  docnum -q next batch
  docnum --json next purchase_order""",
)
@click.argument("number_type")
@click.pass_obj
def next_cmd(app: AppContext, number_type: str) -> None:
    """Issue the next local number for NUMBER_TYPE."""
    app.emit(app.service.next_number(number_type))


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum issue purchase-order
  docnum issue quote
  docnum -q issue goods-receiving-voucher""",
)
@click.argument("category")
@click.pass_obj
def issue(app: AppContext, category: str) -> None:
    """Issue a number for a document CATEGORY.

    Asks the remote authority first when one is configured, and falls back
    to local generation for the rest of the run if it fails.
    """
    app.emit(app.service.issue_number(category))


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum preview invoice
  docnum preview movement -n 10""",
)
@click.argument("number_type")
@click.option(
    "-n",
    "--count",
    type=click.IntRange(min=1, max=1000),
    default=5,
    show_default=True,
    help="How many upcoming numbers to show.",
)
@click.pass_obj
def preview(app: AppContext, number_type: str, count: int) -> None:
    """Show the next numbers for NUMBER_TYPE without issuing them."""
    app.emit(app.service.preview(number_type, count))
