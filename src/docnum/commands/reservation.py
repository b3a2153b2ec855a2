"""Commands: reserve and release externally assigned numbers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docnum.commands._base import DocnumCommand

if TYPE_CHECKING:
    from docnum.commands._context import AppContext


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum reserve invoice INV00000042
  docnum reserve purchase_order PO-2024-0007 PO-2024-0008""",
)
@click.argument("number_type")
@click.argument("values", nargs=-1, required=True)
@click.pass_obj
def reserve(app: AppContext, number_type: str, values: tuple[str, ...]) -> None:
    """Mark VALUES as used so they are never issued for NUMBER_TYPE."""
    app.emit(app.service.reserve(number_type, values))


@click.command(
    cls=DocnumCommand,
    examples="""\
  docnum release invoice INV00000042""",
)
@click.argument("number_type")
@click.argument("values", nargs=-1, required=True)
@click.pass_obj
def release(app: AppContext, number_type: str, values: tuple[str, ...]) -> None:
    """Return VALUES to the pool. The counter is not rewound."""
    app.emit(app.service.release(number_type, values))
