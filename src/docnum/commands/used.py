"""Command group: move used-number sets in and out of the workspace."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click

from docnum.commands._base import DocnumGroup

if TYPE_CHECKING:
    from docnum.commands._context import AppContext

_USED_EXAMPLES = """\
  docnum used export invoice
  docnum --json used export > used.json
  docnum used import invoice legacy-invoices.txt
  cat numbers.json | docnum used import purchase_order -"""


@click.group(cls=DocnumGroup, examples=_USED_EXAMPLES)
def used() -> None:
    """Export or import the set of numbers already in use."""


@used.command("export")
@click.argument("number_type", required=False)
@click.pass_obj
def export_used(app: AppContext, number_type: str | None) -> None:
    """List used numbers of NUMBER_TYPE, or of every known type."""
    app.emit(app.service.export_used(number_type))


def read_values(stream: IO[str]) -> list[str]:
    """Read numbers from a JSON array or from one-per-line text."""
    raw = stream.read()
    if raw.lstrip().startswith("["):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Invalid JSON: {exc}"
            raise click.BadParameter(msg, param_hint="FILE") from exc
        return [str(v) for v in data]
    return [line.strip() for line in raw.splitlines() if line.strip()]


@used.command("import")
@click.argument("number_type")
@click.argument("source", metavar="FILE", type=click.File("r", encoding="utf-8"))
@click.pass_obj
def import_used(app: AppContext, number_type: str, source: IO[str]) -> None:
    """Mark every number in FILE as used for NUMBER_TYPE ("-" reads stdin)."""
    app.emit(app.service.import_used(number_type, read_values(source)))
