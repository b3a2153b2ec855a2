"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers are
dispatched by ``result.op`` in :func:`render_result`; unknown ops fall
through to a generic key-value renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from docnum.output.console import create_console, get_output

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from docnum.services.result import ServiceResult

    Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode.

    Number-producing ops print bare numbers, one per line.
    """
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    numbers = result.issued_numbers
    if numbers or result.op in ("preview", "export_used"):
        return "\n".join(numbers)
    if result.op == "all_statistics":
        return "\n".join(item["number_type"] for item in result.data.get("items", []))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="docnum.ok")
    op = Text(f"  {result.op}", style="docnum.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="docnum.key")
    if key in ("number", "next_preview"):
        v = Text(str(value), style="docnum.number")
    elif key == "number_type":
        v = Text(str(value), style="docnum.type")
    elif key == "source":
        v = Text(str(value), style=f"docnum.source.{value}")
    elif isinstance(value, list):
        v = Text(", ".join(str(x) for x in value) or "-")
    else:
        v = Text("-" if value is None else str(value))
    console.print(Text.assemble(k, v))


def _config_fields(console: Console, config: dict[str, Any]) -> None:
    console.print(Text("  config:", style="docnum.key"))
    for key, value in config.items():
        if value is not None:
            console.print(Text.assemble(Text(f"    {key}: ", style="docnum.key"), str(value)))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="docnum.error")
    op = Text(f"  {result.op}", style="docnum.op")
    console.print(Text.assemble(label, op, ": ", msg))

    if verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


# ── Renderers ─────────────────────────────────────────────────────────


def _render_issued(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("category", "number_type", "number", "source"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_remote_check(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    d = result.data
    state = "available" if d.get("available") else "unavailable"
    if not d.get("configured"):
        state = "not configured"
    _field(console, "remote", state)
    _field(console, "mode", d.get("mode"))


def _render_preview(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    numbers = result.data.get("numbers", [])
    table = Table(title=f"Next {result.data.get('number_type', '')} numbers", title_justify="left")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Number", style="docnum.number")
    for idx, number in enumerate(numbers, start=1):
        table.add_row(str(idx), number)
    console.print(table)


def _render_reservation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("number_type", "reserved", "already_used", "released"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_statistics(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    for key in (
        "number_type",
        "last_number",
        "total_generated",
        "used_count",
        "next_preview",
        "last_reset_date",
    ):
        _field(console, key, d.get(key))
    if verbose and "config" in d:
        _config_fields(console, d["config"])


def _render_all_statistics(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    table = Table(title="Numbering statistics", title_justify="left")
    table.add_column("Type", style="docnum.type")
    table.add_column("Last", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Next", style="docnum.number")
    table.add_column("Reset")
    if verbose:
        table.add_column("Last reset", style="dim")
    for item in items:
        row = [
            item["number_type"],
            str(item["last_number"]),
            str(item["used_count"]),
            item["next_preview"] or "-",
            item["config"]["reset_frequency"],
        ]
        if verbose:
            row.append(item["last_reset_date"] or "-")
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{len(items)} types, mode: {result.data.get('mode', 'local')}")


def _render_config(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "number_type", d.get("number_type"))
    if "changed" in d:
        _field(console, "changed", d["changed"])
    if "kept_config" in d:
        _field(console, "kept_config", d["kept_config"])
    if "config" in d:
        _config_fields(console, d["config"])


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    used: dict[str, list[str]] = result.data.get("used", {})
    shown = {t: numbers for t, numbers in used.items() if numbers or verbose}
    if not shown:
        console.print(Text("No used numbers", style="dim"))
        return
    for number_type, numbers in shown.items():
        console.print(Text(f"{number_type} ({len(numbers)})", style="docnum.type"))
        for number in numbers:
            console.print(f"  {number}", markup=False)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, list) and not verbose and len(value) > 10:
            _field(console, key, f"{len(value)} items")
        else:
            _field(console, key, value)


_OP_RENDERERS: dict[str, Renderer] = {
    "next_number": _render_issued,
    "issue_number": _render_issued,
    "check_remote": _render_remote_check,
    "preview": _render_preview,
    "reserve": _render_reservation,
    "release": _render_reservation,
    "statistics": _render_statistics,
    "all_statistics": _render_all_statistics,
    "show_config": _render_config,
    "update_config": _render_config,
    "reset": _render_config,
    "export_used": _render_export,
}
