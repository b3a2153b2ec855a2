"""Click base classes that carry usage examples.

``examples`` text is kept out of ``--help`` and printed by an eager
``--examples`` flag instead, so it works even when required arguments
are missing (``docnum reserve --examples``).
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(textwrap.indent(textwrap.dedent(examples).strip("\n"), "  "))
    ctx.exit(0)


class _ExamplesMixin:
    """Adds the ``--examples`` option and a pointer to it in the help epilog."""

    examples: str | None
    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_show_examples,
                    help="Show usage examples.",
                )
            )

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        super().format_epilog(ctx, formatter)  # type: ignore[misc]
        if self.examples:
            formatter.write_paragraph()
            formatter.write_text(f"Run '{ctx.command_path} --examples' for usage examples.")


class DocnumCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class DocnumGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands are :class:`DocnumCommand` by default."""

    command_class = DocnumCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)
