"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to every subcommand via
``@click.pass_obj``. Builds the Workspace lazily and routes results to
stdout/stderr with the right exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from docnum.config.logging import configure_logging
from docnum.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from docnum.config.settings import DocnumSettings
    from docnum.services.numbering import NumberingService
    from docnum.services.result import ServiceResult
    from docnum.services.workspace import Workspace


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The workspace is created on first use so ``--help`` and ``--version``
    never touch the database.
    """

    def __init__(self, settings: DocnumSettings) -> None:
        self.settings = settings
        self._workspace: Workspace | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def workspace(self) -> Workspace:
        if self._workspace is None:
            from docnum.services.workspace import Workspace

            self._workspace = Workspace(self.settings)
        return self._workspace

    @property
    def service(self) -> NumberingService:
        from docnum.services.numbering import NumberingService

        return NumberingService(self.workspace)

    @property
    def interactive(self) -> bool:
        return not self.settings.no_interact and not self.settings.json_output

    def close(self) -> None:
        if self._workspace is not None:
            self._workspace.close()
            self._workspace = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout. Warnings go to stderr so piped output stays clean.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
