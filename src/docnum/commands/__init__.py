"""Subcommand modules for docnum.

Provides register_commands() which uses deferred imports to keep
``docnum --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from docnum.commands.config_cmd import config
    from docnum.commands.used import used

    cli.add_command(config)
    cli.add_command(used)

    # --- Standalone commands ---
    from docnum.commands.admin import init_cmd, ping, reset, stats
    from docnum.commands.number import issue, next_cmd, preview
    from docnum.commands.reservation import release, reserve

    cli.add_command(next_cmd)
    cli.add_command(issue)
    cli.add_command(preview)
    cli.add_command(reserve)
    cli.add_command(release)
    cli.add_command(stats)
    cli.add_command(reset)
    cli.add_command(init_cmd)
    cli.add_command(ping)
