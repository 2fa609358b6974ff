"""Subcommand modules for retailctl.

Provides register_commands() which uses deferred imports to keep
``retailctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every subcommand on the root CLI group."""
    # --- Launcher ---
    from retailctl.commands.check import check
    from retailctl.commands.compose_cmds import down, logs, ps
    from retailctl.commands.up import up

    cli.add_command(up)
    cli.add_command(check)
    cli.add_command(down)
    cli.add_command(ps)
    cli.add_command(logs)

    # --- Database bootstrap ---
    from retailctl.commands.bootstrap import bootstrap
    from retailctl.commands.init_script import init_script

    cli.add_command(bootstrap)
    cli.add_command(init_script)
