"""Command: verify the launcher preconditions without starting anything."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from retailctl.commands._base import RetailCommand

if TYPE_CHECKING:
    from retailctl.commands._context import AppContext


@click.command(
    cls=RetailCommand,
    examples="""\
  retailctl check
  retailctl --json check""",
)
@click.pass_obj
def check(app: AppContext) -> None:
    """Check that Docker is running and the compose tool is installed."""
    from retailctl.services.preflight import PreflightService

    app.emit(PreflightService(app.stack).check())
