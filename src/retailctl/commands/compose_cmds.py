"""Commands: explicit compose actions (down, ps, logs)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from retailctl.commands._base import RetailCommand

if TYPE_CHECKING:
    from retailctl.commands._context import AppContext


@click.command(
    cls=RetailCommand,
    examples="""\
  retailctl down
  retailctl down --volumes""",
)
@click.option("--volumes", "-v", is_flag=True, help="Also remove named volumes (database data).")
@click.pass_obj
def down(app: AppContext, volumes: bool) -> None:
    """Stop and remove the containers of the local topology."""
    from retailctl.services.launch import LaunchService

    app.emit(LaunchService(app.stack).down(volumes=volumes))


@click.command(
    cls=RetailCommand,
    examples="""\
  retailctl ps
  retailctl --json ps""",
)
@click.pass_obj
def ps(app: AppContext) -> None:
    """List the containers of the local topology."""
    from retailctl.services.launch import LaunchService

    app.emit(LaunchService(app.stack).ps())


@click.command(
    cls=RetailCommand,
    examples="""\
  retailctl logs
  retailctl logs mysql --tail 50
  retailctl logs ui --follow""",
)
@click.argument("service", required=False)
@click.option("--follow", "-f", is_flag=True, help="Keep streaming new log lines.")
@click.option(
    "--tail", type=click.IntRange(min=0), default=None, help="Lines to show per container."
)
@click.pass_obj
def logs(app: AppContext, service: str | None, follow: bool, tail: int | None) -> None:
    """Show container logs for one service or the whole topology."""
    from retailctl.services.launch import LaunchService

    svc = LaunchService(app.stack)
    app.emit(
        svc.logs(service, follow=follow, tail=tail, stdout_to_stderr=app.settings.json_output)
    )
