"""Command: start the local retail store topology in the foreground."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from retailctl.commands._base import RetailCommand

if TYPE_CHECKING:
    from retailctl.commands._context import AppContext


@click.command(
    cls=RetailCommand,
    examples="""\
  retailctl up
  DB_PASSWORD=s3cret retailctl up
  RETAILCTL_COMPOSE__COMMAND="docker compose" retailctl up""",
)
@click.pass_obj
def up(app: AppContext) -> None:
    """Check Docker, resolve the DB password, and start all services.

    Runs until interrupted. Containers are not removed afterwards; use
    ``retailctl down --volumes`` for a full teardown.
    """
    from retailctl.services.launch import LaunchService

    stack = app.stack
    app.status("Starting Retail Store Application Locally")
    app.status("=" * 45)

    def announce() -> None:
        notice = stack.credential.notice()
        if notice:
            app.status(notice, essential=True)
        app.status("Starting all services...")
        for endpoint in app.settings.endpoints:
            app.status(f"   - {endpoint.name}: {endpoint.address}")
        app.status("")

    result = LaunchService(stack).up(
        on_ready=announce, stdout_to_stderr=app.settings.json_output
    )
    if result.ok:
        app.status("")
        app.status("Application stopped.")
        app.status(f"To clean up completely, run: {result.data['teardown']}", essential=True)
    app.emit(result)
