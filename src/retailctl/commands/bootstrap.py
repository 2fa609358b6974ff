"""Command: initialize the MySQL databases and principals."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from retailctl.commands._base import RetailCommand

if TYPE_CHECKING:
    from retailctl.commands._context import AppContext


@click.command(
    cls=RetailCommand,
    examples="""\
  retailctl bootstrap
  retailctl bootstrap --verify
  retailctl bootstrap --step grant_catalog --step flush_privileges
  RETAILCTL_DATABASE__PORT=3307 retailctl --json bootstrap""",
)
@click.option(
    "--step",
    "steps",
    multiple=True,
    help="Run only this step (repeatable). Steps always run in canonical order.",
)
@click.option("--verify", "verify_only", is_flag=True, help="Report step state without changes.")
@click.pass_obj
def bootstrap(app: AppContext, steps: tuple[str, ...], verify_only: bool) -> None:
    """Create the orders database and user and grant both principals.

    Safe to re-run: every step is conditional or re-asserts the same grant.
    """
    from retailctl.services.bootstrap import BootstrapService

    if verify_only and steps:
        raise click.UsageError("--verify cannot be combined with --step.")

    stack = app.stack
    svc = BootstrapService(stack)
    if verify_only:
        app.emit(svc.verify())
        return

    notice = stack.credential.notice()
    if notice:
        app.status(notice, essential=True)
    app.emit(svc.run(only=list(steps) or None))
