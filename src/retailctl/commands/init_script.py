"""Command: write the SQL init script mounted into the MySQL container."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from retailctl.commands._base import RetailCommand

if TYPE_CHECKING:
    from retailctl.commands._context import AppContext


@click.command(
    "init-script",
    cls=RetailCommand,
    examples="""\
  retailctl init-script
  retailctl init-script --output /tmp/01-init-databases.sql
  retailctl init-script --stdout
  DB_PASSWORD=s3cret retailctl init-script --stdout --resolve | mysql -uroot -p""",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Target file (default: <init_scripts_dir>/<init_script_name>).",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the script instead of writing it.")
@click.option(
    "--resolve",
    is_flag=True,
    help="Inline the effective DB password instead of the ${DB_PASSWORD} token (stdout only).",
)
@click.pass_obj
def init_script(app: AppContext, output: Path | None, to_stdout: bool, resolve: bool) -> None:
    """Render the idempotent database init script."""
    from retailctl.services.bootstrap import BootstrapService

    if resolve and not to_stdout:
        raise click.UsageError(
            "--resolve is only allowed with --stdout; the password is never written to disk."
        )
    if output is not None and to_stdout:
        raise click.UsageError("--output and --stdout are mutually exclusive.")

    svc = BootstrapService(app.stack)
    if not to_stdout:
        app.emit(svc.write_script(output))
        return

    result = svc.render_script(resolve=resolve)
    if app.settings.json_output:
        app.emit(result)
    else:
        click.echo(result.data["script"], nl=False)
