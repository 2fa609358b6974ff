"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Provides lazy Stack construction, operator status
lines, and centralized result emission (stdout/stderr routing + exit
codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from retailctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from retailctl.config.settings import RetailSettings
    from retailctl.infrastructure.stack import Stack
    from retailctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The stack is built on first use so ``--help`` and ``--version``
    never probe the runtime or touch the database.
    """

    def __init__(self, settings: RetailSettings) -> None:
        self.settings = settings
        self._stack: Stack | None = None

        from retailctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def stack(self) -> Stack:
        """The stack instance (created lazily on first access)."""
        if self._stack is None:
            from retailctl.infrastructure.stack import Stack

            self._stack = Stack(self.settings)
        return self._stack

    def close(self) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None

    def status(self, message: str, *, essential: bool = False) -> None:
        """Write an operator status line to stdout.

        JSON mode writes none: stdout carries the result document and stderr
        the error document, so anything an operator must see (the default
        credential notice) travels inside the result. ``--quiet`` drops
        non-essential lines.
        """
        if self.settings.json_output:
            return
        if self.settings.quiet and not essential:
            return
        click.echo(message)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout, returns normally. Warnings go to
          stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
