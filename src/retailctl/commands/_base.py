"""Click base classes shared by every retailctl command.

Launcher and bootstrap commands carry copy-pasteable invocations (with
the ``DB_PASSWORD`` / ``RETAILCTL_*`` overrides operators actually use)
behind ``--examples`` so that ``--help`` stays a one-screen summary.
"""

from __future__ import annotations

from typing import Any

import click


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag that prints *examples* and exits."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show example invocations and exit.",
        )
    )


class RetailCommand(click.Command):
    """A retailctl subcommand; ``examples=`` enables ``--examples``."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class RetailGroup(click.Group):
    """The root ``retailctl`` group; subcommands default to :class:`RetailCommand`."""

    command_class = RetailCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)
