"""Thin wrapper over the external compose tool.

The topology file is opaque here: it is passed to the compose tool with
``-f`` and never parsed. ``up`` runs in the foreground with output going
straight to the terminal; an interrupt ends the relay but never triggers
teardown. Teardown (``down``) is only ever run on explicit request.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from retailctl.infrastructure.runtime import split_command

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

_STDERR_FD = 2


@dataclass(frozen=True)
class ComposeRun:
    """Outcome of a foreground compose invocation."""

    exit_code: int | None
    interrupted: bool = False
    output: str = ""


class ComposeProject:
    """A compose topology file driven through the compose CLI."""

    def __init__(self, command: str, file: Path, *, cwd: Path | None = None) -> None:
        self.command = command
        self.file = file
        self.cwd = cwd if cwd is not None else file.parent

    def _argv(self, *args: str) -> list[str]:
        return [*split_command(self.command), "-f", str(self.file), *args]

    def teardown_hint(self) -> str:
        """The command that removes the topology including its volumes."""
        return f"{self.command} -f {self.file.name} down -v"

    def _stream(
        self,
        argv: list[str],
        env: Mapping[str, str] | None,
        *,
        stdout_to_stderr: bool = False,
    ) -> ComposeRun:
        logger.debug("Running %s", " ".join(argv))
        proc = subprocess.Popen(
            argv,
            cwd=self.cwd,
            env=dict(env) if env is not None else None,
            stdout=_STDERR_FD if stdout_to_stderr else None,
        )
        try:
            return ComposeRun(exit_code=proc.wait())
        except KeyboardInterrupt:
            # The terminal delivered the same SIGINT to compose, which is now
            # stopping its containers; wait for that unless interrupted again.
            logger.debug("Foreground compose relay interrupted")
            try:
                proc.wait()
            except KeyboardInterrupt:
                proc.kill()
                proc.wait()
            return ComposeRun(exit_code=proc.returncode, interrupted=True)

    def _capture(self, argv: list[str], env: Mapping[str, str] | None) -> ComposeRun:
        logger.debug("Running %s", " ".join(argv))
        completed = subprocess.run(
            argv,
            cwd=self.cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
        output = completed.stdout
        if completed.returncode != 0 and completed.stderr:
            output = f"{output}{completed.stderr}"
        return ComposeRun(exit_code=completed.returncode, output=output)

    def up(
        self,
        env: Mapping[str, str] | None = None,
        *,
        stdout_to_stderr: bool = False,
    ) -> ComposeRun:
        """Start the topology in the foreground until it exits or is interrupted.

        A first interrupt lets compose stop its containers; a second one
        kills it. Containers are never removed here.
        """
        return self._stream(self._argv("up"), env, stdout_to_stderr=stdout_to_stderr)

    def down(self, *, volumes: bool = False, env: Mapping[str, str] | None = None) -> ComposeRun:
        """Stop and remove the topology; ``volumes`` also drops named volumes."""
        args = ["down", "-v"] if volumes else ["down"]
        return self._capture(self._argv(*args), env)

    def ps(self, env: Mapping[str, str] | None = None) -> ComposeRun:
        return self._capture(self._argv("ps"), env)

    def logs(
        self,
        service: str | None = None,
        *,
        follow: bool = False,
        tail: int | None = None,
        env: Mapping[str, str] | None = None,
        stdout_to_stderr: bool = False,
    ) -> ComposeRun:
        """Stream container logs for one service or the whole topology."""
        args = ["logs"]
        if follow:
            args.append("--follow")
        if tail is not None:
            args.extend(["--tail", str(tail)])
        if service:
            args.append(service)
        return self._stream(self._argv(*args), env, stdout_to_stderr=stdout_to_stderr)
