"""Container runtime probe and executable lookup.

Reachability is judged by ``<runtime> info``: the CLI answers only when it
can talk to the daemon. A missing or non-executable binary, a non-zero
exit, or a hung daemon (timeout) all count as unreachable.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess

logger = logging.getLogger(__name__)


def split_command(command: str) -> list[str]:
    """Split a configured command (``docker compose``) into argv.

    Raises:
        ValueError: The command is blank or its quoting is unbalanced.
    """
    argv = shlex.split(command)
    if not argv:
        msg = "Empty command"
        raise ValueError(msg)
    return argv


def _answers(argv: list[str], timeout: float) -> bool:
    """True when *argv* runs and exits 0 within *timeout* seconds."""
    try:
        completed = subprocess.run(
            argv,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except OSError as exc:
        logger.debug("Cannot execute %s: %s", argv[0], exc)
        return False
    except subprocess.TimeoutExpired:
        logger.debug("%s timed out after %ss", " ".join(argv), timeout)
        return False
    logger.debug("%s exited with %d", " ".join(argv), completed.returncode)
    return completed.returncode == 0


def locate_tool(command: str, *, timeout: float = 30.0) -> str | None:
    """Return the executable path for *command*, or None if it is unusable.

    Multi-word commands (``docker compose``) are plugins of their first
    word: the executable must be on PATH *and* ``<command> version`` must
    succeed, otherwise a missing plugin would only surface after launch.
    """
    try:
        argv = split_command(command)
    except ValueError:
        return None
    executable = shutil.which(argv[0])
    if executable is None:
        return None
    if len(argv) > 1 and not _answers([*argv, "version"], timeout):
        return None
    return executable


class ContainerRuntime:
    """The container engine CLI (``docker`` by default)."""

    def __init__(self, command: str = "docker", *, probe_timeout: float = 30.0) -> None:
        self.command = command
        self.probe_timeout = probe_timeout

    @property
    def display_name(self) -> str:
        try:
            return split_command(self.command)[0].capitalize()
        except ValueError:
            return "Container runtime"

    def is_reachable(self) -> bool:
        """True when ``<runtime> info`` succeeds within the probe timeout."""
        try:
            argv = split_command(self.command)
        except ValueError:
            logger.debug("Unusable runtime command: %r", self.command)
            return False
        return _answers([*argv, "info"], self.probe_timeout)
