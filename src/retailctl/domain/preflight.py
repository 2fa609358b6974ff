"""Launcher preconditions as a pure function over injected probes.

The container runtime is checked before the compose tool, and the first
failure short-circuits. Nothing here touches the process environment
or exits; callers decide what a failed report means.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel


class PreflightStatus(StrEnum):
    """Outcome of the launcher precondition checks."""

    OK = "ok"
    MISSING_RUNTIME = "missing-runtime"
    MISSING_TOOL = "missing-tool"


class PreflightReport(BaseModel):
    """Structured result of :func:`check_preconditions`."""

    model_config = {"frozen": True}

    status: PreflightStatus
    message: str
    remediation: str | None = None
    tool_path: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is PreflightStatus.OK


def check_preconditions(
    runtime_reachable: Callable[[], bool],
    locate_tool: Callable[[str], str | None],
    compose_command: str,
    *,
    runtime_name: str = "Docker",
) -> PreflightReport:
    """Verify the container runtime and the compose tool.

    Args:
        runtime_reachable: Probe returning True when the runtime daemon answers.
        locate_tool: Resolves a command to its executable path, or None.
        compose_command: The configured compose command (e.g. ``docker-compose``).
        runtime_name: Human name used in messages.
    """
    if not runtime_reachable():
        return PreflightReport(
            status=PreflightStatus.MISSING_RUNTIME,
            message=f"{runtime_name} is not running. Please start {runtime_name} first.",
            remediation=f"Start the {runtime_name} daemon and re-run the command.",
        )

    tool_path = locate_tool(compose_command)
    if tool_path is None:
        return PreflightReport(
            status=PreflightStatus.MISSING_TOOL,
            message=f"{compose_command} is not installed. Please install Docker Compose.",
            remediation=f"Install Docker Compose so that '{compose_command}' is on PATH.",
        )

    return PreflightReport(
        status=PreflightStatus.OK,
        message="Container runtime and compose tool are available.",
        tool_path=tool_path,
    )
