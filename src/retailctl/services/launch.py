"""LaunchService — start, inspect, and tear down the local topology.

``up`` is the launcher: preconditions, credential, foreground start.
``down``, ``ps`` and ``logs`` are explicit operator actions; nothing here
tears the topology down on its own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from retailctl.services.base import BaseService
from retailctl.services.preflight import PreflightService, preflight_failure
from retailctl.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from retailctl.infrastructure.compose import ComposeRun

logger = logging.getLogger(__name__)


class LaunchService(BaseService):
    """Drives the compose tool on behalf of the operator."""

    def _preflight(self, op: str) -> ServiceResult | None:
        report = PreflightService(self._stack).report()
        if report.ok:
            return None
        logger.debug("Preflight failed: %s", report.status.value)
        return preflight_failure(op, report)

    def up(
        self,
        *,
        on_ready: Callable[[], None] | None = None,
        stdout_to_stderr: bool = False,
    ) -> ServiceResult:
        """Check preconditions, then start the topology in the foreground.

        Args:
            on_ready: Called once the preconditions pass, right before the
                compose tool takes over the terminal.
            stdout_to_stderr: Relay compose output on stderr, leaving stdout
                to the result document.
        """
        op = "up"
        failed = self._preflight(op)
        if failed is not None:
            return failed

        stack = self._stack
        if on_ready is not None:
            on_ready()

        run = stack.compose.up(env=stack.compose_env(), stdout_to_stderr=stdout_to_stderr)

        warnings: list[str] = []
        if not run.interrupted and run.exit_code != 0:
            warnings.append(f"{stack.compose.command} exited with code {run.exit_code}")

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "compose_file": str(stack.compose.file),
                "credential_source": stack.credential.source,
                "notice": stack.credential.notice(),
                "interrupted": run.interrupted,
                "compose_exit_code": run.exit_code,
                "teardown": stack.compose.teardown_hint(),
            },
            warnings=warnings,
        )

    def _explicit(
        self,
        op: str,
        action: Callable[[], ComposeRun],
        data: dict[str, Any] | None = None,
    ) -> ServiceResult:
        failed = self._preflight(op)
        if failed is not None:
            return failed
        run = action()
        payload = {"compose_file": str(self._stack.compose.file), **(data or {})}
        if run.output:
            payload["output"] = run.output
        if run.interrupted:
            payload["interrupted"] = True
            return ServiceResult(ok=True, op=op, data=payload)
        if run.exit_code != 0:
            return ServiceResult.failure(
                op,
                "COMPOSE_FAILED",
                f"{self._stack.compose.command} exited with code {run.exit_code}",
                data=payload,
                exit_code=run.exit_code,
            )
        return ServiceResult(ok=True, op=op, data=payload)

    def down(self, *, volumes: bool = False) -> ServiceResult:
        """Stop and remove the topology; with *volumes*, drop its data too."""
        compose, env = self._stack.compose, self._stack.compose_env()
        return self._explicit(
            "down",
            lambda: compose.down(volumes=volumes, env=env),
            {"volumes_removed": volumes},
        )

    def ps(self) -> ServiceResult:
        compose, env = self._stack.compose, self._stack.compose_env()
        return self._explicit("ps", lambda: compose.ps(env=env))

    def logs(
        self,
        service: str | None = None,
        *,
        follow: bool = False,
        tail: int | None = None,
        stdout_to_stderr: bool = False,
    ) -> ServiceResult:
        compose, env = self._stack.compose, self._stack.compose_env()
        return self._explicit(
            "logs",
            lambda: compose.logs(
                service, follow=follow, tail=tail, env=env, stdout_to_stderr=stdout_to_stderr
            ),
            {"service": service},
        )
