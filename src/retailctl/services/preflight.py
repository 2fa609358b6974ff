"""PreflightService — container runtime and compose tool checks."""

from __future__ import annotations

import logging

from retailctl.domain.preflight import PreflightReport, PreflightStatus, check_preconditions
from retailctl.infrastructure.runtime import locate_tool
from retailctl.services.base import BaseService
from retailctl.services.result import ServiceResult

logger = logging.getLogger(__name__)

_ERROR_CODES = {
    PreflightStatus.MISSING_RUNTIME: "MISSING_RUNTIME",
    PreflightStatus.MISSING_TOOL: "MISSING_TOOL",
}


def preflight_failure(op: str, report: PreflightReport) -> ServiceResult:
    """Map a failed report onto a ServiceResult for *op*."""
    return ServiceResult.failure(
        op,
        _ERROR_CODES[report.status],
        report.message,
        status=report.status.value,
        remediation=report.remediation,
    )


class PreflightService(BaseService):
    """Verifies the launcher preconditions without starting anything."""

    def report(self) -> PreflightReport:
        runtime = self._stack.runtime
        report = check_preconditions(
            runtime.is_reachable,
            lambda command: locate_tool(command, timeout=runtime.probe_timeout),
            self._stack.compose.command,
            runtime_name=runtime.display_name,
        )
        logger.debug("Preflight status: %s", report.status.value)
        return report

    def check(self) -> ServiceResult:
        op = "preflight"
        report = self.report()
        if not report.ok:
            return preflight_failure(op, report)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "status": report.status.value,
                "runtime": self._stack.runtime.command,
                "compose_tool": report.tool_path,
            },
        )
