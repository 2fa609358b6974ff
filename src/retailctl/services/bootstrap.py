"""BootstrapService — idempotent MySQL initialization for the orders principal.

Pipeline: CONNECT → (REQUIRE → APPLY → VERIFY) per step → LIST DATABASES

Runs as the admin principal. A failing step aborts the rest and is
reported with the steps already completed; nothing is retried. The
catalog principal is never created here: the MySQL container provisions
it from ``MYSQL_DATABASE``/``MYSQL_USER`` and the ``grant_catalog`` step
refuses to run if it is missing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from retailctl.infrastructure.database.bootstrap import (
    BootstrapError,
    PrincipalMissingError,
    build_steps,
    credential_literal,
    list_databases,
    render_script,
    run_steps,
    verify_steps,
)
from retailctl.services.base import BaseService
from retailctl.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from retailctl.infrastructure.database.bootstrap import BootstrapStep

logger = logging.getLogger(__name__)


class BootstrapService(BaseService):
    """Creates the orders database and user, and grants both principals."""

    def steps(self) -> list[BootstrapStep]:
        return build_steps(self._stack.orders, self._stack.catalog)

    def _expected_databases(self) -> list[str]:
        return [self._stack.catalog.database, self._stack.orders.database]

    def _connect_failure(self, op: str, exc: SQLAlchemyError) -> ServiceResult:
        db = self._stack.settings.database
        logger.debug("Connection to %s:%d failed", db.host, db.port)
        return ServiceResult.failure(
            op,
            "CONNECT_FAILED",
            f"Cannot connect to MySQL at {db.host}:{db.port} as {db.admin_user}: {exc}",
            host=db.host,
            port=db.port,
        )

    def _server_meta(self) -> dict[str, Any]:
        db = self._stack.settings.database
        return {"server": f"{db.host}:{db.port}", "admin_user": db.admin_user}

    def _missing_databases(self, databases: list[str]) -> list[str]:
        return [name for name in self._expected_databases() if name not in databases]

    def run(self, only: Sequence[str] | None = None) -> ServiceResult:
        """Apply all steps, or the named subset in canonical order."""
        op = "bootstrap"
        steps = self.steps()
        if only:
            known = {step.name for step in steps}
            unknown = sorted(set(only) - known)
            if unknown:
                return ServiceResult.failure(
                    op,
                    "UNKNOWN_STEP",
                    f"Unknown bootstrap step(s): {', '.join(unknown)}",
                    unknown=unknown,
                    available=[step.name for step in steps],
                )
            steps = [step for step in steps if step.name in set(only)]

        try:
            conn = self._stack.engine.connect()
        except SQLAlchemyError as exc:
            return self._connect_failure(op, exc)

        with conn:
            try:
                outcomes = run_steps(conn, steps, credential=self._stack.credential.value)
                databases = list_databases(conn)
            except PrincipalMissingError as exc:
                return self._step_failure(op, "PRINCIPAL_MISSING", exc)
            except BootstrapError as exc:
                return self._step_failure(op, "BOOTSTRAP_FAILED", exc)
            except SQLAlchemyError as exc:
                return ServiceResult.failure(
                    op,
                    "BOOTSTRAP_FAILED",
                    f"Listing databases failed: {exc}",
                    step="list_databases",
                )

        warnings = [
            f"Database '{name}' not listed after bootstrap"
            for name in self._missing_databases(databases)
        ]
        logger.info("Bootstrap applied %d step(s)", len(outcomes))
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "steps": [outcome.to_dict() for outcome in outcomes],
                "databases": databases,
                "credential_source": self._stack.credential.source,
                "notice": self._stack.credential.notice(),
            },
            warnings=warnings,
            meta=self._server_meta(),
        )

    def _step_failure(self, op: str, code: str, exc: BootstrapError) -> ServiceResult:
        logger.debug("Bootstrap step %s failed", exc.step)
        return ServiceResult.failure(
            op,
            code,
            f"Step '{exc.step}' failed: {exc.message}",
            step=exc.step,
            completed=[outcome.name for outcome in exc.completed],
        )

    def verify(self) -> ServiceResult:
        """Report which steps are in place without changing anything."""
        op = "verify"
        steps = self.steps()
        try:
            conn = self._stack.engine.connect()
        except SQLAlchemyError as exc:
            return self._connect_failure(op, exc)

        with conn:
            try:
                outcomes = verify_steps(conn, steps)
                databases = list_databases(conn)
            except SQLAlchemyError as exc:
                return ServiceResult.failure(op, "VERIFY_FAILED", f"Verification failed: {exc}")

        missing = self._missing_databases(databases)
        complete = not missing and all(o.satisfied is not False for o in outcomes)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "complete": complete,
                "steps": [outcome.to_dict() for outcome in outcomes],
                "databases": databases,
                "missing_databases": missing,
            },
            meta=self._server_meta(),
        )

    def render_script(self, *, resolve: bool = False) -> ServiceResult:
        """Render the init script; *resolve* inlines the real credential."""
        credential_sql = credential_literal(self._stack.credential.value) if resolve else None
        script = render_script(self.steps(), credential_sql=credential_sql)
        data: dict[str, Any] = {"script": script, "resolved": resolve}
        return ServiceResult(ok=True, op="init_script", data=data)

    def write_script(self, path: Path | None = None) -> ServiceResult:
        """Write the tokenized init script (never the real credential) to disk."""
        op = "init_script"
        target = path or self._stack.settings.init_script_path
        script = render_script(self.steps())
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(script, encoding="utf-8")
        except OSError as exc:
            return ServiceResult.failure(
                op,
                "WRITE_FAILED",
                f"Cannot write init script to {target}: {exc}",
                path=str(target),
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(target), "step_count": len(self.steps()), "resolved": False},
        )
