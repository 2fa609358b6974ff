"""Database bootstrap as an ordered list of idempotent steps.

Each :class:`BootstrapStep` wraps one statement that is safe to re-run
(conditional creation, re-asserted grant, flush), an optional read-only
``verify`` query whose first row means "already in place", and an
optional ``requires`` query that must return a row before the statement
is attempted. The same steps render to the SQL init script that the MySQL
container executes on first start.

Step order:
  1. create_database   — CREATE DATABASE IF NOT EXISTS <orders>
  2. create_user       — CREATE USER IF NOT EXISTS <orders_user>@'%'
  3. grant_orders      — GRANT ALL PRIVILEGES ON <orders>.*
  4. grant_catalog     — GRANT ALL PRIVILEGES ON <catalog>.* (user must exist)
  5. flush_privileges  — FLUSH PRIVILEGES
followed by SHOW DATABASES for verification.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pymysql.converters import escape_string
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from retailctl.domain.credentials import CREDENTIAL_TOKEN

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Connection

    from retailctl.domain.principals import DatabasePrincipal

logger = logging.getLogger(__name__)

LIST_DATABASES_SQL = "SHOW DATABASES"

_BIND_RE = re.compile(r"(?<![:\w]):(\w+)")


@dataclass(frozen=True)
class Query:
    """A SQL string with named ``:bind`` parameters."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def bind_names(self) -> set[str]:
        return set(_BIND_RE.findall(self.sql))

    def run(self, conn: Connection, **bound: Any) -> Any:
        """Execute with the stored params plus any of *bound* the SQL uses."""
        names = self.bind_names
        params = {**self.params, **{k: v for k, v in bound.items() if k in names}}
        return conn.execute(text(self.sql), params)

    def render(self, literals: dict[str, str]) -> str:
        """Inline bind parameters using pre-quoted SQL *literals*."""

        def _sub(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in literals:
                msg = f"No literal for bind parameter :{name}"
                raise KeyError(msg)
            return literals[name]

        return _BIND_RE.sub(_sub, self.sql)


@dataclass(frozen=True)
class BootstrapStep:
    """One idempotent bootstrap statement with its checks."""

    name: str
    description: str
    apply: Query
    verify: Query | None = None
    requires: Query | None = None
    requires_message: str = ""

    def is_satisfied(self, conn: Connection) -> bool | None:
        """True/False from the verify query; None when the step has none."""
        if self.verify is None:
            return None
        return self.verify.run(conn).first() is not None


@dataclass(frozen=True)
class StepOutcome:
    """What happened to one step during a bootstrap run."""

    name: str
    already_satisfied: bool | None
    satisfied: bool | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "already_satisfied": self.already_satisfied,
            "satisfied": self.satisfied,
        }


class BootstrapError(Exception):
    """A bootstrap step failed; the remaining steps were not attempted."""

    def __init__(self, step: str, message: str, completed: Sequence[StepOutcome] = ()) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step
        self.message = message
        self.completed = list(completed)


class PrincipalMissingError(BootstrapError):
    """A principal expected to be provisioned elsewhere does not exist."""


def credential_literal(value: str) -> str:
    """Quote *value* as a MySQL string literal."""
    return f"'{escape_string(value)}'"


def build_steps(orders: DatabasePrincipal, catalog: DatabasePrincipal) -> list[BootstrapStep]:
    """Build the ordered bootstrap steps for the two principals.

    The credential for *orders* is a ``:password`` bind parameter; callers
    bind it at run time or render it as the substitution token.
    """
    user_exists = "SELECT User FROM mysql.user WHERE User = :user AND Host = :host"
    grant_exists = "SELECT Db FROM mysql.db WHERE Db = :database AND User = :user AND Host = :host"
    return [
        BootstrapStep(
            name="create_database",
            description=f"Create the {orders.database} database",
            apply=Query(f"CREATE DATABASE IF NOT EXISTS {orders.quoted_database}"),
            verify=Query(
                "SELECT SCHEMA_NAME FROM information_schema.SCHEMATA WHERE SCHEMA_NAME = :database",
                {"database": orders.database},
            ),
        ),
        BootstrapStep(
            name="create_user",
            description=f"Create the {orders.user} user",
            apply=Query(f"CREATE USER IF NOT EXISTS {orders.account} IDENTIFIED BY :password"),
            verify=Query(user_exists, {"user": orders.user, "host": orders.host}),
        ),
        BootstrapStep(
            name="grant_orders",
            description=f"Grant {orders.user} full privileges on {orders.database}",
            apply=Query(f"GRANT ALL PRIVILEGES ON {orders.quoted_database}.* TO {orders.account}"),
            verify=Query(
                grant_exists,
                {"database": orders.database, "user": orders.user, "host": orders.host},
            ),
        ),
        BootstrapStep(
            name="grant_catalog",
            description=(
                f"Grant {catalog.user} full privileges on {catalog.database} "
                f"(user provisioned by {catalog.provisioned_by.value})"
            ),
            apply=Query(
                f"GRANT ALL PRIVILEGES ON {catalog.quoted_database}.* TO {catalog.account}"
            ),
            verify=Query(
                grant_exists,
                {"database": catalog.database, "user": catalog.user, "host": catalog.host},
            ),
            requires=Query(user_exists, {"user": catalog.user, "host": catalog.host}),
            requires_message=(
                f"User {catalog.account} does not exist; it is created by the MySQL "
                "container from MYSQL_USER before init scripts run"
            ),
        ),
        BootstrapStep(
            name="flush_privileges",
            description="Reload grant tables",
            apply=Query("FLUSH PRIVILEGES"),
        ),
    ]


def run_steps(
    conn: Connection,
    steps: Sequence[BootstrapStep],
    *,
    credential: str,
) -> list[StepOutcome]:
    """Apply *steps* in order, aborting on the first failure.

    Raises:
        PrincipalMissingError: A ``requires`` query returned no row.
        BootstrapError: A statement or check raised.
    """
    outcomes: list[StepOutcome] = []
    for step in steps:
        try:
            if step.requires is not None and step.requires.run(conn).first() is None:
                raise PrincipalMissingError(step.name, step.requires_message, outcomes)
            before = step.is_satisfied(conn)
            step.apply.run(conn, password=credential)
            after = step.is_satisfied(conn)
        except SQLAlchemyError as exc:
            raise BootstrapError(step.name, str(exc), outcomes) from exc
        logger.debug("Step %s applied (already_satisfied=%s)", step.name, before)
        outcomes.append(StepOutcome(name=step.name, already_satisfied=before, satisfied=after))
    return outcomes


def verify_steps(conn: Connection, steps: Sequence[BootstrapStep]) -> list[StepOutcome]:
    """Report which steps are already in place, changing nothing."""
    outcomes: list[StepOutcome] = []
    for step in steps:
        state = step.is_satisfied(conn)
        outcomes.append(StepOutcome(name=step.name, already_satisfied=state, satisfied=state))
    return outcomes


def list_databases(conn: Connection) -> list[str]:
    return [str(name) for name in conn.execute(text(LIST_DATABASES_SQL)).scalars().all()]


def render_script(steps: Sequence[BootstrapStep], *, credential_sql: str | None = None) -> str:
    """Render *steps* as the SQL init script.

    Args:
        steps: Steps from :func:`build_steps`.
        credential_sql: Pre-quoted SQL literal for the credential. Defaults to
            the ``'${DB_PASSWORD}'`` token substituted by the container.
    """
    literal = credential_sql if credential_sql is not None else f"'{CREDENTIAL_TOKEN}'"
    lines = [
        "-- Retail store database initialization.",
        "-- Runs once, on the MySQL container's first start. Every statement is",
        "-- idempotent so a manual re-run leaves the same state.",
        "",
    ]
    for step in steps:
        lines.append(f"-- {step.description}")
        lines.append(f"{step.apply.render({'password': literal})};")
        lines.append("")
    lines.append("-- List databases for verification")
    lines.append(f"{LIST_DATABASES_SQL};")
    return "\n".join(lines) + "\n"
