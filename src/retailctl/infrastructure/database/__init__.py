"""MySQL server engine and idempotent bootstrap steps via SQLAlchemy."""

from retailctl.infrastructure.database.bootstrap import (
    BootstrapError,
    BootstrapStep,
    PrincipalMissingError,
    Query,
    StepOutcome,
    build_steps,
    credential_literal,
    list_databases,
    render_script,
    run_steps,
    verify_steps,
)
from retailctl.infrastructure.database.engine import create_server_engine, server_url

__all__ = [
    "BootstrapError",
    "BootstrapStep",
    "PrincipalMissingError",
    "Query",
    "StepOutcome",
    "build_steps",
    "create_server_engine",
    "credential_literal",
    "list_databases",
    "render_script",
    "run_steps",
    "server_url",
    "verify_steps",
]
