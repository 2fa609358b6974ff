"""Stack — the single dependency injected into every service.

Owns the resolved credential, the container runtime, the compose
project, the two database principals, and a lazily created engine for
the MySQL server. Nothing here starts containers or opens connections
on construction; ``--help`` and ``check`` stay cheap.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from retailctl.domain.credentials import CREDENTIAL_ENV_VAR, ResolvedCredential, resolve_credential
from retailctl.domain.principals import DatabasePrincipal, ProvisionedBy
from retailctl.infrastructure.compose import ComposeProject
from retailctl.infrastructure.database.engine import create_server_engine
from retailctl.infrastructure.runtime import ContainerRuntime

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from retailctl.config.settings import RetailSettings

logger = logging.getLogger(__name__)


class Stack:
    """The local retail store topology as seen from the host."""

    def __init__(self, settings: RetailSettings) -> None:
        self.settings = settings
        self.credential: ResolvedCredential = resolve_credential(settings.db_password)
        self.runtime = ContainerRuntime(
            settings.runtime.command,
            probe_timeout=settings.runtime.probe_timeout,
        )
        self.compose = ComposeProject(
            settings.compose.command,
            settings.compose_file,
            cwd=settings.project_root,
        )
        db = settings.database
        self.orders = DatabasePrincipal(
            database=db.orders.database,
            user=db.orders.user,
            host=db.orders.host,
            provisioned_by=ProvisionedBy.BOOTSTRAP,
        )
        self.catalog = DatabasePrincipal(
            database=db.catalog.database,
            user=db.catalog.user,
            host=db.catalog.host,
            provisioned_by=ProvisionedBy.CONTAINER_ENV,
        )
        self._engine: Engine | None = None

    @property
    def admin_password(self) -> str:
        """Explicit ``[database] admin_password`` or the resolved credential."""
        return self.settings.database.admin_password or self.credential.value

    @property
    def engine(self) -> Engine:
        """MySQL server engine (created on first access)."""
        if self._engine is None:
            db = self.settings.database
            logger.debug("Creating engine for %s@%s:%d", db.admin_user, db.host, db.port)
            self._engine = create_server_engine(db, self.admin_password)
        return self._engine

    def compose_env(self) -> dict[str, str]:
        """Environment for compose processes: inherited, plus the credential."""
        env = dict(os.environ)
        env[CREDENTIAL_ENV_VAR] = self.credential.value
        return env

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
