"""MySQL server engine for the bootstrap steps.

The engine connects to the server without a default schema, as the
admin principal, in AUTOCOMMIT mode: every bootstrap statement is DDL or
DCL, which MySQL commits implicitly anyway.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine

if TYPE_CHECKING:
    from retailctl.config.models import DatabaseConfig


def server_url(config: DatabaseConfig, password: str) -> URL:
    """Build the ``mysql+pymysql`` URL for the admin connection."""
    return URL.create(
        "mysql+pymysql",
        username=config.admin_user,
        password=password,
        host=config.host,
        port=config.port,
    )


def create_server_engine(config: DatabaseConfig, password: str) -> Engine:
    """Create an AUTOCOMMIT engine against the MySQL server."""
    return create_engine(
        server_url(config, password),
        echo=False,
        hide_parameters=True,
        pool_pre_ping=True,
        isolation_level="AUTOCOMMIT",
        connect_args={"connect_timeout": config.connect_timeout},
    )
