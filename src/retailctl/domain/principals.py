"""Database principals: a named database plus a user scoped to it.

Two principals are in scope. ``orders`` is created by the bootstrap
steps. ``catalog`` is provisioned by the MySQL container itself
(``MYSQL_DATABASE`` / ``MYSQL_USER``) before any init script runs, so the
bootstrap only grants to it and must check that it exists.
"""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, field_validator

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")
_HOST_RE = re.compile(r"^[A-Za-z0-9_.%-]+$")


def check_identifier(value: str) -> str:
    """Return *value* if it is a plain MySQL identifier, else raise ValueError."""
    if not _IDENTIFIER_RE.match(value):
        msg = f"Invalid identifier {value!r}: use letters, digits, and underscores only"
        raise ValueError(msg)
    return value


def check_host(value: str) -> str:
    """Return *value* if it is a usable account host pattern, else raise ValueError."""
    if not _HOST_RE.match(value):
        msg = f"Invalid host pattern {value!r}"
        raise ValueError(msg)
    return value


class ProvisionedBy(StrEnum):
    """Who is responsible for creating a principal."""

    BOOTSTRAP = "bootstrap"
    CONTAINER_ENV = "container-env"


class DatabasePrincipal(BaseModel):
    """A database and the user granted full privileges on it."""

    model_config = {"frozen": True}

    database: str
    user: str
    host: str = "%"
    provisioned_by: ProvisionedBy = ProvisionedBy.BOOTSTRAP

    @field_validator("database", "user")
    @classmethod
    def _plain_identifier(cls, value: str) -> str:
        return check_identifier(value)

    @field_validator("host")
    @classmethod
    def _host_pattern(cls, value: str) -> str:
        return check_host(value)

    @property
    def account(self) -> str:
        """The ``'user'@'host'`` account name."""
        return f"'{self.user}'@'{self.host}'"

    @property
    def quoted_database(self) -> str:
        return f"`{self.database}`"
