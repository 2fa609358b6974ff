"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, retailctl.toml only contains
overrides. With no file at all the defaults reproduce the stock local
setup (docker + docker-compose, MySQL on localhost:3306).
"""

from __future__ import annotations

import shlex

from pydantic import BaseModel, Field, field_validator

from retailctl.domain.principals import check_host, check_identifier


def _check_command(value: str) -> str:
    try:
        argv = shlex.split(value)
    except ValueError as exc:
        msg = f"Unbalanced quoting in command {value!r}"
        raise ValueError(msg) from exc
    if not argv:
        msg = "Command must not be empty"
        raise ValueError(msg)
    return value


# --- retailctl.toml sections ---


class RuntimeConfig(BaseModel):
    """[runtime] section."""

    model_config = {"frozen": True}

    command: str = "docker"
    probe_timeout: float = 30.0

    @field_validator("command")
    @classmethod
    def _splittable(cls, value: str) -> str:
        return _check_command(value)


class ComposeConfig(BaseModel):
    """[compose] section."""

    model_config = {"frozen": True}

    command: str = "docker-compose"
    file: str = "docker-compose-simple.yml"
    init_scripts_dir: str = "init-scripts"
    init_script_name: str = "01-init-databases.sql"

    @field_validator("command")
    @classmethod
    def _splittable(cls, value: str) -> str:
        return _check_command(value)


class PrincipalConfig(BaseModel):
    """[database.orders] / [database.catalog] sections."""

    model_config = {"frozen": True}

    database: str
    user: str
    host: str = "%"

    @field_validator("database", "user")
    @classmethod
    def _plain_identifier(cls, value: str) -> str:
        return check_identifier(value)

    @field_validator("host")
    @classmethod
    def _host_pattern(cls, value: str) -> str:
        return check_host(value)


class DatabaseConfig(BaseModel):
    """[database] section.

    ``admin_password`` defaults to the resolved credential, which is what
    the stock compose file hands to ``MYSQL_ROOT_PASSWORD``.
    """

    model_config = {"frozen": True}

    host: str = "127.0.0.1"
    port: int = 3306
    admin_user: str = "root"
    admin_password: str | None = None
    connect_timeout: int = 10
    orders: PrincipalConfig = Field(
        default_factory=lambda: PrincipalConfig(database="orders", user="orders_user")
    )
    catalog: PrincipalConfig = Field(
        default_factory=lambda: PrincipalConfig(database="catalog", user="catalog_user")
    )


class EndpointConfig(BaseModel):
    """One entry of the [[endpoints]] array."""

    model_config = {"frozen": True}

    name: str
    address: str


DEFAULT_ENDPOINTS: tuple[EndpointConfig, ...] = (
    EndpointConfig(name="UI (Frontend)", address="http://localhost:8888"),
    EndpointConfig(name="MySQL Database", address="localhost:3306"),
    EndpointConfig(name="DynamoDB Local", address="localhost:8000"),
)
