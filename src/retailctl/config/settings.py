"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``RETAILCTL_*`` prefix (``__`` for nested sections);
                    the credential alone comes from plain ``DB_PASSWORD``
  3. TOML file    — ``retailctl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from retailctl.config.discovery import find_config
from retailctl.config.models import (
    DEFAULT_ENDPOINTS,
    ComposeConfig,
    DatabaseConfig,
    EndpointConfig,
    RuntimeConfig,
)
from retailctl.domain.credentials import CREDENTIAL_ENV_VAR


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``retailctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


def _describe(exc: ValidationError, toml_path: Path | None) -> str:
    """One line per invalid setting, e.g. ``database.orders.user: Value error, ...``."""
    source = f" (config: {toml_path})" if toml_path else ""
    lines = [f"Invalid settings{source}:"]
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        lines.append(f"  {location}: {error['msg']}")
    return "\n".join(lines)


class RetailSettings(BaseSettings):
    """Unified settings for the retailctl CLI.

    Merges CLI flags, environment variables, TOML config sections,
    and code-baked defaults into a single frozen object stored on
    ``click.Context.obj``.

    Attributes:
        project_root: Directory holding the compose file (parent of
            ``retailctl.toml``, or CWD if no config found).
        config_path: The TOML file in effect, if any.
        db_password: Operator-supplied credential, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "RETAILCTL_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- Credential (never written back anywhere) ---
    db_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("db_password", CREDENTIAL_ENV_VAR),
        repr=False,
    )

    # --- TOML sections ---
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    compose: ComposeConfig = Field(default_factory=ComposeConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    endpoints: list[EndpointConfig] = Field(default_factory=lambda: list(DEFAULT_ENDPOINTS))

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> RetailSettings:
        """Construct settings from a CLI invocation.

        Discovers ``retailctl.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        except ValidationError as exc:
            import click

            raise click.ClickException(_describe(exc, toml_path)) from exc
        finally:
            _tls.toml_path = None

    @property
    def compose_file(self) -> Path:
        return self.project_root / self.compose.file

    @property
    def init_script_path(self) -> Path:
        return self.project_root / self.compose.init_scripts_dir / self.compose.init_script_name
