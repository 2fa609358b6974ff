"""Shared pytest fixtures and fakes for retailctl tests."""

from __future__ import annotations

import re
import stat
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner
from sqlalchemy.exc import OperationalError

from retailctl.config.settings import RetailSettings
from retailctl.infrastructure.stack import Stack

_DOCKER_SCRIPT = """\
#!/bin/sh
echo "docker $*" >> "$FAKE_LOG"
if [ "$1" = "info" ]; then
  exit "${FAKE_DOCKER_INFO_EXIT:-0}"
fi
if [ "$1" = "compose" ]; then
  exit "${FAKE_DOCKER_COMPOSE_EXIT:-0}"
fi
exit 0
"""

_COMPOSE_SCRIPT = """\
#!/bin/sh
echo "compose $* DB_PASSWORD=$DB_PASSWORD" >> "$FAKE_LOG"
echo "fake compose output"
exit "${FAKE_COMPOSE_EXIT:-0}"
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated project directory holding a placeholder compose file.

    The working directory is switched here and credential/config env
    vars are cleared so host settings never leak into tests.
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "docker-compose-simple.yml").write_text("services: {}\n", encoding="utf-8")
    for name in ("DB_PASSWORD", "RETAILCTL_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(root)
    return root


@dataclass
class FakeBin:
    """Fake ``docker`` / ``docker-compose`` executables on an isolated PATH."""

    bin_dir: Path
    log: Path

    def calls(self) -> list[str]:
        if not self.log.exists():
            return []
        return self.log.read_text(encoding="utf-8").splitlines()

    def remove(self, name: str) -> None:
        (self.bin_dir / name).unlink()


@pytest.fixture
def fake_bin(
    tmp_path: Path, project_root: Path, monkeypatch: pytest.MonkeyPatch
) -> FakeBin:
    """PATH containing only fake docker tooling that records its calls."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for name, script in (("docker", _DOCKER_SCRIPT), ("docker-compose", _COMPOSE_SCRIPT)):
        path = bin_dir / name
        path.write_text(script, encoding="utf-8")
        path.chmod(stat.S_IRWXU)
    log = tmp_path / "calls.log"
    monkeypatch.setenv("PATH", str(bin_dir))
    monkeypatch.setenv("FAKE_LOG", str(log))
    monkeypatch.delenv("FAKE_DOCKER_INFO_EXIT", raising=False)
    monkeypatch.delenv("FAKE_COMPOSE_EXIT", raising=False)
    monkeypatch.delenv("FAKE_DOCKER_COMPOSE_EXIT", raising=False)
    return FakeBin(bin_dir=bin_dir, log=log)


@pytest.fixture
def stack(project_root: Path) -> Generator[Stack]:
    """A Stack built from default settings in the isolated project."""
    s = Stack(RetailSettings.from_cli(project_root=project_root))
    try:
        yield s
    finally:
        s.close()


# ---------------------------------------------------------------------------
# In-memory stand-in for the MySQL server
# ---------------------------------------------------------------------------

_CREATE_DB = re.compile(r"^CREATE DATABASE IF NOT EXISTS `(\w+)`$")
_CREATE_USER = re.compile(r"^CREATE USER IF NOT EXISTS '(\w+)'@'([^']+)' IDENTIFIED BY :password$")
_GRANT = re.compile(r"^GRANT ALL PRIVILEGES ON `(\w+)`\.\* TO '(\w+)'@'([^']+)'$")


class _FakeResult:
    def __init__(self, rows: list[tuple[Any, ...]]) -> None:
        self._rows = rows

    def first(self) -> tuple[Any, ...] | None:
        return self._rows[0] if self._rows else None

    def scalars(self) -> _FakeResult:
        return _FakeResult([(row[0],) for row in self._rows])

    def all(self) -> list[Any]:
        return [row[0] for row in self._rows]


@dataclass
class FakeMySQL:
    """Tracks databases, accounts, and database-level grants.

    The container-provisioned ``catalog`` database and ``catalog_user``
    exist from the start, as they do after the MySQL image's own setup.
    """

    databases: set[str] = field(
        default_factory=lambda: {
            "information_schema", "mysql", "performance_schema", "sys", "catalog"
        }
    )
    users: dict[tuple[str, str], str] = field(
        default_factory=lambda: {("catalog_user", "%"): "catalog-secret"}
    )
    grants: set[tuple[str, str, str]] = field(default_factory=set)
    flushes: int = 0
    statements: list[str] = field(default_factory=list)
    fail_on: str | None = None

    def privilege_state(self) -> tuple[frozenset[Any], ...]:
        return (frozenset(self.databases), frozenset(self.users.items()), frozenset(self.grants))

    def execute(self, sql: str, params: dict[str, Any]) -> _FakeResult:
        self.statements.append(sql)
        if self.fail_on and self.fail_on in sql:
            orig = Exception(f"simulated failure: {self.fail_on}")
            raise OperationalError(sql, params, orig, hide_parameters=True)
        if m := _CREATE_DB.match(sql):
            self.databases.add(m.group(1))
            return _FakeResult([])
        if m := _CREATE_USER.match(sql):
            self.users.setdefault((m.group(1), m.group(2)), params["password"])
            return _FakeResult([])
        if m := _GRANT.match(sql):
            db, user, host = m.groups()
            if (user, host) not in self.users:
                orig = Exception(f"no such grant target {user}@{host}")
                raise OperationalError(sql, params, orig, hide_parameters=True)
            self.grants.add((db, user, host))
            return _FakeResult([])
        if sql == "FLUSH PRIVILEGES":
            self.flushes += 1
            return _FakeResult([])
        if sql == "SHOW DATABASES":
            return _FakeResult([(name,) for name in sorted(self.databases)])
        if "information_schema.SCHEMATA" in sql:
            hit = params["database"] in self.databases
            return _FakeResult([(params["database"],)] if hit else [])
        if "FROM mysql.user" in sql:
            hit = (params["user"], params["host"]) in self.users
            return _FakeResult([(params["user"],)] if hit else [])
        if "FROM mysql.db" in sql:
            hit = (params["database"], params["user"], params["host"]) in self.grants
            return _FakeResult([(params["database"],)] if hit else [])
        msg = f"FakeMySQL cannot handle: {sql}"
        raise AssertionError(msg)


class FakeConnection:
    def __init__(self, server: FakeMySQL) -> None:
        self.server = server
        self.closed = False

    def execute(self, clause: Any, params: dict[str, Any] | None = None) -> _FakeResult:
        return self.server.execute(clause.text, dict(params or {}))

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeConnection:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class FakeEngine:
    def __init__(self, server: FakeMySQL, *, reachable: bool = True) -> None:
        self.server = server
        self.reachable = reachable
        self.disposed = False

    def connect(self) -> FakeConnection:
        if not self.reachable:
            raise OperationalError("connect", {}, Exception("Can't connect to MySQL server"))
        return FakeConnection(self.server)

    def dispose(self) -> None:
        self.disposed = True


@pytest.fixture
def mysql_server() -> FakeMySQL:
    """Fresh fake MySQL server with the catalog principal pre-provisioned."""
    return FakeMySQL()


@pytest.fixture
def mysql_conn(mysql_server: FakeMySQL) -> FakeConnection:
    return FakeConnection(mysql_server)


@pytest.fixture
def fake_engine(
    stack: Stack, mysql_server: FakeMySQL, monkeypatch: pytest.MonkeyPatch
) -> FakeEngine:
    """Install a FakeEngine on the ``stack`` fixture."""
    engine = FakeEngine(mysql_server)
    monkeypatch.setattr(stack, "_engine", engine)
    return engine


@pytest.fixture
def patch_engine(
    mysql_server: FakeMySQL, monkeypatch: pytest.MonkeyPatch
) -> FakeEngine:
    """Make every Stack created through the CLI use a FakeEngine."""
    engine = FakeEngine(mysql_server)
    monkeypatch.setattr(
        "retailctl.infrastructure.stack.create_server_engine", lambda *_a, **_k: engine
    )
    return engine
