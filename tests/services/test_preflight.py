"""Tests for PreflightService against fake docker tooling."""

from __future__ import annotations

import stat
from pathlib import Path
from typing import Any

import pytest

from retailctl.config.settings import RetailSettings
from retailctl.infrastructure.stack import Stack
from retailctl.services.preflight import PreflightService


class TestPreflightService:
    def test_all_present(self, stack: Stack, fake_bin: Any) -> None:
        result = PreflightService(stack).check()
        assert result.ok
        assert result.data["status"] == "ok"
        assert result.data["runtime"] == "docker"
        assert result.data["compose_tool"] == str(fake_bin.bin_dir / "docker-compose")
        assert fake_bin.calls() == ["docker info"]

    def test_runtime_not_running(
        self, stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_DOCKER_INFO_EXIT", "1")
        result = PreflightService(stack).check()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "MISSING_RUNTIME"
        assert result.error.message == "Docker is not running. Please start Docker first."
        assert result.error.detail["status"] == "missing-runtime"

    def test_runtime_binary_absent(self, stack: Stack, fake_bin: Any) -> None:
        fake_bin.remove("docker")
        result = PreflightService(stack).check()
        assert result.error is not None
        assert result.error.code == "MISSING_RUNTIME"

    def test_tool_absent(self, stack: Stack, fake_bin: Any) -> None:
        fake_bin.remove("docker-compose")
        result = PreflightService(stack).check()
        assert result.error is not None
        assert result.error.code == "MISSING_TOOL"
        assert result.error.message == (
            "docker-compose is not installed. Please install Docker Compose."
        )

    def test_runtime_checked_first(
        self, stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fake_bin.remove("docker-compose")
        monkeypatch.setenv("FAKE_DOCKER_INFO_EXIT", "1")
        result = PreflightService(stack).check()
        assert result.error is not None
        assert result.error.code == "MISSING_RUNTIME"

    def test_runtime_not_executable(self, stack: Stack, fake_bin: Any) -> None:
        (fake_bin.bin_dir / "docker").chmod(stat.S_IRUSR)
        result = PreflightService(stack).check()
        assert result.error is not None
        assert result.error.code == "MISSING_RUNTIME"


class TestComposePlugin:
    @pytest.fixture
    def plugin_stack(self, project_root: Path, monkeypatch: pytest.MonkeyPatch) -> Stack:
        monkeypatch.setenv("RETAILCTL_COMPOSE__COMMAND", "docker compose")
        return Stack(RetailSettings.from_cli(project_root=project_root))

    def test_plugin_present(self, plugin_stack: Stack, fake_bin: Any) -> None:
        result = PreflightService(plugin_stack).check()
        assert result.ok
        assert result.data["compose_tool"] == str(fake_bin.bin_dir / "docker")
        assert fake_bin.calls() == ["docker info", "docker compose version"]

    def test_plugin_missing(
        self, plugin_stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_DOCKER_COMPOSE_EXIT", "1")
        result = PreflightService(plugin_stack).check()
        assert result.error is not None
        assert result.error.code == "MISSING_TOOL"
        assert result.error.message == (
            "docker compose is not installed. Please install Docker Compose."
        )
