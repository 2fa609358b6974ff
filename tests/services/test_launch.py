"""Tests for LaunchService against fake docker tooling."""

from __future__ import annotations

from typing import Any

import pytest

from retailctl.infrastructure.compose import ComposeRun
from retailctl.infrastructure.stack import Stack
from retailctl.services.launch import LaunchService


class TestUp:
    def test_starts_with_default_credential(self, stack: Stack, fake_bin: Any) -> None:
        ready: list[bool] = []
        result = LaunchService(stack).up(on_ready=lambda: ready.append(True))

        assert result.ok
        assert ready == [True]
        assert result.data["credential_source"] == "default"
        assert result.data["interrupted"] is False
        assert result.data["compose_exit_code"] == 0
        assert result.data["teardown"] == "docker-compose -f docker-compose-simple.yml down -v"
        assert fake_bin.calls()[-1] == (
            f"compose -f {stack.compose.file} up DB_PASSWORD=mypassword123"
        )

    def test_runtime_down_skips_compose(
        self, stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_DOCKER_INFO_EXIT", "1")
        ready: list[bool] = []
        result = LaunchService(stack).up(on_ready=lambda: ready.append(True))

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "MISSING_RUNTIME"
        assert ready == []
        assert not any(call.startswith("compose") for call in fake_bin.calls())

    def test_tool_missing_skips_compose(self, stack: Stack, fake_bin: Any) -> None:
        fake_bin.remove("docker-compose")
        result = LaunchService(stack).up()
        assert result.error is not None
        assert result.error.code == "MISSING_TOOL"
        assert fake_bin.calls() == ["docker info"]

    def test_nonzero_exit_is_a_warning(
        self, stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_COMPOSE_EXIT", "2")
        result = LaunchService(stack).up()
        assert result.ok
        assert result.data["compose_exit_code"] == 2
        assert result.warnings == ["docker-compose exited with code 2"]

    def test_interrupt_is_clean(
        self, stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            stack.compose, "up", lambda env=None, **_: ComposeRun(exit_code=130, interrupted=True)
        )
        result = LaunchService(stack).up()
        assert result.ok
        assert result.data["interrupted"] is True
        assert result.warnings == []


class TestExplicitActions:
    def test_down_keeps_volumes_by_default(self, stack: Stack, fake_bin: Any) -> None:
        result = LaunchService(stack).down()
        assert result.ok
        assert result.data["volumes_removed"] is False
        assert result.data["output"] == "fake compose output\n"
        assert fake_bin.calls()[-1].startswith(f"compose -f {stack.compose.file} down DB_PASSWORD=")

    def test_down_with_volumes(self, stack: Stack, fake_bin: Any) -> None:
        result = LaunchService(stack).down(volumes=True)
        assert result.data["volumes_removed"] is True
        assert f"-f {stack.compose.file} down -v" in fake_bin.calls()[-1]

    def test_ps(self, stack: Stack, fake_bin: Any) -> None:
        result = LaunchService(stack).ps()
        assert result.ok
        assert result.op == "ps"
        assert "fake compose output" in result.data["output"]

    def test_logs_arguments(self, stack: Stack, fake_bin: Any) -> None:
        result = LaunchService(stack).logs("mysql", tail=5)
        assert result.ok
        assert result.data["service"] == "mysql"
        assert f"-f {stack.compose.file} logs --tail 5 mysql" in fake_bin.calls()[-1]

    def test_compose_failure(
        self, stack: Stack, fake_bin: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_COMPOSE_EXIT", "1")
        result = LaunchService(stack).ps()
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "COMPOSE_FAILED"
        assert result.error.detail["exit_code"] == 1
        assert result.data["output"] == "fake compose output\n"

    def test_preflight_guards_explicit_actions(self, stack: Stack, fake_bin: Any) -> None:
        fake_bin.remove("docker-compose")
        result = LaunchService(stack).down(volumes=True)
        assert result.error is not None
        assert result.error.code == "MISSING_TOOL"
        assert fake_bin.calls() == ["docker info"]
