"""Shared test fixtures for manage tests.

Provides:
- FakeCluster: a recording `ClusterAdapter` that can be told to fail
- FakeOc: a scripted stand-in for `OcClient`
- cli fixtures: isolated settings dirs, CliRunner, patched adapter factory
"""

from __future__ import annotations

from typing import Callable, Sequence

import pytest
from typer.testing import CliRunner

from core.errors import ExternalCommandError


class FakeCluster:
    """Records every adapter call; raises for the method names in `fail_on`."""

    def __init__(self, fail_on: Sequence[str] = ()) -> None:
        self.calls: list[tuple] = []
        self.fail_on = set(fail_on)

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise ExternalCommandError(f"{name} failed")

    def switch_project(self) -> None:
        self._record("switch_project")

    def run_in_pod(self, pod: str, command: str, interactive: bool = False) -> None:
        self._record("run_in_pod", pod, command, interactive)

    def drop_and_recreate_database(self, api_pod: str, db_pod: str) -> None:
        self._record("drop_and_recreate_database", api_pod, db_pod)

    def register_dids(self, names: Sequence[str]) -> None:
        self._record("register_dids", list(names))

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class FakeOc:
    """Scripted `OcClient`: `responder(args)` returns stdout or raises."""

    def __init__(self, responder: Callable[[list[str]], str] | None = None) -> None:
        self.calls: list[tuple[list[str], bool]] = []
        self._responder = responder or (lambda args: "")

    def run(self, args: Sequence[str], *, interactive: bool = False) -> str:
        args = list(args)
        self.calls.append((args, interactive))
        return self._responder(args)


@pytest.fixture
def fake_cluster():
    return FakeCluster()


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings layers at empty temp dirs and clear stray env vars."""

    settings_dir = tmp_path / "settings"
    settings_dir.mkdir()
    monkeypatch.setenv("MANAGE_SETTINGS_DIR", str(settings_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for name in (
        "PROJECT_NAMESPACE",
        "OCTOOLSBIN",
        "OC_BINARY",
        "LEDGER_URL",
        "SEARCH_INDEX_COMMAND",
        "MIGRATE_COMMAND",
        "WAIT_TIMEOUT_SECONDS",
        "POLL_INTERVAL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    return settings_dir


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def patched_cli(monkeypatch, isolated_settings, fake_cluster):
    """Make the CLI build `fake_cluster` instead of the OpenShift adapter.

    Returns a list that collects the `(options, settings)` the factory saw.
    """

    import cli.main

    seen: list[tuple] = []

    def factory(options, settings):
        seen.append((options, settings))
        return fake_cluster

    monkeypatch.setattr(cli.main, "build_cluster_adapter", factory)
    return seen
