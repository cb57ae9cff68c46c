"""Shared pytest fixtures and fakes for envsync tests."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterable, Sequence
from pathlib import Path
from typing import Any

import pytest
import typer
from typer.testing import CliRunner

from envsync.cli.main import app
from envsync.integrations.vercel.exceptions import VercelCommandError, VercelEnvExistsError
from envsync.services.envsync.exclusions import ExclusionPolicy
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.models import Environment
from envsync.services.envsync.remote_store import RemoteStore


class FakeTransport:
    """In-memory remote backend keyed by remote environment name.

    Failure switches:
        pull_failures: number of upcoming pull_env calls that fail.
        fail_list: every list_env_names call fails.
        fail_add_keys / fail_remove_keys: add/remove of these keys fails.
        fail_version: get_version fails.
    """

    def __init__(self, envs: dict[str, dict[str, str]] | None = None) -> None:
        self.envs: dict[str, dict[str, str]] = {k: dict(v) for k, v in (envs or {}).items()}
        self.pull_failures = 0
        self.fail_list = False
        self.fail_version = False
        self.fail_add_keys: set[str] = set()
        self.fail_remove_keys: set[str] = set()
        self.calls: list[tuple[str, ...]] = []
        self.closed = False

    def get_version(self) -> str:
        if self.fail_version:
            raise VercelCommandError("vercel --version failed")
        return "Vercel CLI 37.4.2"

    def pull_env(self, environment: str) -> dict[str, str]:
        self.calls.append(("pull", environment))
        if self.pull_failures > 0:
            self.pull_failures -= 1
            raise VercelCommandError("vercel env pull failed", environment=environment)
        return dict(self.envs.get(environment, {}))

    def list_env_names(self, environment: str) -> list[str]:
        self.calls.append(("list", environment))
        if self.fail_list:
            raise VercelCommandError("vercel env ls failed", environment=environment)
        return list(self.envs.get(environment, {}))

    def add_env(self, key: str, environment: str, value: str) -> None:
        self.calls.append(("add", key, environment))
        if key in self.fail_add_keys:
            raise VercelCommandError("vercel env add failed", environment=environment, key=key)
        store = self.envs.setdefault(environment, {})
        if key in store:
            raise VercelEnvExistsError(key=key, environment=environment)
        store[key] = value

    def remove_env(self, key: str, environment: str) -> None:
        self.calls.append(("remove", key, environment))
        store = self.envs.get(environment, {})
        if key in self.fail_remove_keys or key not in store:
            raise VercelCommandError("vercel env rm failed", environment=environment, key=key)
        del store[key]

    def close(self) -> None:
        self.closed = True


class ScriptedPrompter:
    """Prompter answering from pre-recorded scripts.

    An answer that is an exception instance is raised instead of returned.
    """

    def __init__(
        self,
        choices: Iterable[Any] = (),
        confirms: Iterable[Any] = (),
        selections: Iterable[Any] = (),
    ) -> None:
        self.choices = list(choices)
        self.confirms = list(confirms)
        self.selections = list(selections)
        self.choose_calls: list[tuple[str, list[tuple[str, str]]]] = []
        self.confirm_calls: list[tuple[str, bool]] = []
        self.choose_many_calls: list[tuple[str, list[tuple[str, str]]]] = []

    @staticmethod
    def _answer(script: list[Any]) -> Any:
        if not script:
            raise AssertionError("prompter script exhausted")
        answer = script.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def choose(self, message: str, choices: Sequence[tuple[str, str]]) -> str:
        self.choose_calls.append((message, list(choices)))
        return self._answer(self.choices)

    def choose_many(self, message: str, choices: Sequence[tuple[str, str]]) -> list[str]:
        self.choose_many_calls.append((message, list(choices)))
        return self._answer(self.selections)

    def confirm(self, message: str, default: bool = False) -> bool:
        self.confirm_calls.append((message, default))
        return self._answer(self.confirms)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """Create a temporary project config file."""
    config_path = temp_dir / ".envsync.yaml"
    config_path.write_text(
        """
version: "1.0"
environments:
  development:
    local_file: .env.local
    remote_environment: development
exclusions:
  all: [VERCEL_URL]
plugins:
  vercel:
    backend: cli
    command: vercel
"""
    )
    return config_path


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Empty in-memory remote backend."""
    return FakeTransport()


@pytest.fixture
def remote_store(fake_transport: FakeTransport) -> RemoteStore:
    """RemoteStore over the fake transport."""
    return RemoteStore(fake_transport)


@pytest.fixture
def local_store(temp_dir: Path) -> LocalEnvStore:
    """LocalEnvStore rooted in a temporary directory."""
    return LocalEnvStore(base_dir=temp_dir)


@pytest.fixture
def exclusions() -> ExclusionPolicy:
    """Default exclusion policy."""
    return ExclusionPolicy.default()


@pytest.fixture
def development() -> Environment:
    """The development environment."""
    return Environment.DEVELOPMENT


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Clear ENVSYNC_/VERCEL_TOKEN variables and keep logs out of $HOME."""
    for key in list(os.environ.keys()):
        if key.startswith("ENVSYNC_") or key == "VERCEL_TOKEN":
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("envsync.logging.config.LOG_DIR", tmp_path / "logs")


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None]:
    """Drop handlers installed by configure_logging during a test."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    yield
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers = original_handlers
    root.setLevel(original_level)
