"""Unit tests for the vercel CLI wrapper."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from envsync.integrations.vercel.cli_client import VercelCLIClient, parse_env_list_output
from envsync.integrations.vercel.config import VercelPluginConfig
from envsync.integrations.vercel.exceptions import (
    VercelBinaryNotFoundError,
    VercelCommandError,
    VercelEnvExistsError,
    VercelError,
)

_WHICH = "envsync.integrations.vercel.cli_client.shutil.which"
_RUN = "envsync.integrations.vercel.cli_client.subprocess.run"

LIST_OUTPUT = """\
Vercel CLI 37.4.2
> Environment Variables found for acme/web [120ms]

 name                  value               environments        created
 API_KEY               Encrypted           Development         3d ago
 DATABASE_URL          Encrypted           Development         5d ago
 NEXT_PUBLIC_SITE      Encrypted           Development         5d ago

Common next commands:
- `vercel env add`
"""


def _completed(stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr=stderr)


def _client(**config: Any) -> VercelCLIClient:
    with patch(_WHICH, return_value="/usr/local/bin/vercel"):
        return VercelCLIClient(VercelPluginConfig(**config), cwd=Path("/project"))


@pytest.mark.unit
class TestParseEnvListOutput:
    """Tests for parse_env_list_output."""

    def test_extracts_names(self) -> None:
        """Variable rows are extracted and noise is skipped."""
        assert parse_env_list_output(LIST_OUTPUT) == [
            "API_KEY",
            "DATABASE_URL",
            "NEXT_PUBLIC_SITE",
        ]

    def test_empty_output(self) -> None:
        """No rows means no names."""
        assert parse_env_list_output("Vercel CLI 37.4.2\n> No Environment Variables found") == []

    def test_duplicates_removed(self) -> None:
        """Names appear once."""
        assert parse_env_list_output("A Encrypted\nA Encrypted\n") == ["A"]

    def test_invalid_names_skipped(self) -> None:
        """Tokens that are not variable names are ignored."""
        assert parse_env_list_output("1ABC x\nhello-world y\nOK z") == ["OK"]


@pytest.mark.unit
class TestVercelCLIClientInit:
    """Tests for client construction."""

    def test_binary_not_found(self) -> None:
        """A missing binary raises VercelBinaryNotFoundError."""
        with patch(_WHICH, return_value=None), pytest.raises(VercelBinaryNotFoundError) as exc:
            VercelCLIClient(VercelPluginConfig(command="bunx vercel"))
        assert exc.value.command == "bunx"

    def test_command_prefix_resolved(self) -> None:
        """The first word is resolved; the rest is kept."""
        with patch(_WHICH, return_value="/usr/bin/bun") as which:
            client = VercelCLIClient(VercelPluginConfig(command="bun vercel"))
        which.assert_called_once_with("bun")
        assert client._command == ["/usr/bin/bun", "vercel"]


@pytest.mark.unit
class TestVercelCLIClientCommands:
    """Tests for the wrapped commands."""

    def test_get_version(self) -> None:
        """The first output line is the version."""
        client = _client()
        with patch(_RUN, return_value=_completed(stdout="Vercel CLI 37.4.2\nmore")) as run:
            assert client.get_version() == "Vercel CLI 37.4.2"
        assert run.call_args.args[0] == ["/usr/local/bin/vercel", "--version"]
        assert run.call_args.kwargs["cwd"] == Path("/project")

    def test_get_version_from_stderr(self) -> None:
        """Some CLI versions print the version to stderr."""
        client = _client()
        with patch(_RUN, return_value=_completed(stderr="37.4.2\n")):
            assert client.get_version() == "37.4.2"

    def test_global_args(self) -> None:
        """Token and scope are appended to every command."""
        client = _client(token="tok", scope="acme")
        with patch(_RUN, return_value=_completed(stdout="37")) as run:
            client.get_version()
        assert run.call_args.args[0][-4:] == ["--token", "tok", "--scope", "acme"]

    def test_pull_env(self) -> None:
        """pull_env reads the file written by vercel env pull."""
        client = _client()

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            target = Path(cmd[3])
            target.write_text('API_KEY="abc"\nVERCEL_ENV="development"\n')
            return _completed()

        with patch(_RUN, side_effect=fake_run) as run:
            values = client.pull_env("development")

        assert values == {"API_KEY": "abc", "VERCEL_ENV": "development"}
        args = run.call_args.args[0]
        assert args[1:3] == ["env", "pull"]
        assert args[4:] == ["--environment", "development", "--yes"]
        assert not Path(args[3]).exists()

    def test_pull_env_decodes_escaped_newlines(self) -> None:
        """Escaped line breaks in the pulled file are decoded."""
        client = _client()

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            Path(cmd[3]).write_text('PEM="a\\nb"\n')
            return _completed()

        with patch(_RUN, side_effect=fake_run):
            assert client.pull_env("development") == {"PEM": "a\nb"}

    def test_pull_env_invalid_utf8(self) -> None:
        """An undecodable pulled file is a VercelError."""
        client = _client()

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            Path(cmd[3]).write_bytes(b"A=\xff\n")
            return _completed()

        with patch(_RUN, side_effect=fake_run), pytest.raises(VercelError, match="UTF-8"):
            client.pull_env("development")

    def test_pull_env_without_file(self) -> None:
        """A pull that writes nothing is an error."""
        client = _client()
        with patch(_RUN, return_value=_completed()), pytest.raises(VercelError):
            client.pull_env("production")

    def test_pull_env_command_failure(self) -> None:
        """A non-zero exit becomes VercelCommandError with context."""
        client = _client()
        error = subprocess.CalledProcessError(1, ["vercel"], stderr="Error: not linked")
        with patch(_RUN, side_effect=error), pytest.raises(VercelCommandError) as exc:
            client.pull_env("production")
        assert "not linked" in exc.value.message
        assert exc.value.environment == "production"
        assert exc.value.stderr == "Error: not linked"

    def test_timeout(self) -> None:
        """A timeout becomes VercelCommandError."""
        client = _client(timeout=5)
        with (
            patch(_RUN, side_effect=subprocess.TimeoutExpired(["vercel"], 5)),
            pytest.raises(VercelCommandError, match="timed out after 5"),
        ):
            client.list_env_names("development")

    def test_list_env_names(self) -> None:
        """Names are parsed from stdout and stderr."""
        client = _client()
        with patch(_RUN, return_value=_completed(stderr=LIST_OUTPUT)) as run:
            assert client.list_env_names("development") == [
                "API_KEY",
                "DATABASE_URL",
                "NEXT_PUBLIC_SITE",
            ]
        assert run.call_args.args[0][1:] == ["env", "ls", "development"]

    def test_add_env_passes_value_on_stdin(self) -> None:
        """The value is written to stdin, never to the argument list."""
        client = _client()
        with patch(_RUN, return_value=_completed()) as run:
            client.add_env("API_KEY", "production", "s3cret")
        assert run.call_args.args[0][1:] == ["env", "add", "API_KEY", "production"]
        assert run.call_args.kwargs["input"] == "s3cret"
        assert "s3cret" not in run.call_args.args[0]

    def test_add_env_exists(self) -> None:
        """An already-exists error is reported as a collision."""
        client = _client()
        error = subprocess.CalledProcessError(
            1, ["vercel"], stderr='Error: A variable with the name "API_KEY" already exists'
        )
        with patch(_RUN, side_effect=error), pytest.raises(VercelEnvExistsError) as exc:
            client.add_env("API_KEY", "production", "v")
        assert exc.value.key == "API_KEY"

    def test_add_env_other_failure(self) -> None:
        """Other errors stay VercelCommandError."""
        client = _client()
        error = subprocess.CalledProcessError(1, ["vercel"], stderr="Error: forbidden")
        with patch(_RUN, side_effect=error), pytest.raises(VercelCommandError) as exc:
            client.add_env("API_KEY", "production", "v")
        assert not isinstance(exc.value, VercelEnvExistsError)

    def test_remove_env(self) -> None:
        """remove_env passes -y to skip the CLI's own prompt."""
        client = _client()
        with patch(_RUN, return_value=_completed()) as run:
            client.remove_env("API_KEY", "development")
        assert run.call_args.args[0][1:] == ["env", "rm", "API_KEY", "development", "-y"]

    def test_failure_without_stderr(self) -> None:
        """The exit code is reported when stderr is empty."""
        client = _client()
        with (
            patch(_RUN, side_effect=subprocess.CalledProcessError(3, ["vercel"], stderr="")),
            pytest.raises(VercelCommandError, match="exit code 3"),
        ):
            client.remove_env("A", "development")

    def test_run_uses_text_mode_and_check(self) -> None:
        """Commands run with captured text output and check=True."""
        client = _client()
        run = MagicMock(return_value=_completed(stdout="x"))
        with patch(_RUN, run):
            client.get_version()
        kwargs = run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is True
