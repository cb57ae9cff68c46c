"""Vercel CLI wrapper for project environment variables.

Wraps the vercel binary via subprocess for the four environment variable
operations the reconciler needs (pull, ls, add, rm) plus a version check.
The working directory must be a project linked with ``vercel link``.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import tempfile
from pathlib import Path

import structlog

from envsync.integrations.vercel.config import VercelPluginConfig
from envsync.integrations.vercel.exceptions import (
    VercelBinaryNotFoundError,
    VercelCommandError,
    VercelEnvExistsError,
    VercelError,
)
from envsync.utils.dotenv import parse_env_content

logger = structlog.get_logger()

ENV_NAME_PATTERN = re.compile(r"^[A-Z_][A-Z0-9_]*$", re.IGNORECASE)

# Lines of ``vercel env ls`` output that are never variable rows
_LIST_NOISE_PREFIXES = ("Vercel CLI", ">", "name", "Common next commands", "-")
_LIST_NOISE_FRAGMENTS = ("Environment Variables found", "Retrieving project", "Saving")


def parse_env_list_output(output: str) -> list[str]:
    """Extract variable names from ``vercel env ls`` output.

    Args:
        output: Raw stdout of the list command.

    Returns:
        Variable names in listing order, without duplicates.
    """
    names: list[str] = []
    for line in output.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(_LIST_NOISE_PREFIXES):
            continue
        if any(fragment in stripped for fragment in _LIST_NOISE_FRAGMENTS):
            continue
        name = stripped.split()[0]
        if name.startswith(("`", "vercel")):
            continue
        if ENV_NAME_PATTERN.match(name) and name not in names:
            names.append(name)
    return names


class VercelCLIClient:
    """Client for the vercel CLI.

    Args:
        config: Plugin configuration (command prefix, token, scope, timeout).
        cwd: Linked project directory. Defaults to the current directory.

    Raises:
        VercelBinaryNotFoundError: If the first word of the command is not
            found in PATH.
    """

    def __init__(self, config: VercelPluginConfig | None = None, cwd: Path | None = None) -> None:
        self._config = config or VercelPluginConfig()
        self._command = self._find_command(self._config.command)
        self._cwd = cwd
        self._log = logger.bind(command=" ".join(self._command))
        self._log.debug("vercel_cli_client_initialized")

    @staticmethod
    def _find_command(command: list[str]) -> list[str]:
        found = shutil.which(command[0])
        if not found:
            raise VercelBinaryNotFoundError(command[0])
        return [found, *command[1:]]

    def _global_args(self) -> list[str]:
        args: list[str] = []
        if self._config.token:
            args.extend(["--token", self._config.token])
        if self._config.scope:
            args.extend(["--scope", self._config.scope])
        return args

    def _run(
        self,
        args: list[str],
        *,
        input_text: str | None = None,
        environment: str | None = None,
        key: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run a vercel command.

        Args:
            args: Command arguments (without the command prefix).
            input_text: Text written to the command's stdin.
            environment: Environment for error context.
            key: Variable name for error context.

        Returns:
            CompletedProcess result.

        Raises:
            VercelCommandError: On non-zero exit or timeout.
        """
        cmd = [*self._command, *args, *self._global_args()]
        self._log.debug("running_vercel_command", args=args)

        try:
            return subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._config.timeout,
                cwd=self._cwd,
            )
        except subprocess.CalledProcessError as e:
            raise VercelCommandError(
                message=f"vercel {' '.join(args[:2])} failed: "
                f"{e.stderr.strip() if e.stderr else f'exit code {e.returncode}'}",
                stderr=e.stderr,
                environment=environment,
                key=key,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise VercelCommandError(
                message=f"vercel command timed out after {self._config.timeout}s",
                environment=environment,
                key=key,
            ) from e

    # -----------------------------------------------------------------------
    # Version
    # -----------------------------------------------------------------------

    def get_version(self) -> str:
        """Return the first line of ``vercel --version``.

        Raises:
            VercelCommandError: If the version command fails.
        """
        result = self._run(["--version"])
        lines = (result.stdout or result.stderr).strip().splitlines()
        return lines[0] if lines else "unknown"

    # -----------------------------------------------------------------------
    # Environment variables
    # -----------------------------------------------------------------------

    def pull_env(self, environment: str) -> dict[str, str]:
        """Fetch every variable with its decrypted value.

        Runs ``vercel env pull`` into a temporary file which is removed
        afterwards.

        Raises:
            VercelError: If the pull fails or writes no file.
        """
        with tempfile.TemporaryDirectory(prefix="envsync-") as tmpdir:
            target = Path(tmpdir) / f".env.{environment}"
            self._run(
                ["env", "pull", str(target), "--environment", environment, "--yes"],
                environment=environment,
            )
            if not target.exists():
                raise VercelError("vercel env pull produced no file", environment=environment)
            try:
                env_vars = parse_env_content(target.read_text(encoding="utf-8"))
            except UnicodeDecodeError as e:
                raise VercelError(
                    f"vercel env pull wrote invalid UTF-8: {e}", environment=environment
                ) from e

        self._log.info("vercel_env_pulled", environment=environment, count=len(env_vars))
        return env_vars

    def list_env_names(self, environment: str) -> list[str]:
        """List variable names without values.

        Raises:
            VercelCommandError: If the list command fails.
        """
        result = self._run(["env", "ls", environment], environment=environment)
        # The CLI prints the table to stderr on some versions
        names = parse_env_list_output(f"{result.stdout}\n{result.stderr}")
        self._log.info("vercel_env_listed", environment=environment, count=len(names))
        return names

    def add_env(self, key: str, environment: str, value: str) -> None:
        """Create a variable in environment.

        Raises:
            VercelEnvExistsError: If the variable already exists.
            VercelCommandError: On any other failure.
        """
        try:
            self._run(
                ["env", "add", key, environment],
                input_text=value,
                environment=environment,
                key=key,
            )
        except VercelCommandError as e:
            if e.stderr and "already exists" in e.stderr.lower():
                raise VercelEnvExistsError(key=key, environment=environment) from e
            raise
        self._log.info("vercel_env_added", environment=environment, key=key)

    def remove_env(self, key: str, environment: str) -> None:
        """Delete a variable from environment.

        Raises:
            VercelCommandError: If the remove command fails.
        """
        self._run(["env", "rm", key, environment, "-y"], environment=environment, key=key)
        self._log.info("vercel_env_removed", environment=environment, key=key)
