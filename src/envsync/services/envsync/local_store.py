"""Local dotenv file persistence.

Each environment maps to one dotenv file. Writes go to a temporary file in
the same directory which then replaces the target, so an interrupted write
never leaves a partial file behind.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

import structlog

from envsync.services.envsync.exceptions import LocalStoreError
from envsync.services.envsync.models import Environment
from envsync.utils.dotenv import parse_env_content, serialize_env

logger = structlog.get_logger()

DEFAULT_LOCAL_FILES: dict[Environment, str] = {
    Environment.DEVELOPMENT: ".env.local",
    Environment.PRODUCTION: ".env.prod",
}


def atomic_write_text(path: Path, content: str) -> None:
    """Write content to path via a temporary file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


class LocalEnvStore:
    """Reads and writes the per-environment dotenv files.

    Args:
        files: File name (or path) per environment.
        base_dir: Directory relative file names resolve against.
    """

    def __init__(
        self,
        files: Mapping[Environment, str | Path] | None = None,
        base_dir: Path | None = None,
    ) -> None:
        self._base_dir = base_dir or Path.cwd()
        self._files = {
            Environment(env): Path(name) for env, name in (files or DEFAULT_LOCAL_FILES).items()
        }

    def path_for(self, environment: Environment) -> Path:
        """Absolute path of the file backing environment."""
        try:
            name = self._files[environment]
        except KeyError:
            raise LocalStoreError(
                "No local file configured", environment=str(environment)
            ) from None
        return name if name.is_absolute() else self._base_dir / name

    def display_name(self, environment: Environment) -> str:
        """Configured file name, as shown to the operator."""
        return str(self._files.get(environment, "?"))

    def read(self, environment: Environment) -> dict[str, str]:
        """Read the mapping for environment, creating an empty file if missing.

        Raises:
            LocalStoreError: If the file exists but cannot be read or is not
                valid UTF-8, or cannot be created.
        """
        path = self.path_for(environment)
        try:
            if not path.exists():
                logger.info("local_file_created", environment=str(environment), path=str(path))
                atomic_write_text(path, "")
                return {}
            return parse_env_content(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise LocalStoreError(
                f"Cannot read {path.name}: {e}",
                path=path,
                environment=str(environment),
                original_error=e,
            ) from e

    def write(self, environment: Environment, env_vars: Mapping[str, str]) -> None:
        """Persist the full mapping for environment.

        Raises:
            LocalStoreError: If the file cannot be written.
        """
        path = self.path_for(environment)
        try:
            atomic_write_text(path, serialize_env(env_vars))
        except OSError as e:
            raise LocalStoreError(
                f"Cannot write {path.name}: {e}",
                path=path,
                environment=str(environment),
                original_error=e,
            ) from e
        logger.debug("local_file_written", environment=str(environment), count=len(env_vars))

    def set_value(self, environment: Environment, key: str, value: str) -> None:
        """Insert or replace a single key."""
        env_vars = self.read(environment)
        env_vars[key] = value
        self.write(environment, env_vars)

    def remove_key(self, environment: Environment, key: str) -> bool:
        """Remove a single key.

        Returns:
            True if the key was present.
        """
        env_vars = self.read(environment)
        if key not in env_vars:
            return False
        del env_vars[key]
        self.write(environment, env_vars)
        return True
