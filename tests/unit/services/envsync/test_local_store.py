"""Unit tests for local dotenv persistence."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from envsync.services.envsync.exceptions import LocalStoreError
from envsync.services.envsync.local_store import (
    DEFAULT_LOCAL_FILES,
    LocalEnvStore,
    atomic_write_text,
)
from envsync.services.envsync.models import Environment

DEV = Environment.DEVELOPMENT
PROD = Environment.PRODUCTION


@pytest.mark.unit
class TestAtomicWriteText:
    """Tests for atomic_write_text."""

    def test_writes_content(self, temp_dir: Path) -> None:
        """Content lands in the target file."""
        target = temp_dir / ".env.local"
        atomic_write_text(target, 'A="1"\n')
        assert target.read_text() == 'A="1"\n'

    def test_creates_parent_directories(self, temp_dir: Path) -> None:
        """Missing parent directories are created."""
        target = temp_dir / "nested" / "dir" / ".env"
        atomic_write_text(target, "")
        assert target.exists()

    def test_failed_replace_keeps_original_and_cleans_up(self, temp_dir: Path) -> None:
        """An interrupted write leaves the original file and no temp file."""
        target = temp_dir / ".env.local"
        target.write_text('A="old"\n')

        with (
            patch("envsync.services.envsync.local_store.os.replace", side_effect=OSError("boom")),
            pytest.raises(OSError, match="boom"),
        ):
            atomic_write_text(target, 'A="new"\n')

        assert target.read_text() == 'A="old"\n'
        assert os.listdir(temp_dir) == [".env.local"]

    def test_interrupt_during_write_cleans_up(self, temp_dir: Path) -> None:
        """KeyboardInterrupt mid-write removes the temp file and propagates."""
        target = temp_dir / ".env.local"

        with (
            patch(
                "envsync.services.envsync.local_store.os.fsync",
                side_effect=KeyboardInterrupt,
            ),
            pytest.raises(KeyboardInterrupt),
        ):
            atomic_write_text(target, 'A="1"\n')

        assert os.listdir(temp_dir) == []


@pytest.mark.unit
class TestLocalEnvStore:
    """Tests for LocalEnvStore."""

    def test_default_files(self, local_store: LocalEnvStore, temp_dir: Path) -> None:
        """Default files are .env.local and .env.prod."""
        assert local_store.path_for(DEV) == temp_dir / DEFAULT_LOCAL_FILES[DEV]
        assert local_store.path_for(PROD) == temp_dir / ".env.prod"
        assert local_store.display_name(DEV) == ".env.local"

    def test_absolute_paths_are_kept(self, temp_dir: Path) -> None:
        """Absolute file paths ignore the base directory."""
        absolute = temp_dir / "elsewhere" / ".env"
        store = LocalEnvStore({DEV: absolute}, base_dir=Path("/nonexistent"))
        assert store.path_for(DEV) == absolute

    def test_unconfigured_environment(self, temp_dir: Path) -> None:
        """An environment without a file raises LocalStoreError."""
        store = LocalEnvStore({DEV: ".env"}, base_dir=temp_dir)
        with pytest.raises(LocalStoreError, match="No local file configured"):
            store.path_for(PROD)

    def test_read_creates_missing_file(self, local_store: LocalEnvStore, temp_dir: Path) -> None:
        """Reading a missing file creates it empty."""
        assert local_store.read(DEV) == {}
        assert (temp_dir / ".env.local").read_text() == ""

    def test_read_parses_file(self, local_store: LocalEnvStore, temp_dir: Path) -> None:
        """Existing files are parsed."""
        (temp_dir / ".env.prod").write_text('# prod\nAPI_KEY="abc"\n')
        assert local_store.read(PROD) == {"API_KEY": "abc"}

    def test_read_failure_raises_local_store_error(self, temp_dir: Path) -> None:
        """Unreadable files raise LocalStoreError carrying the path."""
        (temp_dir / ".env.local").mkdir()
        store = LocalEnvStore(base_dir=temp_dir)

        with pytest.raises(LocalStoreError) as exc_info:
            store.read(DEV)

        assert exc_info.value.path == temp_dir / ".env.local"
        assert exc_info.value.environment == "development"
        assert isinstance(exc_info.value.original_error, OSError)

    def test_invalid_utf8_raises_local_store_error(self, temp_dir: Path) -> None:
        """A file that is not valid UTF-8 is a read failure, not a crash."""
        (temp_dir / ".env.local").write_bytes(b'A="\xff"\n')
        store = LocalEnvStore(base_dir=temp_dir)

        with pytest.raises(LocalStoreError, match="Cannot read .env.local") as exc_info:
            store.read(DEV)

        assert isinstance(exc_info.value.original_error, UnicodeDecodeError)

    def test_write_escapes_multiline_values(
        self, local_store: LocalEnvStore, temp_dir: Path
    ) -> None:
        """Multi-line values are stored on one line and read back intact."""
        local_store.set_value(DEV, "PEM", "line1\nline2")

        assert (temp_dir / ".env.local").read_text() == 'PEM="line1\\nline2"\n'
        assert local_store.read(DEV) == {"PEM": "line1\nline2"}

    def test_write_then_read(self, local_store: LocalEnvStore) -> None:
        """A written mapping reads back equal."""
        env_vars = {"A": "1", "B": "with space", "C": ""}
        local_store.write(DEV, env_vars)
        assert local_store.read(DEV) == env_vars

    def test_write_failure_raises_local_store_error(self, local_store: LocalEnvStore) -> None:
        """OSError during write is wrapped."""
        with (
            patch(
                "envsync.services.envsync.local_store.atomic_write_text",
                side_effect=PermissionError("denied"),
            ),
            pytest.raises(LocalStoreError, match="Cannot write"),
        ):
            local_store.write(DEV, {"A": "1"})

    def test_set_value_inserts_and_replaces(self, local_store: LocalEnvStore) -> None:
        """set_value keeps other keys and their order."""
        local_store.write(DEV, {"A": "1", "B": "2"})
        local_store.set_value(DEV, "A", "10")
        local_store.set_value(DEV, "C", "3")
        assert local_store.read(DEV) == {"A": "10", "B": "2", "C": "3"}
        assert list(local_store.read(DEV)) == ["A", "B", "C"]

    def test_remove_key(self, local_store: LocalEnvStore) -> None:
        """remove_key reports whether the key was present."""
        local_store.write(DEV, {"A": "1", "B": "2"})
        assert local_store.remove_key(DEV, "A") is True
        assert local_store.remove_key(DEV, "A") is False
        assert local_store.read(DEV) == {"B": "2"}

    def test_environments_use_separate_files(self, local_store: LocalEnvStore) -> None:
        """Writes to one environment do not touch the other."""
        local_store.write(DEV, {"A": "dev"})
        local_store.write(PROD, {"A": "prod"})
        assert local_store.read(DEV) == {"A": "dev"}
        assert local_store.read(PROD) == {"A": "prod"}
