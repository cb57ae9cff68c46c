"""Per-invocation state shared between the root callback and commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import typer

from envsync.core.config.models import SystemConfig


@dataclass
class AppContext:
    """Loaded configuration and the project directory it applies to."""

    config: SystemConfig = field(default_factory=SystemConfig)
    config_path: Path | None = None
    project_dir: Path = field(default_factory=Path.cwd)


def get_app_context(ctx: typer.Context | None) -> AppContext:
    """Return the AppContext stored by the root callback.

    Falls back to defaults when a command runs without the root callback,
    as happens when a sub-app is invoked directly in tests.
    """
    if ctx is not None:
        root = ctx.find_root()
        if isinstance(root.obj, AppContext):
            return root.obj
    return AppContext()
