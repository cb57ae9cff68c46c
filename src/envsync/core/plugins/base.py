"""Base plugin interface and specifications using pluggy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    import typer

hookspec = pluggy.HookspecMarker("envsync")
hookimpl = pluggy.HookimplMarker("envsync")


class _PluginSpec:
    """Plugin hook specifications."""

    @hookspec
    def initialize(self, config: dict[str, Any]) -> None:
        """Initialize the plugin with its configuration section.

        Args:
            config: Plugin-specific configuration dictionary.
        """

    @hookspec
    def register_commands(self, app: typer.Typer) -> None:
        """Register CLI commands with the main application.

        Args:
            app: The main Typer application to register commands with.
        """

    @hookspec
    def cleanup(self) -> None:
        """Release plugin resources on shutdown."""


class Plugin:
    """Base class for all plugins.

    Subclasses must set ``name`` and ``version``.
    """

    name: str = "base"
    version: str = "0.0.0"
    description: str = ""

    def __init__(self) -> None:
        if self.name == "base":
            raise ValueError(f"{self.__class__.__name__} must define 'name' class attribute")
        if self.version == "0.0.0":
            raise ValueError(f"{self.__class__.__name__} must define 'version' class attribute")
        self._config: dict[str, Any] = {}
        self._initialized: bool = False

    @hookimpl
    def initialize(self, config: dict[str, Any]) -> None:
        """Store the configuration and run ``on_initialize``.

        The plugin only counts as initialized once ``on_initialize`` succeeds.
        """
        self._config = config
        self.on_initialize()
        self._initialized = True

    def on_initialize(self) -> None:
        """Hook for subclasses to perform initialization logic."""

    @hookimpl
    def register_commands(self, app: typer.Typer) -> None:
        """Register CLI commands. Override in subclasses."""

    @hookimpl
    def cleanup(self) -> None:
        """Cleanup resources. Override in subclasses."""
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        """Check if the plugin is initialized."""
        return self._initialized
