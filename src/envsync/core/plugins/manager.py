"""Plugin manager for loading and managing plugins."""

from __future__ import annotations

import importlib.metadata
from typing import TYPE_CHECKING, Any

import pluggy
import structlog

from envsync.core.plugins.base import Plugin, _PluginSpec

if TYPE_CHECKING:
    import typer

logger = structlog.get_logger()


class PluginManager:
    """Manages plugin discovery, loading, and lifecycle.

    Built-in plugins are registered directly; third-party remote store
    providers are discovered from the ``envsync.plugins`` entry-point group.
    """

    NAMESPACE = "envsync.plugins"

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager("envsync")
        self._pm.add_hookspecs(_PluginSpec)
        self._plugins: dict[str, Plugin] = {}
        self._initialized = False

    def discover_plugins(self) -> list[str]:
        """Discover available plugins from entry points.

        Returns:
            List of discovered plugin names.
        """
        discovered = []
        try:
            for ep in importlib.metadata.entry_points(group=self.NAMESPACE):
                discovered.append(ep.name)
                logger.debug("plugin_discovered", name=ep.name, value=ep.value)
        except Exception as e:
            logger.warning("plugin_discovery_failed", error=str(e))
        return discovered

    def register_plugin(self, plugin: Plugin) -> None:
        """Register an already constructed plugin instance.

        Registering a second plugin with the same name is a no-op.
        """
        if plugin.name in self._plugins:
            logger.debug("plugin_already_loaded", name=plugin.name)
            return
        self._pm.register(plugin, name=plugin.name)
        self._plugins[plugin.name] = plugin
        logger.debug("plugin_registered", name=plugin.name, version=plugin.version)

    def load_plugin(self, name: str) -> bool:
        """Load a plugin by name from entry points.

        Args:
            name: The plugin name to load.

        Returns:
            True if loaded successfully, False otherwise.
        """
        if name in self._plugins:
            logger.debug("plugin_already_loaded", name=name)
            return True

        try:
            for ep in importlib.metadata.entry_points(group=self.NAMESPACE):
                if ep.name == name:
                    plugin_class = ep.load()
                    plugin = plugin_class() if callable(plugin_class) else plugin_class
                    self._pm.register(plugin, name=name)
                    self._plugins[name] = plugin
                    logger.info("plugin_loaded", name=name, version=plugin.version)
                    return True

            logger.warning("plugin_not_found", name=name)
            return False
        except Exception as e:
            logger.error("plugin_load_failed", name=name, error=str(e))
            return False

    def initialize_all(self, config: dict[str, Any]) -> None:
        """Initialize all loaded plugins.

        Args:
            config: Raw configuration; each plugin gets ``plugins.<name>``.
        """
        for name, plugin in self._plugins.items():
            plugin_config = config.get("plugins", {}).get(name, {})
            try:
                plugin.initialize(plugin_config)
                logger.debug("plugin_initialized", name=name)
            except Exception as e:
                logger.error("plugin_initialize_failed", name=name, error=str(e))

        self._initialized = True

    def register_commands(self, app: typer.Typer) -> None:
        """Register commands from all loaded plugins.

        Args:
            app: The Typer application to register commands with.
        """
        try:
            self._pm.hook.register_commands(app=app)
        except Exception as e:
            logger.error("plugin_command_registration_failed", error=str(e))

    def cleanup_all(self) -> None:
        """Cleanup all loaded plugins."""
        try:
            self._pm.hook.cleanup()
        except Exception as e:
            logger.error("plugin_cleanup_failed", error=str(e))
        self._initialized = False

    def get_plugin(self, name: str) -> Plugin | None:
        """Get a loaded plugin by name."""
        return self._plugins.get(name)

    def list_plugins(self) -> list[dict[str, Any]]:
        """List all loaded plugins with their info."""
        return [
            {
                "name": p.name,
                "version": p.version,
                "description": p.description,
                "initialized": p.is_initialized,
            }
            for p in self._plugins.values()
        ]
