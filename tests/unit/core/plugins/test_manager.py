"""Unit tests for core.plugins.manager module."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import typer

from envsync.core.plugins.base import Plugin, hookimpl
from envsync.core.plugins.manager import PluginManager

_ENTRY_POINTS = "envsync.core.plugins.manager.importlib.metadata.entry_points"


class _RecordingPlugin(Plugin):
    """Plugin recording the hooks it receives."""

    name = "recording"
    version = "1.2.3"
    description = "records hooks"

    def __init__(self) -> None:
        super().__init__()
        self.apps: list[typer.Typer] = []
        self.cleaned = False

    @hookimpl
    def register_commands(self, app: typer.Typer) -> None:
        self.apps.append(app)

    @hookimpl
    def cleanup(self) -> None:
        self.cleaned = True
        super().cleanup()


def _make_entry_point(name: str, plugin_class: type[Plugin]) -> MagicMock:
    """Return a MagicMock that acts as an importlib.metadata EntryPoint."""
    ep = MagicMock()
    ep.name = name
    ep.value = f"fake.module:{plugin_class.__name__}"
    ep.load.return_value = plugin_class
    return ep


@pytest.mark.unit
class TestPluginManagerInit:
    """Tests for PluginManager construction."""

    def test_initial_state(self) -> None:
        """PluginManager starts empty."""
        manager = PluginManager()
        assert manager.list_plugins() == []
        assert manager._initialized is False

    def test_namespace_constant(self) -> None:
        """PluginManager.NAMESPACE is the entry-point group."""
        assert PluginManager.NAMESPACE == "envsync.plugins"


@pytest.mark.unit
class TestDiscoverAndLoad:
    """Tests for entry-point discovery and loading."""

    def test_discover_returns_names(self) -> None:
        """Entry point names are returned."""
        eps = [_make_entry_point("recording", _RecordingPlugin)]
        with patch(_ENTRY_POINTS, return_value=eps):
            assert PluginManager().discover_plugins() == ["recording"]

    def test_discover_swallows_errors(self) -> None:
        """Discovery failures return an empty list."""
        with patch(_ENTRY_POINTS, side_effect=RuntimeError("broken metadata")):
            assert PluginManager().discover_plugins() == []

    def test_load_plugin(self) -> None:
        """A plugin class from an entry point is instantiated and registered."""
        manager = PluginManager()
        eps = [_make_entry_point("recording", _RecordingPlugin)]
        with patch(_ENTRY_POINTS, return_value=eps):
            assert manager.load_plugin("recording") is True
        assert isinstance(manager.get_plugin("recording"), _RecordingPlugin)

    def test_load_missing_plugin(self) -> None:
        """Unknown names return False."""
        with patch(_ENTRY_POINTS, return_value=[]):
            assert PluginManager().load_plugin("nope") is False

    def test_load_failure(self) -> None:
        """Import errors return False."""
        ep = _make_entry_point("recording", _RecordingPlugin)
        ep.load.side_effect = ImportError("missing dependency")
        with patch(_ENTRY_POINTS, return_value=[ep]):
            assert PluginManager().load_plugin("recording") is False

    def test_load_already_registered(self) -> None:
        """Loading a registered plugin is a no-op."""
        manager = PluginManager()
        manager.register_plugin(_RecordingPlugin())
        with patch(_ENTRY_POINTS) as entry_points:
            assert manager.load_plugin("recording") is True
        entry_points.assert_not_called()


@pytest.mark.unit
class TestLifecycle:
    """Tests for registration, initialization, commands and cleanup."""

    def test_register_plugin_twice_is_noop(self) -> None:
        """A second plugin with the same name is ignored."""
        manager = PluginManager()
        first = _RecordingPlugin()
        manager.register_plugin(first)
        manager.register_plugin(_RecordingPlugin())
        assert manager.get_plugin("recording") is first

    def test_initialize_all_passes_plugin_section(self) -> None:
        """Each plugin receives plugins.<name>."""
        manager = PluginManager()
        plugin = _RecordingPlugin()
        manager.register_plugin(plugin)

        manager.initialize_all({"plugins": {"recording": {"key": "value"}}})

        assert plugin._config == {"key": "value"}
        assert manager._initialized is True

    def test_initialize_all_continues_after_error(self) -> None:
        """A failing plugin does not stop initialization."""
        manager = PluginManager()
        plugin = _RecordingPlugin()
        manager.register_plugin(plugin)
        with patch.object(plugin, "initialize", side_effect=ValueError("bad config")):
            manager.initialize_all({})
        assert manager._initialized is True

    def test_register_commands(self) -> None:
        """register_commands reaches every plugin."""
        manager = PluginManager()
        plugin = _RecordingPlugin()
        manager.register_plugin(plugin)
        app = typer.Typer()

        manager.register_commands(app)

        assert plugin.apps == [app]

    def test_cleanup_all(self) -> None:
        """cleanup_all calls every plugin's cleanup."""
        manager = PluginManager()
        plugin = _RecordingPlugin()
        manager.register_plugin(plugin)
        manager.initialize_all({})

        manager.cleanup_all()

        assert plugin.cleaned
        assert manager._initialized is False

    def test_list_plugins(self) -> None:
        """list_plugins describes each plugin."""
        manager = PluginManager()
        manager.register_plugin(_RecordingPlugin())
        assert manager.list_plugins() == [
            {
                "name": "recording",
                "version": "1.2.3",
                "description": "records hooks",
                "initialized": False,
            }
        ]
