"""Plugin system for envsync."""

from envsync.core.plugins.base import Plugin, hookimpl, hookspec
from envsync.core.plugins.manager import PluginManager

__all__ = ["Plugin", "PluginManager", "hookimpl", "hookspec"]
