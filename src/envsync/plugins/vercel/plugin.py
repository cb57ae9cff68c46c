"""Vercel remote store plugin.

Provides the remote store backing the reconciliation engine, either
through the vercel CLI or the REST API, and registers the ``sync``,
``delete`` and ``status`` commands.
"""

from __future__ import annotations

import structlog
import typer

from envsync.cli.context import AppContext
from envsync.core.plugins.base import Plugin, hookimpl
from envsync.integrations.vercel.api_client import VercelAPIClient
from envsync.integrations.vercel.cli_client import VercelCLIClient
from envsync.integrations.vercel.config import VercelPluginConfig
from envsync.plugins.vercel.commands.base import CommandServices
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.remote_store import RemoteStore, RemoteTransport

logger = structlog.get_logger()


class VercelPlugin(Plugin):
    """Vercel project environment variables as the remote store."""

    name = "vercel"
    version = "0.1.0"
    description = "Sync local dotenv files with Vercel environment variables"

    def __init__(self) -> None:
        super().__init__()
        self._plugin_config: VercelPluginConfig | None = None

    def on_initialize(self) -> None:
        """Parse the plugin configuration with environment overrides."""
        try:
            self._plugin_config = VercelPluginConfig.from_env(self._config or {})
        except Exception as e:
            logger.error("vercel_plugin_config_invalid", error=str(e))
            raise
        logger.debug(
            "vercel_plugin_initialized",
            backend=self._plugin_config.backend,
            command=" ".join(self._plugin_config.command),
        )

    @property
    def plugin_config(self) -> VercelPluginConfig:
        """Parsed configuration; environment overrides only if never initialized.

        Raises:
            pydantic.ValidationError: If the environment overrides are invalid.
        """
        if self._plugin_config is None:
            self._plugin_config = VercelPluginConfig.from_env(self._config or {})
        return self._plugin_config

    def create_transport(self, app_ctx: AppContext) -> RemoteTransport:
        """Create the configured backend client.

        Raises:
            VercelBinaryNotFoundError: If the cli backend's command is missing.
        """
        config = self.plugin_config
        if config.backend == "api":
            return VercelAPIClient(config)
        return VercelCLIClient(config, cwd=app_ctx.project_dir)

    def build_services(self, app_ctx: AppContext) -> CommandServices:
        """Wire the remote and local stores for a command."""
        if not self.is_initialized:
            self.initialize(app_ctx.config.plugin_config(self.name))
        transport = self.create_transport(app_ctx)
        system_config = app_ctx.config
        return CommandServices(
            remote=RemoteStore(transport, system_config.remote_namespaces()),
            local=LocalEnvStore(system_config.local_files(), base_dir=app_ctx.project_dir),
            exclusions=system_config.exclusion_policy(),
            transport=transport,
        )

    @hookimpl
    def register_commands(self, app: typer.Typer) -> None:
        """Register sync, delete and status on the root app."""
        from envsync.plugins.vercel.commands.delete import register_delete_commands
        from envsync.plugins.vercel.commands.status import register_status_commands
        from envsync.plugins.vercel.commands.sync import register_sync_commands

        register_sync_commands(app, self.build_services)
        register_delete_commands(app, self.build_services)
        register_status_commands(app, self.build_services)
        logger.debug("vercel_commands_registered")

    @hookimpl
    def cleanup(self) -> None:
        """Forget the parsed configuration."""
        self._plugin_config = None
        super().cleanup()
