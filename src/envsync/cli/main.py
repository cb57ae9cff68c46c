"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.markup import escape

from envsync import __version__
from envsync.cli.commands import init
from envsync.cli.context import AppContext
from envsync.cli.output import Table
from envsync.core.config.models import CONFIG_FILE, SystemConfig, load_config, load_raw_config
from envsync.core.plugins import PluginManager
from envsync.logging.config import configure_logging
from envsync.plugins.vercel import VercelPlugin

app = typer.Typer(
    name="envsync",
    help="Reconcile local dotenv files with Vercel environment variables.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()
logger = structlog.get_logger()

plugin_manager = PluginManager()


def setup_plugins(manager: PluginManager, enabled: list[str] | None = None) -> None:
    """Register the built-in plugin and load enabled entry-point plugins."""
    manager.register_plugin(VercelPlugin())
    for name in enabled or []:
        if manager.get_plugin(name) is None and name in manager.discover_plugins():
            manager.load_plugin(name)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"envsync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the configuration file (default: ./.envsync.yaml).",
        dir_okay=False,
    ),
) -> None:
    """envsync - keep .env files and Vercel environment variables in step."""
    configure_logging(verbose=verbose, debug=debug)

    config_path = config.resolve() if config else None
    try:
        loaded = load_config(config_path or CONFIG_FILE)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {escape(str(e))}")
        raise typer.Exit(code=1) from e

    if loaded is None and config_path is not None and ctx.invoked_subcommand != "init":
        console.print(f"[red]Error:[/red] Configuration file not found: {config_path}")
        raise typer.Exit(code=1)

    system_config = loaded or SystemConfig()
    ctx.obj = AppContext(
        config=system_config,
        config_path=config_path,
        project_dir=config_path.parent if config_path else Path.cwd(),
    )
    logger.debug(
        "config_loaded",
        path=str(config_path or CONFIG_FILE),
        found=loaded is not None,
    )

    plugin_manager.initialize_all(system_config.model_dump(mode="json", by_alias=True))
    ctx.call_on_close(plugin_manager.cleanup_all)


@app.command("plugins")
def list_plugins() -> None:
    """List loaded plugins."""
    table = Table(title="Installed Plugins")
    table.add_column("Name", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Description")
    table.add_column("Initialized")

    for info in plugin_manager.list_plugins():
        table.add_row(
            info["name"],
            info["version"],
            info["description"],
            "yes" if info["initialized"] else "no",
        )

    console.print(table)


# Register subcommands
app.add_typer(init.app, name="init")
_raw_plugins = load_raw_config().get("plugins")
setup_plugins(
    plugin_manager, _raw_plugins.get("enabled") if isinstance(_raw_plugins, dict) else None
)
plugin_manager.register_commands(app)


if __name__ == "__main__":
    app()
