"""Init command: write a default ``.envsync.yaml`` for the project."""

from __future__ import annotations

import structlog
import typer
from rich.console import Console
from rich.panel import Panel

from envsync.cli.context import get_app_context
from envsync.core.config.models import CONFIG_FILE, SystemConfig
from envsync.services.envsync.local_store import atomic_write_text

app = typer.Typer(help="Initialize envsync configuration for a project.")
console = Console()
logger = structlog.get_logger()


@app.callback(invoke_without_command=True)
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration.",
    ),
) -> None:
    """Create .envsync.yaml with the default environments and exclusions."""
    if ctx.invoked_subcommand is not None:
        return

    app_ctx = get_app_context(ctx)
    config_file = app_ctx.config_path or app_ctx.project_dir / CONFIG_FILE
    logger.info("initializing_config", path=str(config_file))

    if config_file.exists() and not force:
        console.print(f"[yellow]Configuration already exists at {config_file}[/yellow]")
        console.print("Use --force to overwrite.")
        raise typer.Exit(code=1)

    config = SystemConfig()
    atomic_write_text(config_file, config.to_yaml())

    files = ", ".join(config.local_files().values())
    console.print(
        Panel(
            f"[green]Configuration initialized successfully![/green]\n\n"
            f"Configuration created at: {config_file}\n\n"
            f"Next steps:\n"
            f"  1. Link the project with [bold]vercel link[/bold] (cli backend)\n"
            f"  2. Adjust local files ({files}) and exclusions in {config_file.name}\n"
            f"  3. Run [bold]envsync status[/bold] to see pending differences",
            title="envsync init",
            border_style="green",
        )
    )

    logger.info("config_initialized", config_file=str(config_file))
