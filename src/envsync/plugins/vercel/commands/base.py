"""Shared options, service wiring and error handling for the Vercel commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from envsync.cli.context import AppContext, get_app_context
from envsync.integrations.vercel.exceptions import (
    VercelAPIError,
    VercelAuthError,
    VercelBinaryNotFoundError,
    VercelCommandError,
    VercelConnectionError,
    VercelError,
)
from envsync.services.envsync.exceptions import LocalStoreError
from envsync.services.envsync.exclusions import ExclusionPolicy
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.models import Environment
from envsync.services.envsync.prompts import Prompter
from envsync.services.envsync.remote_store import RemoteStore
from envsync.services.envsync.resolution import SyncMode

console = Console()

EXIT_FAILURE = 1
EXIT_CANCELLED = 130


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

DevOption = Annotated[
    bool,
    typer.Option("--dev", "--development", help="Include the development environment"),
]

ProdOption = Annotated[
    bool,
    typer.Option("--prod", "--production", help="Include the production environment"),
]

ForceOption = Annotated[
    bool,
    typer.Option(
        "--force",
        "-f",
        help="Skip the final confirmation (not recommended); local files are kept",
    ),
]


# =============================================================================
# Services
# =============================================================================


@dataclass
class CommandServices:
    """Stores and policy a command operates on."""

    remote: RemoteStore
    local: LocalEnvStore
    exclusions: ExclusionPolicy
    transport: Any = None

    def close(self) -> None:
        """Release the transport, if it holds resources."""
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()


ServicesFactory = Callable[[AppContext], CommandServices]


def open_services(ctx: typer.Context, factory: ServicesFactory) -> CommandServices:
    """Build the services for a command, exiting on configuration errors."""
    try:
        return factory(get_app_context(ctx))
    except VercelError as e:
        handle_vercel_error(e)
    except ValueError as e:
        console.print(f"[red]Error:[/red] Invalid Vercel configuration: {escape(str(e))}")
        raise typer.Exit(EXIT_FAILURE) from e


def ensure_remote_available(services: CommandServices) -> str:
    """Check the remote backend responds, exiting with an error if not.

    Returns:
        The backend version string.
    """
    version = services.remote.version()
    if version is None:
        console.print("[red]Error:[/red] The Vercel backend is not usable")
        console.print(
            "\n[dim]Hint: install the CLI with 'npm i -g vercel' and run 'vercel link'.[/dim]"
        )
        raise typer.Exit(EXIT_FAILURE)
    console.print(f"[green]✓[/green] Vercel backend detected: {escape(version)}")
    return version


# =============================================================================
# Selection Utilities
# =============================================================================


def environments_from_flags(dev: bool, prod: bool) -> list[Environment]:
    """Environments named on the command line, in fixed order."""
    selected = []
    if dev:
        selected.append(Environment.DEVELOPMENT)
    if prod:
        selected.append(Environment.PRODUCTION)
    return selected


def select_environments(prompter: Prompter, message: str) -> list[Environment]:
    """Ask for at least one environment."""
    choices = [(env.value, f"{env.icon} {env.label}") for env in Environment]
    while True:
        selected = prompter.choose_many(message, choices)
        if selected:
            return [Environment(value) for value in selected]
        console.print("[yellow]Select at least one environment.[/yellow]")


def select_mode(prompter: Prompter) -> SyncMode:
    """Ask whether to review each change or apply forward sync in bulk."""
    value = prompter.choose(
        "Select sync mode:",
        [
            (SyncMode.INTERACTIVE.value, "🎮 Interactive - review and choose each change"),
            (SyncMode.AUTO.value, "⚡ Auto - apply add/update/pull after one confirmation"),
        ],
    )
    return SyncMode(value)


# =============================================================================
# Error Handling
# =============================================================================


def handle_vercel_error(error: VercelError) -> NoReturn:
    """Print a Vercel error with a hint and exit.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, VercelBinaryNotFoundError):
        console.print(f"[red]Error:[/red] {escape(error.message)}")
        console.print(
            "\n[dim]Hint: set plugins.vercel.command when the CLI runs through a wrapper"
            " such as 'bun vercel'.[/dim]"
        )

    elif isinstance(error, VercelAuthError):
        console.print("[red]Error:[/red] Authentication with Vercel failed")
        console.print(f"  {escape(error.message)}")
        console.print("\n[dim]Hint: check the token in plugins.vercel or VERCEL_TOKEN.[/dim]")

    elif isinstance(error, VercelConnectionError):
        console.print("[red]Error:[/red] Cannot reach the Vercel API")
        console.print(f"  {escape(error.message)}")

    elif isinstance(error, VercelAPIError):
        console.print(f"[red]Error:[/red] {escape(error.message)}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")

    elif isinstance(error, VercelCommandError):
        console.print(f"[red]Error:[/red] {escape(error.message)}")

    else:
        console.print(f"[red]Error:[/red] {escape(str(error))}")

    raise typer.Exit(EXIT_FAILURE)


def report_local_error(error: LocalStoreError) -> None:
    """Print a local file error without exiting."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")


def exit_cancelled() -> NoReturn:
    """Print the cancellation notice and exit with code 130.

    Raises:
        typer.Exit: Always.
    """
    console.print("\n[yellow]Operation cancelled[/yellow]")
    raise typer.Exit(EXIT_CANCELLED)
