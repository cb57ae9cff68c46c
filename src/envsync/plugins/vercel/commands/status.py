"""The ``status`` command: show pending differences without changing anything."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from envsync.plugins.vercel.commands.base import (
    EXIT_FAILURE,
    DevOption,
    ProdOption,
    ServicesFactory,
    console,
    environments_from_flags,
    open_services,
    report_local_error,
)
from envsync.plugins.vercel.formatters import OutputFormat, print_status
from envsync.services.envsync.exceptions import LocalStoreError
from envsync.services.envsync.models import Environment
from envsync.services.envsync.prompts import TerminalPrompter
from envsync.services.envsync.reconciler import Reconciler


def register_status_commands(app: typer.Typer, get_services: ServicesFactory) -> None:
    """Register the status command.

    Args:
        app: Typer app to register the command on.
        get_services: Factory building the stores from the app context.
    """

    @app.command("status")
    def status(
        ctx: typer.Context,
        dev: DevOption = False,
        prod: ProdOption = False,
        output: Annotated[
            OutputFormat,
            typer.Option(
                "--output",
                "-o",
                help="Output format: table, json, or yaml",
                case_sensitive=False,
            ),
        ] = OutputFormat.TABLE,
    ) -> None:
        """Show variables that differ between local files and Vercel.

        Examples:
            envsync status
            envsync status --prod --output json
        """
        environments = environments_from_flags(dev, prod) or list(Environment)
        services = open_services(ctx, get_services)
        progress = console if output is OutputFormat.TABLE else Console(quiet=True)
        reconciler = Reconciler(
            services.remote,
            services.local,
            TerminalPrompter(progress),
            services.exclusions,
            console=progress,
        )

        try:
            results = [reconciler.preview(environment) for environment in environments]
        except LocalStoreError as e:
            report_local_error(e)
            raise typer.Exit(EXIT_FAILURE) from e
        finally:
            services.close()

        print_status(results, output, console)
