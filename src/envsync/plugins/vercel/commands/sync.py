"""The ``sync`` command: reconcile local env files with Vercel.

Examples:
    envsync sync                    # choose mode and environments
    envsync sync --dev              # interactive sync of development
    envsync sync --prod --auto      # forward-sync production after one confirmation
    envsync sync --auto             # forward-sync both environments
"""

from __future__ import annotations

from typing import Annotated

import structlog
import typer

from envsync.plugins.vercel.commands.base import (
    EXIT_FAILURE,
    DevOption,
    ProdOption,
    ServicesFactory,
    console,
    ensure_remote_available,
    environments_from_flags,
    exit_cancelled,
    open_services,
    report_local_error,
    select_environments,
    select_mode,
)
from envsync.plugins.vercel.formatters import print_sync_summary
from envsync.services.envsync.exceptions import LocalStoreError, OperationCancelledError
from envsync.services.envsync.models import Environment
from envsync.services.envsync.prompts import TerminalPrompter
from envsync.services.envsync.reconciler import EnvironmentSyncResult, Reconciler
from envsync.services.envsync.resolution import SyncMode

logger = structlog.get_logger()


def register_sync_commands(app: typer.Typer, get_services: ServicesFactory) -> None:
    """Register the sync command.

    Args:
        app: Typer app to register the command on.
        get_services: Factory building the stores from the app context.
    """

    @app.command("sync")
    def sync(
        ctx: typer.Context,
        dev: DevOption = False,
        prod: ProdOption = False,
        auto: Annotated[
            bool,
            typer.Option("--auto", "-a", help="Apply add/update/pull after one confirmation"),
        ] = False,
        interactive: Annotated[
            bool,
            typer.Option("--interactive", "-i", help="Review and choose each change"),
        ] = False,
    ) -> None:
        """Sync environment variables between local files and Vercel."""
        if auto and interactive:
            raise typer.BadParameter("--auto and --interactive are mutually exclusive")

        prompter = TerminalPrompter(console)
        services = open_services(ctx, get_services)
        results: list[EnvironmentSyncResult] = []
        errors = 0

        try:
            ensure_remote_available(services)

            mode = SyncMode.AUTO if auto else SyncMode.INTERACTIVE
            environments = environments_from_flags(dev, prod)
            if not environments:
                if auto:
                    environments = list(Environment)
                else:
                    if not interactive:
                        mode = select_mode(prompter)
                    environments = select_environments(
                        prompter, "Select environments to sync:"
                    )

            console.print(
                f"\nMode: {'⚡ Auto' if mode is SyncMode.AUTO else '🎮 Interactive'}  "
                f"Environments: {', '.join(f'{e.icon} {e.label}' for e in environments)}"
            )
            logger.info(
                "sync_started", mode=str(mode), environments=[str(e) for e in environments]
            )

            reconciler = Reconciler(
                services.remote, services.local, prompter, services.exclusions, console=console
            )
            for environment in environments:
                try:
                    results.append(reconciler.sync_environment(environment, mode))
                except LocalStoreError as e:
                    report_local_error(e)
                    logger.error(
                        "sync_environment_failed", environment=str(environment), error=str(e)
                    )
                    errors += 1
        except (OperationCancelledError, KeyboardInterrupt):
            logger.warning("sync_cancelled")
            if results:
                print_sync_summary(results, console)
            exit_cancelled()
        finally:
            services.close()

        print_sync_summary(results, console)
        if errors or any(result.failures for result in results):
            raise typer.Exit(EXIT_FAILURE)
