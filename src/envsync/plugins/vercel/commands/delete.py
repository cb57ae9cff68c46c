"""The ``delete`` command: permanently remove variables from Vercel.

Examples:
    envsync delete                  # choose environments and variables
    envsync delete --prod           # delete from production only
    envsync delete --dev --force    # skip the final confirmation
"""

from __future__ import annotations

import structlog
import typer

from envsync.plugins.vercel.commands.base import (
    EXIT_FAILURE,
    DevOption,
    ForceOption,
    ProdOption,
    ServicesFactory,
    console,
    ensure_remote_available,
    environments_from_flags,
    exit_cancelled,
    open_services,
    select_environments,
)
from envsync.plugins.vercel.formatters import print_deletion_summary
from envsync.services.envsync.deletion import DeletionWorkflow
from envsync.services.envsync.exceptions import OperationCancelledError
from envsync.services.envsync.prompts import TerminalPrompter

logger = structlog.get_logger()


def register_delete_commands(app: typer.Typer, get_services: ServicesFactory) -> None:
    """Register the delete command.

    Args:
        app: Typer app to register the command on.
        get_services: Factory building the stores from the app context.
    """

    @app.command("delete")
    def delete(
        ctx: typer.Context,
        dev: DevOption = False,
        prod: ProdOption = False,
        force: ForceOption = False,
    ) -> None:
        """Delete environment variables from Vercel (and optionally local files)."""
        prompter = TerminalPrompter(console)
        services = open_services(ctx, get_services)

        try:
            ensure_remote_available(services)
            environments = environments_from_flags(dev, prod) or select_environments(
                prompter, "Select environments to delete variables from:"
            )
            logger.info(
                "delete_started", environments=[str(e) for e in environments], force=force
            )
            workflow = DeletionWorkflow(
                services.remote,
                services.local,
                prompter,
                services.exclusions,
                console=console,
            )
            report = workflow.run(environments, force=force)
        except (OperationCancelledError, KeyboardInterrupt):
            logger.warning("delete_cancelled")
            exit_cancelled()
        finally:
            services.close()

        if report.aborted:
            console.print("Deletion aborted; nothing was deleted.")
            return

        print_deletion_summary(report, console)
        if report.failures:
            raise typer.Exit(EXIT_FAILURE)
