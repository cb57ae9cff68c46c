"""Output formatting for the sync, delete and status commands."""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape

from envsync.cli.output import Table
from envsync.services.envsync.deletion import DeletionReport
from envsync.services.envsync.describe import format_state
from envsync.services.envsync.reconciler import EnvironmentSyncResult


class OutputFormat(StrEnum):
    """Supported output formats for the status command."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


def print_sync_summary(results: Sequence[EnvironmentSyncResult], console: Console) -> None:
    """Print applied/failed counts per environment and action kind."""
    table = Table(title="Sync summary")
    table.add_column("Environment", style="cyan", no_wrap=True)
    table.add_column("Action")
    table.add_column("Applied", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")

    for result in results:
        env_label = f"{result.environment.icon} {result.environment}"
        report = result.report
        if report is None or not report.actions:
            note = "in sync" if result.in_sync else "no changes applied"
            table.add_row(env_label, f"[dim]{note}[/dim]", "0", "0")
            continue
        for action in report.actions:
            table.add_row(
                env_label,
                action.label.lower(),
                str(report.applied[action]),
                str(report.failed[action]),
            )
            env_label = ""

    console.print(table)
    failures = sum(result.failures for result in results)
    if failures:
        console.print(f"[red]{failures} action(s) failed.[/red] See the log for details.")
    else:
        console.print("[green]Environment sync completed.[/green]")


def print_deletion_summary(report: DeletionReport, console: Console) -> None:
    """Print the outcome of a deletion run."""
    table = Table(title="Deletion summary")
    table.add_column("Store", style="cyan")
    table.add_column("Deleted", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_row("Vercel", str(report.remote_deleted), str(report.remote_failed))
    if report.local_deleted or report.local_failed:
        table.add_row("Local files", str(report.local_deleted), str(report.local_failed))
    console.print(table)


def status_data(results: Sequence[EnvironmentSyncResult]) -> list[dict[str, Any]]:
    """Plain-data view of preview results for JSON/YAML output."""
    data = []
    for result in results:
        data.append(
            {
                "environment": str(result.environment),
                "local_count": result.local_count,
                "remote_count": result.remote_count,
                "remote_status": str(result.remote_status),
                "warning": result.warning,
                "in_sync": result.summary.in_sync,
                "excluded": result.summary.excluded,
                "divergent": [
                    {
                        "key": record.key,
                        "local": format_state(record.local_state),
                        "remote": format_state(record.remote_state),
                        "actions": [str(action) for action in record.candidate_actions],
                    }
                    for record in result.records
                ],
            }
        )
    return data


def print_status(
    results: Sequence[EnvironmentSyncResult],
    output_format: OutputFormat,
    console: Console,
) -> None:
    """Print preview results in the requested format."""
    if output_format is OutputFormat.JSON:
        console.print_json(json.dumps(status_data(results)))
        return
    if output_format is OutputFormat.YAML:
        console.print(
            yaml.safe_dump(status_data(results), sort_keys=False, allow_unicode=True),
            markup=False,
            highlight=False,
        )
        return

    for result in results:
        table = Table(title=f"{result.environment.icon} {result.environment.label}")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Local")
        table.add_column("Vercel")
        table.add_column("Options", style="dim")
        for record in result.records:
            table.add_row(
                escape(record.key),
                escape(format_state(record.local_state)),
                escape(format_state(record.remote_state)),
                ", ".join(action.label.lower() for action in record.candidate_actions),
            )
        if result.records:
            console.print(table)
        else:
            console.print(f"[green]✓ {result.environment} is in sync[/green]")
        if result.summary.in_sync:
            console.print(f"  [dim]{len(result.summary.in_sync)} variable(s) in sync[/dim]")
        if result.summary.excluded:
            console.print(
                f"  [dim]{len(result.summary.excluded)} excluded: "
                f"{escape(', '.join(result.summary.excluded))}[/dim]"
            )
