"""Per-environment reconciliation: read, diff, resolve, apply."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from rich.console import Console
from rich.markup import escape

from envsync.services.envsync.apply import ApplyEngine
from envsync.services.envsync.describe import action_choice_label
from envsync.services.envsync.diff import (
    SyncStateSummary,
    compute_diff,
    sort_records,
    summarize_sync_state,
)
from envsync.services.envsync.exclusions import ExclusionPolicy
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.models import (
    Action,
    ApplyReport,
    DivergenceRecord,
    Environment,
)
from envsync.services.envsync.prompts import Prompter
from envsync.services.envsync.remote_store import RemoteReadStatus, RemoteStore
from envsync.services.envsync.resolution import ResolutionWorkflow, SyncMode

logger = structlog.get_logger()


@dataclass
class EnvironmentSyncResult:
    """What happened to one environment during a run."""

    environment: Environment
    local_count: int = 0
    remote_count: int = 0
    remote_status: RemoteReadStatus = RemoteReadStatus.FULL
    warning: str | None = None
    records: list[DivergenceRecord] = field(default_factory=list)
    selected: list[DivergenceRecord] = field(default_factory=list)
    summary: SyncStateSummary = field(default_factory=SyncStateSummary)
    report: ApplyReport | None = None

    @property
    def in_sync(self) -> bool:
        """True when the diff produced no records."""
        return not self.records

    @property
    def failures(self) -> int:
        """Number of failed actions."""
        return self.report.total_failed if self.report else 0


class Reconciler:
    """Wires the stores, diff engine, resolution and apply engine.

    Args:
        remote: Remote store adapter.
        local: Local dotenv store.
        prompter: Source of operator answers.
        exclusions: Exclusion policy passed to the diff engine.
        console: Console progress is printed to.
        remote_name: Display name of the remote store.
    """

    def __init__(
        self,
        remote: RemoteStore,
        local: LocalEnvStore,
        prompter: Prompter,
        exclusions: ExclusionPolicy,
        console: Console | None = None,
        remote_name: str = "Vercel",
    ) -> None:
        self.remote = remote
        self.local = local
        self.prompter = prompter
        self.exclusions = exclusions
        self.console = console or Console()
        self.remote_name = remote_name
        self.engine = ApplyEngine(remote, local)

    def preview(self, environment: Environment) -> EnvironmentSyncResult:
        """Read both stores and diff them without prompting or writing.

        The local file is still created empty if it does not exist.

        Raises:
            LocalStoreError: If the local file cannot be read.
        """
        local_file = self.local.display_name(environment)
        self.console.print(f"\n{environment.icon} [bold]{environment.label}[/bold]")
        self.console.print(f"   Local file: {local_file}")
        self.console.print(f"   {self.remote_name} env: {self.remote.namespace(environment)}")

        local = self.local.read(environment)
        snapshot = self.remote.read(environment)
        if snapshot.warning:
            self.console.print(f"   [yellow]⚠ {escape(snapshot.warning)}[/yellow]")

        records = compute_diff(local, snapshot.values, environment, self.exclusions)
        result = EnvironmentSyncResult(
            environment=environment,
            local_count=len(local),
            remote_count=len(snapshot.values),
            remote_status=snapshot.status,
            warning=snapshot.warning,
            records=sort_records(records),
            summary=summarize_sync_state(local, snapshot.values, environment, self.exclusions),
        )
        logger.info(
            "environment_diffed",
            environment=str(environment),
            local=result.local_count,
            remote=result.remote_count,
            remote_status=str(snapshot.status),
            divergent=len(records),
        )
        return result

    def sync_environment(self, environment: Environment, mode: SyncMode) -> EnvironmentSyncResult:
        """Reconcile one environment.

        Raises:
            OperationCancelledError: If the operator interrupts a prompt;
                actions already applied stay applied.
            LocalStoreError: If the local file cannot be read.
        """
        result = self.preview(environment)
        self._print_overview(result)
        if result.in_sync:
            self.console.print(f"[green]✓ {environment} is already in sync[/green]")
            result.report = self.engine.report_for(environment)
            return result

        workflow = ResolutionWorkflow(
            self.prompter,
            local_file=self.local.display_name(environment),
            remote_name=self.remote_name,
            console=self.console,
        )
        result.selected = workflow.resolve(result.records, mode)
        result.report = self.engine.report_for(environment)

        if not result.selected:
            self.console.print(f"No changes selected for {environment}")
            return result

        self.console.print(f"\nApplying {len(result.selected)} change(s) to {environment}...")
        for record in result.selected:
            action = record.selected_action or Action.DO_NOTHING
            ok = self.engine.apply(record)
            marker = "[green]✓[/green]" if ok else "[red]✗[/red]"
            self.console.print(f"  {marker} {action_choice_label(action)} {escape(record.key)}")

        logger.info(
            "environment_synced",
            environment=str(environment),
            applied=result.report.total_applied,
            failed=result.report.total_failed,
        )
        return result

    def _print_overview(self, result: EnvironmentSyncResult) -> None:
        self.console.print(f"   Local variables: {result.local_count}")
        self.console.print(f"   {self.remote_name} variables: {result.remote_count}")
        if result.summary.in_sync:
            self.console.print(f"   🔗 {len(result.summary.in_sync)} in sync")
        if result.summary.excluded:
            excluded = ", ".join(result.summary.excluded)
            self.console.print(f"   🚫 {len(result.summary.excluded)} excluded: {excluded}")
        if result.records:
            self.console.print(f"   📋 {len(result.records)} divergent")
