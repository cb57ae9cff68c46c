"""Deletion workflow: permanently removing variables from the remote store.

Independent of the diff engine. Remote entries of the selected
environments are merged by name, filtered through the exclusion policy and
offered in a multi-select. Nothing is deleted before a second explicit
confirmation; declining it returns to the selection.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import structlog
from rich.console import Console
from rich.markup import escape

from envsync.services.envsync.describe import format_state, truncate_value
from envsync.services.envsync.exceptions import LocalStoreError
from envsync.services.envsync.exclusions import ExclusionPolicy
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.models import Environment, Known, ValueState
from envsync.services.envsync.prompts import Choice, Prompter
from envsync.services.envsync.remote_store import RemoteStore

logger = structlog.get_logger()

ABORT_CHOICE = "__abort__"
DELETION_VALUE_LENGTH = 100


@dataclass
class DeletionCandidate:
    """A remote variable name and the environments it exists in."""

    name: str
    environments: list[Environment] = field(default_factory=list)
    value: ValueState | None = None

    @property
    def icons(self) -> str:
        """Environment markers, e.g. ``🔧 🚀``."""
        return " ".join(env.icon for env in self.environments)

    def describe(self) -> str:
        """One-line menu label."""
        envs = ", ".join(self.environments)
        text = f"{self.icons} {self.name} ({envs})"
        if self.value is not None:
            text += f"  {format_state(self.value)}"
        return text


@dataclass
class DeletionReport:
    """Outcome of a deletion run."""

    aborted: bool = False
    remote_deleted: int = 0
    remote_failed: int = 0
    local_deleted: int = 0
    local_failed: int = 0

    @property
    def failures(self) -> int:
        """Total failed deletions, remote and local."""
        return self.remote_failed + self.local_failed


def merge_candidates(
    snapshots: Iterable[tuple[Environment, dict[str, ValueState]]],
    exclusions: ExclusionPolicy,
) -> list[DeletionCandidate]:
    """Merge per-environment remote listings into sorted candidates.

    Keys excluded for an environment are dropped for that environment only.
    The displayed value is taken from the first environment listing the key.
    """
    merged: dict[str, DeletionCandidate] = {}
    for environment, values in snapshots:
        for name, state in values.items():
            if exclusions.is_excluded(name, environment):
                continue
            candidate = merged.setdefault(name, DeletionCandidate(name=name))
            if environment not in candidate.environments:
                candidate.environments.append(environment)
            if candidate.value is None:
                if isinstance(state, Known):
                    state = Known(truncate_value(state.value, DELETION_VALUE_LENGTH))
                candidate.value = state
    return sorted(merged.values(), key=lambda candidate: candidate.name)


class DeletionWorkflow:
    """Select, confirm and delete remote variables.

    Args:
        remote: Remote store adapter.
        local: Local dotenv store, used when cascading.
        prompter: Source of operator answers.
        exclusions: Keys never offered for deletion.
        console: Console progress is printed to.
    """

    def __init__(
        self,
        remote: RemoteStore,
        local: LocalEnvStore,
        prompter: Prompter,
        exclusions: ExclusionPolicy,
        console: Console | None = None,
    ) -> None:
        self.remote = remote
        self.local = local
        self.prompter = prompter
        self.exclusions = exclusions
        self.console = console or Console()

    def collect(self, environments: Sequence[Environment]) -> list[DeletionCandidate]:
        """Read every selected environment and merge the listings."""
        snapshots = []
        for environment in environments:
            self.console.print(f"  {environment.icon} Checking {environment}...")
            snapshot = self.remote.read(environment)
            if snapshot.warning:
                self.console.print(f"    [yellow]⚠ {escape(snapshot.warning)}[/yellow]")
            snapshots.append((environment, snapshot.values))
        return merge_candidates(snapshots, self.exclusions)

    def select(self, candidates: Sequence[DeletionCandidate]) -> list[DeletionCandidate] | None:
        """Multi-select candidates until something or abort is chosen.

        Returns:
            The selected candidates, or None if the operator aborted.
        """
        choices: list[Choice] = [(ABORT_CHOICE, "❌ Abort - cancel deletion and exit")]
        choices.extend((candidate.name, candidate.describe()) for candidate in candidates)

        while True:
            selected = self.prompter.choose_many("Select variables to DELETE:", choices)
            if ABORT_CHOICE in selected:
                return None
            if selected:
                names = set(selected)
                return [candidate for candidate in candidates if candidate.name in names]
            self.console.print(
                "[yellow]No variables selected. Select at least one variable or Abort.[/yellow]"
            )

    def confirm(self, selected: Sequence[DeletionCandidate]) -> bool:
        """Show the danger-zone summary and ask for final confirmation."""
        total = sum(len(candidate.environments) for candidate in selected)
        self.console.print("\n[bold red]⚠  DANGER ZONE - PERMANENT DELETION[/bold red]")
        self.console.print(
            f"You are about to permanently delete {len(selected)} variable(s) "
            f"from {total} environment(s):"
        )
        for number, candidate in enumerate(selected, start=1):
            envs = ", ".join(candidate.environments)
            self.console.print(f"  {number}. {candidate.icons} {escape(candidate.name)} ({envs})")
        self.console.print("[bold red]THIS ACTION CANNOT BE UNDONE![/bold red]")
        return self.prompter.confirm(
            "Are you absolutely sure you want to delete these variables?", default=False
        )

    def run(self, environments: Sequence[Environment], force: bool = False) -> DeletionReport:
        """Run the full deletion flow.

        Args:
            environments: Environments to list and delete from.
            force: Skip the final confirmation and the local cascade
                question; local files are left untouched.

        Raises:
            OperationCancelledError: If the operator interrupts a prompt.
        """
        candidates = self.collect(environments)
        if not candidates:
            self.console.print("No environment variables found in the selected environments.")
            return DeletionReport()

        self.console.print(f"Found {len(candidates)} variable(s) across selected environments")

        while True:
            selected = self.select(candidates)
            if selected is None:
                logger.info("deletion_aborted")
                return DeletionReport(aborted=True)
            if force or self.confirm(selected):
                break
            self.console.print("Returning to selection.")

        cascade = False
        if not force:
            files = ", ".join(self.local.display_name(env) for env in environments)
            cascade = self.prompter.confirm(
                f"Also delete these variables from local files ({files})?", default=False
            )

        return self.execute(selected, cascade=cascade)

    def execute(self, selected: Iterable[DeletionCandidate], cascade: bool) -> DeletionReport:
        """Delete each candidate from every environment it exists in."""
        report = DeletionReport()
        for candidate in selected:
            self.console.print(f"\n🗑  Deleting {escape(candidate.name)}")
            for environment in candidate.environments:
                if self.remote.remove(candidate.name, environment):
                    report.remote_deleted += 1
                    self.console.print(f"  [green]✓[/green] Deleted from remote {environment}")
                else:
                    report.remote_failed += 1
                    self.console.print(
                        f"  [red]✗[/red] Failed to delete from remote {environment}"
                    )

                if cascade:
                    self._delete_local(candidate.name, environment, report)

        logger.info(
            "deletion_completed",
            remote_deleted=report.remote_deleted,
            remote_failed=report.remote_failed,
            local_deleted=report.local_deleted,
            local_failed=report.local_failed,
        )
        return report

    def _delete_local(self, name: str, environment: Environment, report: DeletionReport) -> None:
        filename = self.local.display_name(environment)
        try:
            removed = self.local.remove_key(environment, name)
        except LocalStoreError as e:
            logger.error(
                "local_delete_failed", environment=str(environment), key=name, error=str(e)
            )
            report.local_failed += 1
            self.console.print(f"  [red]✗[/red] Failed to delete from {filename}")
            return
        if removed:
            report.local_deleted += 1
            self.console.print(f"  [green]✓[/green] Deleted from {filename}")
        else:
            self.console.print(f"  [dim]{escape(name)} not present in {filename}[/dim]")
