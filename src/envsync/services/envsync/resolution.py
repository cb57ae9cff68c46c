"""Resolution workflow: choosing which divergence records to act on.

Interactive mode walks each record through an explicit state loop::

    SELECTING -> CONFIRMING -> SELECTING | FINALIZED
    SELECTING -> ABANDONED  (operator picked do_nothing)

A declined confirmation sends the record back to selection; only an
affirmative confirmation or an explicit do_nothing leaves the loop.

Auto mode assigns each record its forward-sync action and asks a single
confirmation for the whole batch. Records that can only be resolved by a
removal are skipped, so auto mode never deletes anything.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

import structlog
from rich.console import Console
from rich.markup import escape

from envsync.services.envsync.describe import (
    action_choice_label,
    describe_action,
    describe_record,
)
from envsync.services.envsync.diff import sort_records
from envsync.services.envsync.models import Action, DivergenceRecord
from envsync.services.envsync.prompts import Choice, Prompter

logger = structlog.get_logger()


class SyncMode(StrEnum):
    """How divergence records are resolved."""

    INTERACTIVE = "interactive"
    AUTO = "auto"


class ResolutionState(StrEnum):
    """States of the per-record interactive loop."""

    SELECTING = "selecting"
    CONFIRMING = "confirming"
    FINALIZED = "finalized"
    ABANDONED = "abandoned"


class ResolutionWorkflow:
    """Drives the operator through resolving divergence records.

    Args:
        prompter: Source of operator answers.
        local_file: Display name of the local file, used in descriptions.
        remote_name: Display name of the remote store.
        console: Console the auto-mode plan is printed to.
    """

    def __init__(
        self,
        prompter: Prompter,
        local_file: str,
        remote_name: str = "Vercel",
        console: Console | None = None,
    ) -> None:
        self.prompter = prompter
        self.local_file = local_file
        self.remote_name = remote_name
        self.console = console or Console()

    def resolve(
        self, records: Iterable[DivergenceRecord], mode: SyncMode
    ) -> list[DivergenceRecord]:
        """Resolve records in the given mode.

        Returns:
            Records whose selected action is set and is not do_nothing,
            in the order they should be applied.

        Raises:
            OperationCancelledError: If the operator interrupts a prompt.
        """
        if mode is SyncMode.AUTO:
            return self.resolve_auto(records)
        return self.resolve_interactive(records)

    # ------------------------------------------------------------------
    # Interactive mode
    # ------------------------------------------------------------------

    def _choices(self, record: DivergenceRecord) -> list[Choice]:
        actions = [*record.candidate_actions, Action.DO_NOTHING]
        return [(action.value, action_choice_label(action)) for action in actions]

    def resolve_record(self, record: DivergenceRecord) -> ResolutionState:
        """Run the selection/confirmation loop for one record.

        Sets ``record.selected_action`` and returns the terminal state,
        FINALIZED or ABANDONED.
        """
        state = ResolutionState.SELECTING
        choice = Action.DO_NOTHING

        while state not in (ResolutionState.FINALIZED, ResolutionState.ABANDONED):
            if state is ResolutionState.SELECTING:
                message = describe_record(record, self.local_file, self.remote_name)
                choice = Action(self.prompter.choose(message, self._choices(record)))
                if choice is Action.DO_NOTHING:
                    state = ResolutionState.ABANDONED
                else:
                    state = ResolutionState.CONFIRMING
            else:
                effect = describe_action(record, choice, self.local_file, self.remote_name)
                if self.prompter.confirm(f"{effect}?", default=not choice.is_removal):
                    state = ResolutionState.FINALIZED
                else:
                    logger.debug("resolution_declined", key=record.key, action=str(choice))
                    state = ResolutionState.SELECTING

        record.selected_action = choice
        logger.debug(
            "record_resolved",
            environment=str(record.environment),
            key=record.key,
            action=str(choice),
            state=str(state),
        )
        return state

    def resolve_interactive(self, records: Iterable[DivergenceRecord]) -> list[DivergenceRecord]:
        """Resolve each record in alphabetical order."""
        selected: list[DivergenceRecord] = []
        for record in sort_records(list(records)):
            if self.resolve_record(record) is ResolutionState.FINALIZED:
                selected.append(record)
        return selected

    # ------------------------------------------------------------------
    # Auto mode
    # ------------------------------------------------------------------

    def plan_auto(self, records: Iterable[DivergenceRecord]) -> list[DivergenceRecord]:
        """Assign forward-sync actions without prompting.

        Records offering only removal actions are left unselected.
        """
        planned: list[DivergenceRecord] = []
        for record in sort_records(list(records)):
            action = record.forward_action
            if action is None:
                logger.info(
                    "auto_skip_removal_only",
                    environment=str(record.environment),
                    key=record.key,
                )
                continue
            record.selected_action = action
            planned.append(record)
        return planned

    def resolve_auto(self, records: Iterable[DivergenceRecord]) -> list[DivergenceRecord]:
        """Plan the forward-sync batch and confirm it once.

        Declining clears every selection and returns an empty list.
        """
        planned = self.plan_auto(records)
        if not planned:
            return []

        environment = planned[0].environment
        self.console.print(f"\n[bold]Planned changes for {environment}:[/bold]")
        for record in planned:
            action = record.selected_action or Action.DO_NOTHING
            effect = describe_action(record, action, self.local_file, self.remote_name)
            self.console.print(f"  {action_choice_label(action)}: {escape(effect)}")

        if self.prompter.confirm(
            f"Apply {len(planned)} change(s) to {environment}?", default=False
        ):
            return planned

        logger.info("auto_batch_declined", environment=str(environment), count=len(planned))
        for record in planned:
            record.selected_action = Action.DO_NOTHING
        return []
