"""Apply engine: executes resolved actions against the stores.

Records are applied one at a time in resolution order. Each call reports
success or failure on its own; a failure never stops later records.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from envsync.services.envsync.exceptions import LocalStoreError
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.models import (
    Action,
    ApplyReport,
    DivergenceRecord,
    Environment,
    known_value,
)
from envsync.services.envsync.remote_store import AddOutcome, RemoteStore

logger = structlog.get_logger()


class ApplyEngine:
    """Applies divergence records and counts the outcomes.

    Args:
        remote: Remote store adapter.
        local: Local dotenv store.
    """

    def __init__(self, remote: RemoteStore, local: LocalEnvStore) -> None:
        self.remote = remote
        self.local = local
        self.reports: dict[Environment, ApplyReport] = {}

    def report_for(self, environment: Environment) -> ApplyReport:
        """Counters for environment, created on first use."""
        if environment not in self.reports:
            self.reports[environment] = ApplyReport(environment=environment)
        return self.reports[environment]

    def apply(self, record: DivergenceRecord) -> bool:
        """Apply the record's selected action.

        Returns:
            True if the action fully succeeded.

        Raises:
            ValueError: If no action, or do_nothing, is selected.
        """
        action = record.selected_action
        if action is None or action is Action.DO_NOTHING:
            raise ValueError(f"No applicable action selected for {record.key}")

        log = logger.bind(environment=str(record.environment), key=record.key, action=str(action))
        log.debug("applying_action")

        try:
            match action:
                case Action.ADD:
                    success = self._add(record)
                case Action.UPDATE:
                    success = self._update(record)
                case Action.PULL:
                    success = self._pull(record)
                case Action.REMOVE_FROM_REMOTE:
                    success = self.remote.remove(record.key, record.environment)
                case Action.REMOVE_FROM_LOCAL:
                    self.local.remove_key(record.environment, record.key)
                    success = True
                case _:
                    raise ValueError(f"Unsupported action: {action}")
        except LocalStoreError as e:
            log.error("local_store_failed", error=str(e))
            success = False

        self.report_for(record.environment).record(action, success)
        if success:
            log.info("action_applied")
        else:
            log.warning("action_failed")
        return success

    def apply_all(self, records: Iterable[DivergenceRecord]) -> ApplyReport | None:
        """Apply every record in order.

        Returns:
            The report of the last environment touched, or None if there
            were no records.
        """
        report = None
        for record in records:
            self.apply(record)
            report = self.report_for(record.environment)
        return report

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _local_value(self, record: DivergenceRecord) -> str | None:
        value = known_value(record.local_state)
        if value is None:
            logger.error("local_value_missing", key=record.key)
        return value

    def _add(self, record: DivergenceRecord) -> bool:
        """Add to remote, replacing an existing entry once on collision."""
        value = self._local_value(record)
        if value is None:
            return False

        outcome = self.remote.add(record.key, record.environment, value)
        if outcome is AddOutcome.EXISTS:
            logger.info(
                "add_collision_fallback",
                environment=str(record.environment),
                key=record.key,
            )
            if not self.remote.remove(record.key, record.environment):
                return False
            outcome = self.remote.add(record.key, record.environment, value)
        return outcome is AddOutcome.ADDED

    def _update(self, record: DivergenceRecord) -> bool:
        """Replace the remote value by removing then re-adding it."""
        value = self._local_value(record)
        if value is None:
            return False

        if not self.remote.remove(record.key, record.environment):
            return False
        if self.remote.add(record.key, record.environment, value) is not AddOutcome.ADDED:
            logger.error(
                "update_left_key_absent",
                environment=str(record.environment),
                key=record.key,
                detail="removed from remote but re-add failed; key is left absent remotely",
            )
            return False
        return True

    def _pull(self, record: DivergenceRecord) -> bool:
        """Write the remote value into the local file.

        An opaque value triggers one more full fetch of the environment.
        """
        value = known_value(record.remote_state)
        if value is None:
            fetched = self.remote.fetch_all(record.environment)
            value = fetched.get(record.key) if fetched else None
        if value is None:
            logger.error(
                "pull_value_unavailable",
                environment=str(record.environment),
                key=record.key,
            )
            return False

        self.local.set_value(record.environment, record.key, value)
        return True
