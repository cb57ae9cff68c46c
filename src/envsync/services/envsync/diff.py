"""Diff engine: divergence between a local and a remote mapping.

Pure and deterministic. Keys are visited local-first in insertion order,
then remote-only keys; callers sort for display.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from envsync.services.envsync.exclusions import ExclusionPolicy
from envsync.services.envsync.models import (
    ABSENT,
    Action,
    DivergenceRecord,
    Environment,
    Known,
    ValueState,
    is_present,
    states_equal,
)


def _local_state(value: str | None) -> ValueState:
    return ABSENT if value is None else Known(value)


def candidate_actions(
    local_state: ValueState,
    remote_state: ValueState,
    key: str,
    environment: Environment,
    exclusions: ExclusionPolicy,
) -> tuple[Action, ...]:
    """Actions meaningful for one key, or an empty tuple if nothing diverges.

    Args:
        local_state: State of the key in the local file.
        remote_state: State of the key in the remote store.
        key: Variable name, checked against the exclusion policy.
        environment: Environment the states belong to.
        exclusions: Keys never offered pull or remote removal.
    """
    has_local = is_present(local_state)
    has_remote = is_present(remote_state)

    if has_local and not has_remote:
        return (Action.ADD, Action.REMOVE_FROM_LOCAL)

    if has_remote and not has_local:
        if exclusions.is_excluded(key, environment):
            return ()
        return (Action.PULL, Action.REMOVE_FROM_REMOTE)

    if has_local and has_remote and states_equal(local_state, remote_state) is not True:
        return (Action.UPDATE,)

    return ()


def compute_diff(
    local: Mapping[str, str],
    remote: Mapping[str, ValueState],
    environment: Environment,
    exclusions: ExclusionPolicy,
) -> list[DivergenceRecord]:
    """Compute divergence records for one environment.

    Args:
        local: Local key/value mapping.
        remote: Remote key/state mapping (values may be Opaque).
        environment: Environment both mappings belong to.
        exclusions: Exclusion policy applied to pull/remove-from-remote.

    Returns:
        One record per divergent key, in first-encounter order.
    """
    records: list[DivergenceRecord] = []
    for key in dict.fromkeys([*local, *remote]):
        local_state = _local_state(local.get(key))
        remote_state = remote.get(key, ABSENT)
        actions = candidate_actions(local_state, remote_state, key, environment, exclusions)
        if actions:
            records.append(
                DivergenceRecord(
                    key=key,
                    environment=environment,
                    local_state=local_state,
                    remote_state=remote_state,
                    candidate_actions=actions,
                )
            )
    return records


@dataclass
class SyncStateSummary:
    """Keys that produced no divergence record, grouped by reason."""

    in_sync: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)


def summarize_sync_state(
    local: Mapping[str, str],
    remote: Mapping[str, ValueState],
    environment: Environment,
    exclusions: ExclusionPolicy,
) -> SyncStateSummary:
    """Group the keys the diff engine skipped.

    ``in_sync`` holds keys with equal known values on both sides,
    ``excluded`` holds remote-only keys protected by the exclusion policy.
    """
    summary = SyncStateSummary()
    for key, remote_state in remote.items():
        local_state = _local_state(local.get(key))
        if not is_present(remote_state):
            continue
        if is_present(local_state):
            if states_equal(local_state, remote_state) is True:
                summary.in_sync.append(key)
        elif exclusions.is_excluded(key, environment):
            summary.excluded.append(key)
    summary.in_sync.sort()
    summary.excluded.sort()
    return summary


def sort_records(records: list[DivergenceRecord]) -> list[DivergenceRecord]:
    """Records ordered alphabetically by key for stable presentation."""
    return sorted(records, key=lambda record: record.key)
