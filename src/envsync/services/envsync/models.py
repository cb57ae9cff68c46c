"""Domain models for environment variable reconciliation.

This module defines the data passed between the store readers, the diff
engine, the resolution workflow and the apply engine:

- Environment: the closed set of deployment environments
- ValueState: tagged union of Known, Opaque and Absent values
- Action: what can be done about a divergent key
- DivergenceRecord: one key's mismatch plus its valid resolutions
- ApplyReport: per-action success/failure counters for a run
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum


class Environment(StrEnum):
    """Deployment environment a pair of stores belongs to."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @property
    def icon(self) -> str:
        """Short marker used in terminal output."""
        return "🔧" if self is Environment.DEVELOPMENT else "🚀"

    @property
    def label(self) -> str:
        """Capitalized display name."""
        return self.value.capitalize()


# ---------------------------------------------------------------------------
# Value states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Known:
    """A value whose content was retrieved."""

    value: str


@dataclass(frozen=True)
class Opaque:
    """A value that exists but whose content could not be read."""


@dataclass(frozen=True)
class Absent:
    """No value for the key."""


ValueState = Known | Opaque | Absent

OPAQUE = Opaque()
ABSENT = Absent()


def is_present(state: ValueState) -> bool:
    """Return True if the state counts as present (non-empty or opaque)."""
    if isinstance(state, Known):
        return state.value != ""
    return isinstance(state, Opaque)


def states_equal(left: ValueState, right: ValueState) -> bool | None:
    """Compare two states.

    Returns:
        True or False when both sides are known, None when either side is
        opaque and equality cannot be decided.
    """
    if isinstance(left, Opaque) or isinstance(right, Opaque):
        return None
    return left == right


def known_value(state: ValueState) -> str | None:
    """Return the content of a Known state, else None."""
    return state.value if isinstance(state, Known) else None


# ---------------------------------------------------------------------------
# Actions and records
# ---------------------------------------------------------------------------


class Action(StrEnum):
    """Resolution action for a divergent key."""

    ADD = "add"
    """Copy the local value to the remote store (key absent remotely)."""

    UPDATE = "update"
    """Replace the remote value with the local value."""

    PULL = "pull"
    """Copy the remote value into the local file (key absent locally)."""

    REMOVE_FROM_REMOTE = "remove_from_remote"
    """Delete the key from the remote store."""

    REMOVE_FROM_LOCAL = "remove_from_local"
    """Delete the key from the local file."""

    DO_NOTHING = "do_nothing"
    """Leave both stores unchanged."""

    @property
    def label(self) -> str:
        """Upper-case label, e.g. ``REMOVE FROM REMOTE``."""
        return self.value.replace("_", " ").upper()

    @property
    def is_removal(self) -> bool:
        """True for the destructive actions."""
        return self in (Action.REMOVE_FROM_REMOTE, Action.REMOVE_FROM_LOCAL)

    @property
    def is_forward_sync(self) -> bool:
        """True for the actions auto mode applies."""
        return self in FORWARD_SYNC_ACTIONS


FORWARD_SYNC_ACTIONS = (Action.ADD, Action.UPDATE, Action.PULL)


@dataclass
class DivergenceRecord:
    """One key's mismatch between the local and remote store.

    Attributes:
        key: Variable name.
        environment: Environment both stores belong to.
        local_state: Value state in the local file.
        remote_state: Value state in the remote store.
        candidate_actions: Actions meaningful for this state combination,
            in presentation order.
        selected_action: Action chosen during resolution, if any.
    """

    key: str
    environment: Environment
    local_state: ValueState
    remote_state: ValueState
    candidate_actions: tuple[Action, ...]
    selected_action: Action | None = None

    @property
    def forward_action(self) -> Action | None:
        """The first forward-sync candidate, or None for removal-only records."""
        for action in self.candidate_actions:
            if action.is_forward_sync:
                return action
        return None

    @property
    def is_selected(self) -> bool:
        """True when an action other than do_nothing has been chosen."""
        return self.selected_action is not None and self.selected_action is not Action.DO_NOTHING


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@dataclass
class ApplyReport:
    """Per-action counters for one environment's apply pass."""

    environment: Environment
    applied: Counter[Action] = field(default_factory=Counter)
    failed: Counter[Action] = field(default_factory=Counter)

    def record(self, action: Action, success: bool) -> None:
        """Count one apply outcome."""
        if success:
            self.applied[action] += 1
        else:
            self.failed[action] += 1

    @property
    def total_applied(self) -> int:
        """Number of actions that succeeded."""
        return sum(self.applied.values())

    @property
    def total_failed(self) -> int:
        """Number of actions that failed."""
        return sum(self.failed.values())

    @property
    def actions(self) -> list[Action]:
        """Actions that have at least one outcome, in declaration order."""
        return [a for a in Action if self.applied[a] or self.failed[a]]
