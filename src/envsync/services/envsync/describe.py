"""Human-readable descriptions of divergence records and actions."""

from __future__ import annotations

from envsync.services.envsync.models import (
    Action,
    DivergenceRecord,
    Known,
    Opaque,
    ValueState,
)

MAX_VALUE_LENGTH = 500

ACTION_ICONS: dict[Action, str] = {
    Action.ADD: "➕",
    Action.UPDATE: "🔄",
    Action.PULL: "⬇️",
    Action.REMOVE_FROM_REMOTE: "🗑️",
    Action.REMOVE_FROM_LOCAL: "🗑️",
    Action.DO_NOTHING: "⏭️",
}


def truncate_value(value: str, max_length: int = MAX_VALUE_LENGTH) -> str:
    """Shorten long values for display."""
    return value if len(value) <= max_length else value[: max_length - 3] + "..."


def format_state(state: ValueState) -> str:
    """Display form of a value state."""
    if isinstance(state, Known):
        return f'"{truncate_value(state.value)}"'
    if isinstance(state, Opaque):
        return "<unreadable>"
    return "<absent>"


def describe_record(record: DivergenceRecord, local_file: str, remote_name: str) -> str:
    """Multi-line summary of a record: key, both sides and the options."""
    env = record.environment
    lines = [f"{env.icon} {record.key} ({env})"]
    lines.append(f"     Local ({local_file}): {format_state(record.local_state)}")
    lines.append(f"     {remote_name}: {format_state(record.remote_state)}")
    options = ", ".join(action.label.lower() for action in record.candidate_actions)
    lines.append(f"     Options: {options}")
    return "\n".join(lines)


def describe_action(
    record: DivergenceRecord,
    action: Action,
    local_file: str,
    remote_name: str,
) -> str:
    """Describe the concrete effect of applying action to record.

    Names the source value, the destination and the environment, e.g.
    ``Add API_KEY to Vercel (development) with value "abc"``.
    """
    env = record.environment
    key = record.key
    remote_label = f"{remote_name} ({env})"

    if action is Action.ADD:
        return f"Add {key} to {remote_label} with value {format_state(record.local_state)}"
    if action is Action.UPDATE:
        return (
            f"Replace {key} in {remote_label}: "
            f"{format_state(record.remote_state)} -> {format_state(record.local_state)}"
        )
    if action is Action.PULL:
        if isinstance(record.remote_state, Opaque):
            return f"Fetch {key} from {remote_label} and write it to {local_file}"
        return (
            f"Write {key}={format_state(record.remote_state)} from {remote_label} to {local_file}"
        )
    if action is Action.REMOVE_FROM_REMOTE:
        current = format_state(record.remote_state)
        return f"DELETE {key} from {remote_label} (current value {current})"
    if action is Action.REMOVE_FROM_LOCAL:
        current = format_state(record.local_state)
        return f"DELETE {key} from {local_file} (current value {current})"
    return f"Leave {key} unchanged in {env}"


def action_choice_label(action: Action) -> str:
    """Menu label for an action."""
    return f"{ACTION_ICONS[action]} {action.label.capitalize()}"
