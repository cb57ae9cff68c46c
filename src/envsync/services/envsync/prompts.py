"""Operator prompts used by the resolution and deletion workflows.

The workflows only talk to the ``Prompter`` protocol, so tests drive them
with scripted answers while the CLI uses ``TerminalPrompter``.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Protocol

import typer
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from envsync.services.envsync.exceptions import OperationCancelledError

# (value, label) pairs shown in selection menus
Choice = tuple[str, str]


class Prompter(Protocol):
    """Interactive operator input.

    Implementations raise OperationCancelledError when the operator
    interrupts a prompt (Ctrl-C, end of input).
    """

    def choose(self, message: str, choices: Sequence[Choice]) -> str:
        """Single selection; returns the chosen value."""
        ...

    def choose_many(self, message: str, choices: Sequence[Choice]) -> list[str]:
        """Multi selection; returns the chosen values in menu order."""
        ...

    def confirm(self, message: str, default: bool = False) -> bool:
        """Yes/no question."""
        ...


@contextmanager
def cancellable() -> Iterator[None]:
    """Turn prompt interrupts into OperationCancelledError."""
    try:
        yield
    except (KeyboardInterrupt, EOFError, typer.Abort) as e:
        raise OperationCancelledError() from e


def parse_selection(answer: str, count: int) -> list[int] | None:
    """Parse a comma/space separated list of 1-based menu numbers.

    Ranges such as ``2-4`` are accepted. Returns zero-based indexes in menu
    order, or None if any part is invalid.
    """
    indexes: set[int] = set()
    for part in answer.replace(",", " ").split():
        start, sep, end = part.partition("-")
        if not start.isdigit() or (sep and not end.isdigit()):
            return None
        first, last = int(start), int(end) if sep else int(start)
        if first < 1 or last > count or first > last:
            return None
        indexes.update(range(first - 1, last))
    return sorted(indexes)


class TerminalPrompter:
    """Prompter backed by rich prompts and typer confirmations.

    Args:
        console: Console menus are printed to.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def _print_menu(self, message: str, choices: Sequence[Choice]) -> None:
        self.console.print(f"\n[bold]{escape(message)}[/bold]")
        for number, (_, label) in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]) {escape(label)}")

    def choose(self, message: str, choices: Sequence[Choice]) -> str:
        """Show a numbered menu and return the selected value."""
        self._print_menu(message, choices)
        with cancellable():
            answer = Prompt.ask(
                "Select",
                choices=[str(n) for n in range(1, len(choices) + 1)],
                default="1",
                console=self.console,
            )
        return choices[int(answer) - 1][0]

    def choose_many(self, message: str, choices: Sequence[Choice]) -> list[str]:
        """Show a numbered menu and return every selected value."""
        self._print_menu(message, choices)
        while True:
            with cancellable():
                answer = Prompt.ask(
                    "Select (numbers separated by commas, ranges like 2-4)",
                    console=self.console,
                )
            indexes = parse_selection(answer, len(choices))
            if indexes is None:
                self.console.print(f"[red]Invalid selection:[/red] {escape(answer)}")
                continue
            return [choices[i][0] for i in indexes]

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
        with cancellable():
            return typer.confirm(message, default=default)
