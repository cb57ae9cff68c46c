"""CLI output helpers shared by all commands.

Usage:
    from envsync.cli.output import Table

    table = Table(title="Sync summary")
    table.add_column("Action", style="cyan")
    table.add_column("Applied", justify="right")
    table.add_row("add", "3")
    console.print(table)
"""

from envsync.cli.output.table import Table

__all__ = ["Table"]
