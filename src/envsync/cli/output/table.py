"""Rich table with the defaults every envsync command uses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from rich import box
from rich.table import Table as RichTable

if TYPE_CHECKING:
    from rich.console import ConsoleRenderable, RichCast

OverflowMethod = Literal["fold", "crop", "ellipsis", "ignore"]


class Table(RichTable):
    """Rich Table whose columns wrap instead of truncating.

    Variable names and values can be long; ``overflow="fold"`` keeps them
    readable in narrow terminals. Pass ``overflow`` or ``no_wrap`` to a
    column to opt out.
    """

    def __init__(self, *headers: Any, **kwargs: Any) -> None:
        kwargs.setdefault("box", box.SIMPLE_HEAVY)
        kwargs.setdefault("title_justify", "left")
        super().__init__(*headers, **kwargs)

    def add_column(
        self,
        header: ConsoleRenderable | RichCast | str = "",
        footer: ConsoleRenderable | RichCast | str = "",
        *,
        overflow: OverflowMethod = "fold",
        **kwargs: Any,
    ) -> None:
        """Add a column, folding overflowing text by default."""
        super().add_column(header, footer, overflow=overflow, **kwargs)
