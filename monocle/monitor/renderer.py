"""Rich renderer for the build table.

Turns a ``DisplayModel`` into a bordered Rich ``Panel`` holding a ``Table``.

Color scheme
------------
- bold white : header row
- green      : SUCCESS rows (``success``, ``fixed``)
- red        : FAILURE rows (``failed``)
- yellow     : NEUTRAL rows (everything else)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from monocle.models.builds import ColorClass, DisplayModel

HEADER_STYLE = "bold white"

_ROW_STYLES: dict[ColorClass, str] = {
    ColorClass.SUCCESS: "green",
    ColorClass.FAILURE: "red",
    ColorClass.NEUTRAL: "yellow",
}

KEY_HINTS = "q quit · r refresh"


class BuildTableRenderer:
    """Renders ``DisplayModel`` snapshots as Rich renderables.

    Parameters
    ----------
    clock:
        Source of the "last updated" timestamp in the panel subtitle.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock

    def render(self, model: DisplayModel) -> Panel:
        """Render *model* as a Panel that can be printed or used in ``Live``."""
        table = self._build_table(model)
        updated = self._clock().strftime("%H:%M:%S")
        return Panel(
            table,
            title=Text(model.title, style="bold"),
            title_align="left",
            subtitle=f"[dim]updated {updated} · {KEY_HINTS}[/dim]",
            subtitle_align="right",
            border_style="blue",
        )

    def _build_table(self, model: DisplayModel) -> Table:
        table = Table(
            show_header=True,
            header_style=HEADER_STYLE,
            box=box.SQUARE,
            show_lines=True,
            expand=True,
            pad_edge=True,
        )
        for column in model.header_row:
            table.add_column(column, justify="left", no_wrap=column != "url")

        for row in model.rows:
            # Text cells so job names and URLs are never parsed as markup.
            table.add_row(
                *(Text(cell) for cell in row.cells()),
                style=row_style(row.color_class),
            )

        return table


def row_style(color_class: ColorClass) -> str:
    return _ROW_STYLES[color_class]
