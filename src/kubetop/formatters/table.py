"""Console table renderer for kubetop.

Clears the terminal and draws the round as a borderless, left-aligned rich
table, one color per resource kind, followed by one status line per source
that failed this round.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from kubetop.errors import RowShapeError
from kubetop.models.base import ResourceKind, RoundSnapshot, SourceFailure

DEFAULT_STYLES: Mapping[str, str] = {
    ResourceKind.NODE.value: "yellow",
    ResourceKind.POD.value: "cyan",
    ResourceKind.SERVICE.value: "blue",
    ResourceKind.DEPLOYMENT.value: "magenta",
    "failed": "red",
}


def validate_rows(header: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    """Check that every row has as many fields as the header.

    Raises:
        RowShapeError: For the first row whose field count differs
    """
    for index, row in enumerate(rows):
        if len(row) != len(header):
            raise RowShapeError(len(header), len(row), index)


def format_failure(failure: SourceFailure) -> str:
    """Return the status line text for a failed source."""
    text = f"! {failure.source} unavailable: {failure.error}"
    if failure.consecutive_failures > 1:
        text += f" ({failure.consecutive_failures} rounds)"
    return text


class TableFormatter:
    """Renders round snapshots to the terminal.

    Attributes:
        console: Rich console to draw on
        styles: Style per resource kind (plus "failed" for status lines)
        clear: Whether to clear the screen before each round
        show_status_line: Whether to print failed sources under the table
        show_borders: Whether to draw table borders
    """

    def __init__(
        self,
        console: Console | None = None,
        styles: Mapping[str, str] | None = None,
        clear: bool = True,
        show_status_line: bool = True,
        show_borders: bool = False,
    ) -> None:
        self.console = console or Console()
        self.styles = {**DEFAULT_STYLES, **(styles or {})}
        self.clear = clear
        self.show_status_line = show_status_line
        self.show_borders = show_borders

    def render(self, snapshot: RoundSnapshot) -> None:
        """Draw one round."""
        self.render_rows(snapshot.header, snapshot.field_rows(), snapshot.failures)

    def render_rows(
        self,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        failures: Sequence[SourceFailure] = (),
    ) -> None:
        """Draw a header and rows, replacing the previous output.

        Raises:
            RowShapeError: If any row's field count differs from the header's
        """
        validate_rows(header, rows)
        table = self.build_table(header, rows)

        if self.clear:
            self.console.clear()
        self.console.print(table)

        if self.show_status_line:
            failed_style = self.styles.get("failed", "red")
            for failure in failures:
                self.console.print(Text(format_failure(failure), style=failed_style))

    def build_table(self, header: Sequence[str], rows: Sequence[Sequence[str]]) -> Table:
        """Build the rich table for a header and already validated rows."""
        table = Table(
            box=box.SIMPLE if self.show_borders else None,
            show_edge=self.show_borders,
            header_style="bold",
            pad_edge=False,
        )
        for column in header:
            table.add_column(column, justify="left", no_wrap=True)
        for row in rows:
            # Cluster-supplied text is never parsed as console markup
            table.add_row(*(Text(value) for value in row), style=self.styles.get(row[0]))
        return table
