"""Main TUI application for kubetop.

This module provides:
- KubetopApp: Textual application showing the merged resource table
- StatusBar: one line summarizing the last round and any failed sources
- run_app: Entry point for launching the TUI
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Header, Static

from kubetop import __version__
from kubetop.errors import KubetopError
from kubetop.formatters.table import DEFAULT_STYLES, format_failure, validate_rows
from kubetop.models.base import HEADER, RoundSnapshot

if TYPE_CHECKING:
    from kubetop.collectors.aggregator import FanInAggregator
    from kubetop.config import Config

logger = logging.getLogger(__name__)


class StatusBar(Static):
    """Status line under the resource table."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $surface;
    }
    """

    def show_snapshot(self, snapshot: RoundSnapshot, failed_style: str = "red") -> None:
        """Summarize a round: row count and duration, or its failed sources."""
        if snapshot.failures:
            text = Text(
                "  ".join(format_failure(failure) for failure in snapshot.failures),
                style=failed_style,
            )
        else:
            text = Text(
                f"{len(snapshot.rows)} resources, round took {snapshot.duration_ms:.0f}ms",
                style="dim",
            )
        self.update(text)


class KubetopApp(App[None]):
    """Main kubetop TUI application.

    Runs one aggregation round per refresh interval and replaces the
    table contents with the new ordered rows. Integrity faults exit the
    application with return code 1.

    Attributes:
        config: The application configuration object
        aggregator: Produces one RoundSnapshot per refresh
    """

    TITLE = "kubetop"
    SUB_TITLE = f"v{__version__}"

    CSS = """
    Screen {
        layout: vertical;
    }

    #resources {
        height: 1fr;
        width: 100%;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("r", "refresh_now", "Refresh"),
    ]

    def __init__(self, config: Config, aggregator: FanInAggregator) -> None:
        """Initialize the kubetop application.

        Args:
            config: Validated configuration object
            aggregator: Aggregator with all sources registered
        """
        super().__init__()
        self._config = config
        self._aggregator = aggregator
        self.styles_by_kind = {**DEFAULT_STYLES, **config.display.colors}
        self.last_snapshot: RoundSnapshot | None = None
        self._refresh_timer: Timer | None = None
        self._refreshing = False

    @property
    def config(self) -> Config:
        """Get the application configuration."""
        return self._config

    @property
    def aggregator(self) -> FanInAggregator:
        """Get the aggregator driving the table."""
        return self._aggregator

    def compose(self) -> ComposeResult:
        """Compose the header, resource table, status bar and footer."""
        yield Header(show_clock=True)
        yield DataTable(id="resources", cursor_type="row", zebra_stripes=False)
        yield StatusBar(id="status-bar")
        yield Footer()

    async def on_mount(self) -> None:
        """Set up the table columns and start the refresh timer."""
        self.log.info(f"kubetop v{__version__} started")
        self.log.info(f"Refresh interval: {self._config.interval}s")

        table = self.query_one("#resources", DataTable)
        table.add_columns(*HEADER)

        self._refresh_timer = self.set_interval(
            self._config.interval, self.refresh_rows, name="refresh-rows"
        )
        self.call_later(self.refresh_rows)

    async def refresh_rows(self) -> None:
        """Run one round and redraw the table.

        Overlapping refreshes are skipped, so a slow round delays the next
        one rather than stacking up.
        """
        if self._refreshing:
            return
        self._refreshing = True
        try:
            snapshot = await self._aggregator.aggregate()
            self.show_snapshot(snapshot)
        except KubetopError as e:
            logger.error("Stopping dashboard: %s", e)
            self.exit(return_code=1, message=f"Error: {e}")
        finally:
            self._refreshing = False

    def show_snapshot(self, snapshot: RoundSnapshot) -> None:
        """Replace the table rows with a snapshot's rows."""
        field_rows = snapshot.field_rows()
        validate_rows(snapshot.header, field_rows)

        table = self.query_one("#resources", DataTable)
        table.clear()
        for fields in field_rows:
            style = self.styles_by_kind.get(fields[0], "")
            table.add_row(*(Text(value, style=style) for value in fields))

        failed_style = self.styles_by_kind.get("failed", "red")
        self.query_one(StatusBar).show_snapshot(snapshot, failed_style)
        self.last_snapshot = snapshot

    async def action_refresh_now(self) -> None:
        """Run a round immediately and restart the interval from now."""
        logger.info("Manual refresh triggered")
        await self.refresh_rows()
        if self._refresh_timer is not None:
            self._refresh_timer.reset()


def run_app(config: Config, aggregator: FanInAggregator) -> int:
    """Create and run the kubetop TUI application.

    Args:
        config: Validated configuration object
        aggregator: Aggregator with all sources registered

    Returns:
        Process exit code (0 on normal quit, 1 on a fatal error)
    """
    app = KubetopApp(config, aggregator)
    app.run(mouse=config.tui.mouse_enabled)
    return app.return_code or 0
