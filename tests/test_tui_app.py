"""Tests for kubetop TUI application.

This module tests:
- KubetopApp instantiation
- Application lifecycle (startup/shutdown)
- Table contents after a refresh round
- Status bar for failed sources
- Keyboard bindings (refresh, quit)
- Exit on integrity faults
"""

from unittest.mock import patch

import pytest
from textual.pilot import Pilot
from textual.widgets import DataTable

from kubetop import __version__
from kubetop.cli_runner import build_aggregator
from kubetop.config import Config
from kubetop.errors import FetchError
from kubetop.models import HEADER
from kubetop.tui import KubetopApp, StatusBar, run_app

from conftest import FakeClusterClient, fixed_clock, make_deployment


def make_app(client: FakeClusterClient, config: Config | None = None) -> KubetopApp:
    # A long interval keeps the timer out of the way; rounds are driven explicitly
    config = config or Config(interval=60)
    return KubetopApp(config, build_aggregator(client, config, clock=fixed_clock))


async def wait_for_round(pilot: Pilot, app: KubetopApp) -> None:
    """Pause until the app has drawn its first round."""
    for _ in range(100):
        if app.last_snapshot is not None:
            return
        await pilot.pause(0.02)
    raise AssertionError("no round was drawn")


class TestKubetopAppInstantiation:
    """Tests for KubetopApp instantiation."""

    def test_instantiate(self, fake_client: FakeClusterClient) -> None:
        """Test app keeps its config and aggregator."""
        config = Config(interval=60)
        aggregator = build_aggregator(fake_client, config)
        app = KubetopApp(config, aggregator)
        assert app.config is config
        assert app.aggregator is aggregator
        assert app.last_snapshot is None

    def test_app_title(self, fake_client: FakeClusterClient) -> None:
        """Test app has correct title and version subtitle."""
        app = make_app(fake_client)
        assert app.TITLE == "kubetop"
        assert __version__ in app.SUB_TITLE

    def test_colors_from_config(self, fake_client: FakeClusterClient) -> None:
        """Test configured colors override the defaults."""
        config = Config(interval=60, display={"colors": {"pod": "green"}})
        app = make_app(fake_client, config)
        assert app.styles_by_kind["pod"] == "green"
        assert app.styles_by_kind["failed"] == "red"


class TestKubetopAppLifecycle:
    """Tests for KubetopApp lifecycle using Textual's pilot."""

    @pytest.mark.asyncio
    async def test_app_startup(self, fake_client: FakeClusterClient) -> None:
        """Test app starts with header, table and footer."""
        app = make_app(fake_client)
        async with app.run_test() as pilot:
            assert pilot.app is app
            assert len(app.query("Header")) == 1
            assert len(app.query("Footer")) == 1
            table = app.query_one("#resources", DataTable)
            assert [str(column.label) for column in table.columns.values()] == list(HEADER)

    @pytest.mark.asyncio
    async def test_rows_drawn(self, fake_client: FakeClusterClient) -> None:
        """Test the first round fills the table in order."""
        app = make_app(fake_client)
        async with app.run_test() as pilot:
            await wait_for_round(pilot, app)
            table = app.query_one("#resources", DataTable)

            assert table.row_count == 4
            kinds = [str(table.get_row_at(i)[0]) for i in range(table.row_count)]
            assert kinds == ["deployment", "node", "pod", "service"]
            status = app.query_one(StatusBar)
            assert "4 resources" in str(status.content)

    @pytest.mark.asyncio
    async def test_failed_source_in_status_bar(self, fake_client: FakeClusterClient) -> None:
        """Test a failed source is shown in the status bar, not the table."""
        fake_client.errors["pods"] = FetchError("pods", "API error 403: Forbidden")
        app = make_app(fake_client)
        async with app.run_test() as pilot:
            await wait_for_round(pilot, app)

            assert app.query_one("#resources", DataTable).row_count == 3
            status = app.query_one(StatusBar)
            assert "pods unavailable: API error 403: Forbidden" in str(status.content)

    @pytest.mark.asyncio
    async def test_refresh_key(self, fake_client: FakeClusterClient) -> None:
        """Test 'r' runs another round immediately."""
        app = make_app(fake_client)
        async with app.run_test() as pilot:
            await wait_for_round(pilot, app)
            first = app.last_snapshot
            calls = len(fake_client.calls)

            await pilot.press("r")
            await pilot.pause(0.1)

            assert len(fake_client.calls) == calls + 4
            assert app.last_snapshot is not first

    @pytest.mark.asyncio
    async def test_quit_key(self, fake_client: FakeClusterClient) -> None:
        """Test app shuts down with 'q' key."""
        app = make_app(fake_client)
        async with app.run_test() as pilot:
            await pilot.press("q")
        assert app.return_code == 0

    @pytest.mark.asyncio
    async def test_integrity_error_exits(self, fake_client: FakeClusterClient) -> None:
        """Test an integrity fault exits the app with return code 1."""
        fake_client.objects["deployments"] = [make_deployment(desired=None)]
        app = make_app(fake_client)
        async with app.run_test() as pilot:
            await pilot.pause(0.3)
        assert app.return_code == 1
        assert app.last_snapshot is None


class TestRunApp:
    """Tests for run_app()."""

    def test_run_app_mouse_setting(self, fake_client: FakeClusterClient) -> None:
        """Test run_app passes the mouse setting and maps the return code."""
        config = Config(interval=60, tui={"mouse_enabled": False})
        with patch.object(KubetopApp, "run") as run:
            code = run_app(config, build_aggregator(fake_client, config))

        run.assert_called_once_with(mouse=False)
        assert code == 0
