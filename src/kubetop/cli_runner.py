"""Console mode runner for kubetop.

This module provides the implementation for console mode operations:
- Building the cluster client and the aggregator from configuration
- Single round output (--once, --json)
- Continuous redraw driven by the refresh scheduler

Errors are reported on stderr so they never mix with table or JSON output.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
import logging
import signal

from rich.console import Console
from rich.markup import escape

from kubetop.cluster import ClusterClient, ClusterConfigError, load_cluster_client
from kubetop.collectors import FanInAggregator, RefreshScheduler, Renderer
from kubetop.config import Config
from kubetop.errors import EXIT_ERROR, EXIT_INTERRUPTED, EXIT_OK, KubetopError
from kubetop.formatters import JsonFormatter, TableFormatter
from kubetop.sources import build_sources

console = Console(stderr=True)

logger = logging.getLogger(__name__)


def create_client(config: Config) -> ClusterClient:
    """Build the cluster client described by the configuration.

    Raises:
        ClusterConfigError: If the kubeconfig is missing or invalid
    """
    return load_cluster_client(config.kubeconfig, request_timeout=config.request_timeout)


def build_aggregator(
    client: ClusterClient,
    config: Config,
    clock: Callable[[], datetime] | None = None,
) -> FanInAggregator:
    """Create the enabled sources and register them with a new aggregator.

    Args:
        client: Cluster API client shared by all sources
        config: Application configuration
        clock: Optional clock override for ages (for tests)

    Returns:
        Aggregator ready to run rounds
    """
    aggregator = FanInAggregator(failure_policy=config.failure_policy)
    for source in build_sources(client, config, clock=clock):
        source_config = config.get_source_config(source.name)
        aggregator.register(
            source,
            max_attempts=source_config.max_attempts,
            retry_base_delay=source_config.retry_base_delay,
        )
    logger.info(
        "Registered sources: %s (policy=%s)",
        ", ".join(source.name for source in aggregator.sources),
        config.failure_policy,
    )
    return aggregator


def get_renderer(config: Config, once: bool, output: Console | None = None) -> Renderer:
    """Get the renderer for the configured output format.

    Args:
        config: Application configuration
        once: Whether a single round is drawn (no screen clearing)
        output: Console to draw on (default: stdout)

    Returns:
        JsonFormatter or TableFormatter
    """
    if config.cli.default_format == "json":
        return JsonFormatter(pretty_print=config.cli.pretty_print, console=output)
    return TableFormatter(
        console=output,
        styles=config.display.colors,
        clear=not once,
        show_status_line=config.display.show_status_line,
        show_borders=config.display.show_borders,
    )


async def run_once(aggregator: FanInAggregator, renderer: Renderer) -> int:
    """Run a single round and render it.

    Returns:
        Exit code (0 for success)
    """
    scheduler = RefreshScheduler(aggregator, renderer)
    await scheduler.run_round()
    return EXIT_OK


async def run_continuous(
    aggregator: FanInAggregator,
    renderer: Renderer,
    interval: float,
) -> int:
    """Redraw forever until SIGTERM stops the scheduler.

    Returns:
        Exit code (0 for a graceful stop)
    """
    scheduler = RefreshScheduler(aggregator, renderer, interval=interval)
    loop = asyncio.get_running_loop()

    handles_sigterm = True
    try:
        loop.add_signal_handler(signal.SIGTERM, scheduler.stop)
    except (NotImplementedError, RuntimeError):
        # Not supported on this platform or outside the main thread
        handles_sigterm = False

    try:
        rounds = await scheduler.run()
    finally:
        if handles_sigterm:
            loop.remove_signal_handler(signal.SIGTERM)

    logger.info("Stopped after %d rounds", rounds)
    return EXIT_OK


def run_console_mode(
    config: Config,
    once: bool = False,
    client: ClusterClient | None = None,
    output: Console | None = None,
) -> int:
    """Run kubetop in console mode.

    This is the main entry point for console mode operations.

    Args:
        config: Application configuration
        once: If True, draw a single round and exit (always True for JSON)
        client: Cluster client to use (default: built from the kubeconfig)
        output: Console to draw on (default: stdout)

    Returns:
        Exit code (0 success, 1 error, 130 interrupted)
    """
    once = once or config.cli.default_format == "json"

    if client is None:
        try:
            client = create_client(config)
        except ClusterConfigError as e:
            console.print(f"[red]Cluster configuration error:[/red] {escape(str(e))}")
            return EXIT_ERROR

    aggregator = build_aggregator(client, config)
    renderer = get_renderer(config, once, output)

    try:
        if once:
            return asyncio.run(run_once(aggregator, renderer))
        return asyncio.run(run_continuous(aggregator, renderer, config.interval))
    except KubetopError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
