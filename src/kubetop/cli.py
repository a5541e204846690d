"""Command-line interface for kubetop.

This module provides:
- Typer-based CLI application
- Config file loading with CLI overrides
- All command-line flags and options

Usage:
    kubetop                      # Live console table, redrawn every interval
    kubetop --once               # Print one round and exit
    kubetop --json               # Print one round as JSON and exit
    kubetop tui                  # Interactive Textual dashboard

Examples:
    # Watch a single namespace
    kubetop --namespace default

    # Use a specific kubeconfig and a slower refresh
    kubetop --kubeconfig ~/.kube/staging --interval 2

    # Exit on the first failed source instead of skipping it
    kubetop --fatal-errors
"""

from pathlib import Path
from typing import Annotated, Any

from rich.console import Console
from rich.markup import escape
import typer

from kubetop import __version__
from kubetop.config import Config, ConfigError, load_config
from kubetop.log import setup_logging

# Create the main Typer app
app = typer.Typer(
    name="kubetop",
    help="kubetop - a live terminal dashboard for Kubernetes resources",
    no_args_is_help=False,
    add_completion=True,
    rich_markup_mode="rich",
)

# Console for rich output
console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        Console().print(f"kubetop version {__version__}")
        raise typer.Exit()


def build_cli_overrides(
    namespace: str | None = None,
    kubeconfig: Path | None = None,
    interval: float | None = None,
    json_format: bool = False,
    pretty: bool | None = None,
    fatal_errors: bool = False,
    no_mouse: bool = False,
) -> dict[str, Any]:
    """Build config override dict from CLI flags.

    Args:
        namespace: Restrict namespaced resources to this namespace
        kubeconfig: Path to the kubeconfig file
        interval: Refresh interval override
        json_format: Output JSON instead of a table
        pretty: Pretty-print JSON output
        fatal_errors: Exit on the first failed source
        no_mouse: Disable mouse support in the TUI

    Returns:
        Dictionary of config overrides
    """
    overrides: dict[str, Any] = {}

    if namespace is not None:
        overrides["namespace"] = namespace
    if kubeconfig is not None:
        overrides["kubeconfig"] = str(kubeconfig)
    if interval is not None:
        overrides["interval"] = interval
    if fatal_errors:
        overrides["failure_policy"] = "fatal"

    cli_overrides: dict[str, Any] = {}
    if json_format:
        cli_overrides["default_format"] = "json"
    if pretty is not None:
        cli_overrides["pretty_print"] = pretty
    if cli_overrides:
        overrides["cli"] = cli_overrides

    if no_mouse:
        overrides["tui"] = {"mouse_enabled": False}

    return overrides


def load_cli_config(config: Path | None, overrides: dict[str, Any]) -> Config:
    """Load configuration, exiting with code 1 on any config problem."""
    try:
        config_path = str(config) if config else None
        return load_config(config_path=config_path, cli_overrides=overrides)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e


# Common options
NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Only show pods, services and deployments in this namespace",
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to custom config file",
        envvar="KUBETOP_CONFIG_PATH",
        exists=False,  # We handle existence check ourselves
    ),
]

KubeconfigOption = Annotated[
    Path | None,
    typer.Option(
        "--kubeconfig",
        "-k",
        help="Path to the kubeconfig file (default: $KUBECONFIG or ~/.kube/config)",
    ),
]

IntervalOption = Annotated[
    float | None,
    typer.Option(
        "--interval",
        "-i",
        help="Refresh interval in seconds",
        min=0.1,
        max=3600,
    ),
]

FatalErrorsOption = Annotated[
    bool,
    typer.Option(
        "--fatal-errors",
        help="Exit when any source fails instead of skipping it for the round",
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Write debug logs to the configured log file",
    ),
]

# Console-specific options
OnceOption = Annotated[
    bool,
    typer.Option(
        "--once",
        "-o",
        help="Print a single round and exit",
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        "-j",
        help="Output one round in JSON format (implies --once)",
    ),
]

PrettyOption = Annotated[
    bool | None,
    typer.Option(
        "--pretty/--no-pretty",
        help="Pretty-print JSON output (default: True)",
    ),
]

VersionOption = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
]

# TUI-specific options
NoMouseOption = Annotated[
    bool,
    typer.Option(
        "--no-mouse",
        help="Disable mouse support in TUI",
    ),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    namespace: NamespaceOption = None,
    config: ConfigOption = None,
    kubeconfig: KubeconfigOption = None,
    interval: IntervalOption = None,
    once: OnceOption = False,
    json_format: JsonOption = False,
    pretty: PrettyOption = None,
    fatal_errors: FatalErrorsOption = False,
    version: VersionOption = None,
    debug: DebugOption = False,
) -> None:
    """kubetop - live view of nodes, pods, services and deployments.

    Redraws one merged, sorted table of cluster resources every interval.
    Sources that fail are skipped for the round and reported under the table.

    Examples:

        kubetop                        Watch all namespaces

        kubetop -n default --once      Print the default namespace once

        kubetop --json                 Print one round as JSON

        kubetop tui                    Interactive dashboard
    """
    # Only run if no subcommand was invoked
    if ctx.invoked_subcommand is not None:
        return

    overrides = build_cli_overrides(
        namespace=namespace,
        kubeconfig=kubeconfig,
        interval=interval,
        json_format=json_format,
        pretty=pretty,
        fatal_errors=fatal_errors,
    )
    if once or json_format:
        overrides["default_mode"] = "cli"

    cfg = load_cli_config(config, overrides)
    run_kubetop(cfg, once=once, debug_mode=debug)


@app.command("tui")
def tui_command(
    namespace: NamespaceOption = None,
    config: ConfigOption = None,
    kubeconfig: KubeconfigOption = None,
    interval: IntervalOption = None,
    fatal_errors: FatalErrorsOption = False,
    no_mouse: NoMouseOption = False,
    debug: DebugOption = False,
) -> None:
    """Run kubetop in TUI (Terminal User Interface) mode.

    Press r to refresh immediately and q to quit.
    """
    overrides = build_cli_overrides(
        namespace=namespace,
        kubeconfig=kubeconfig,
        interval=interval,
        fatal_errors=fatal_errors,
        no_mouse=no_mouse,
    )
    overrides["default_mode"] = "tui"

    cfg = load_cli_config(config, overrides)
    run_kubetop(cfg, debug_mode=debug)


def run_kubetop(config: Config, once: bool = False, debug_mode: bool = False) -> None:
    """Run kubetop with the given configuration.

    Launches either the TUI or the console table based on configuration.

    Args:
        config: Validated configuration object
        once: Print a single round and exit (console mode only)
        debug_mode: Write DEBUG logs to the configured log file
    """
    setup_logging(config.logging, debug=debug_mode)

    # Import here to avoid loading the cluster client before config errors
    from kubetop import cli_runner

    if config.default_mode == "tui":
        # Import here to avoid loading Textual when not needed
        from kubetop.cluster import ClusterConfigError
        from kubetop.tui import run_app

        try:
            client = cli_runner.create_client(config)
        except ClusterConfigError as e:
            console.print(f"[red]Cluster configuration error:[/red] {escape(str(e))}")
            raise typer.Exit(1) from e

        exit_code = run_app(config, cli_runner.build_aggregator(client, config))
    else:
        exit_code = cli_runner.run_console_mode(config, once=once)

    if exit_code != 0:
        raise typer.Exit(exit_code)


def cli_main() -> None:
    """Entry point for the CLI application."""
    app()
