"""Command-line interface for pskiller.

This module provides:
- Typer-based CLI application
- Config file loading with CLI overrides
- The interactive dashboard (default)
- A one-shot `snapshot` command printing the same figures to stdout

Usage:
    pskiller                          # Start the dashboard
    pskiller --sort cpu --group       # Start sorted by CPU, grouped by executable
    pskiller snapshot --limit 10      # Print the top 10 processes and exit

Examples:
    # Start with a filter already applied
    pskiller --filter firefox

    # Use a custom configuration file
    pskiller --config ~/.config/pskiller/custom.yaml

    # Log everything to the configured log file
    pskiller --debug
"""

from pathlib import Path
import time
from typing import Annotated, Any

from rich.console import Console
from rich.table import Table
from rich.text import Text
import typer

from pskiller import __version__
from pskiller.collectors import PsutilSnapshotProvider
from pskiller.config import Config, ConfigError, load_config
from pskiller.formatting import format_duration, format_percent, get_usage_color
from pskiller.logs import configure_logging
from pskiller.models import Ordering
from pskiller.state import AppState
from pskiller.tui import run_app
from pskiller.tui.widgets import render_summary_line

# Create the main Typer app
app = typer.Typer(
    name="pskiller",
    help="PSycho KILLer - a terminal dashboard for finding and signalling processes",
    no_args_is_help=False,
    add_completion=True,
    rich_markup_mode="rich",
)

# Console for rich output
console = Console()

DEFAULT_SNAPSHOT_LIMIT = 20


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"pskiller version {__version__}")
        raise typer.Exit()


def build_cli_overrides(
    interval: float | None = None,
    sort: Ordering | None = None,
    group: bool | None = None,
    filter_text: str | None = None,
    no_mouse: bool = False,
    debug: bool = False,
) -> dict[str, Any]:
    """Build config override dict from CLI flags.

    Args:
        interval: Poll interval override
        sort: Initial sort mode
        group: Initial grouping by executable
        filter_text: Initial filter
        no_mouse: Disable mouse support
        debug: Enable DEBUG file logging

    Returns:
        Dictionary of config overrides
    """
    overrides: dict[str, Any] = {}

    if interval is not None:
        overrides["interval"] = interval

    process_overrides: dict[str, Any] = {}
    if sort is not None:
        process_overrides["default_sort"] = sort.value
    if group is not None:
        process_overrides["group_by_exe"] = group
    if filter_text is not None:
        process_overrides["default_filter"] = filter_text
    if process_overrides:
        overrides["processes"] = process_overrides

    if no_mouse:
        overrides["tui"] = {"mouse_enabled": False}

    if debug:
        overrides["logging"] = {"enabled": True, "level": "DEBUG"}

    return overrides


def load_or_exit(config: Path | None, overrides: dict[str, Any]) -> Config:
    """Load configuration, printing the problem and exiting with status 1 on failure."""
    try:
        config_path = str(config) if config else None
        return load_config(config_path=config_path, cli_overrides=overrides)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e


# Common options
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to custom config file",
        envvar="PSKILLER_CONFIG_PATH",
        exists=False,  # We handle existence check ourselves
    ),
]

IntervalOption = Annotated[
    float | None,
    typer.Option(
        "--interval",
        "-i",
        help="Seconds between polls",
        min=0.1,
    ),
]

SortOption = Annotated[
    Ordering | None,
    typer.Option(
        "--sort",
        "-s",
        help="Initial sort order",
        case_sensitive=False,
    ),
]

GroupOption = Annotated[
    bool | None,
    typer.Option(
        "--group/--no-group",
        help="Group processes by executable path",
    ),
]

FilterOption = Annotated[
    str | None,
    typer.Option(
        "--filter",
        "-f",
        help="Initial process filter",
    ),
]

NoMouseOption = Annotated[
    bool,
    typer.Option(
        "--no-mouse",
        help="Disable mouse support",
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Write DEBUG logs to the log file",
    ),
]

VersionOption = Annotated[
    bool | None,
    typer.Option(
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
]

LimitOption = Annotated[
    int,
    typer.Option(
        "--limit",
        "-n",
        help="Number of processes to print (0 for all)",
        min=0,
    ),
]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: ConfigOption = None,
    interval: IntervalOption = None,
    sort: SortOption = None,
    group: GroupOption = None,
    filter_text: FilterOption = None,
    no_mouse: NoMouseOption = False,
    debug: DebugOption = False,
    version: VersionOption = None,
) -> None:
    """pskiller - PSycho KILLer.

    Browse running processes, filter them, and send them signals.

    Examples:

        pskiller                        Start the dashboard

        pskiller -s memory --group      Sort by memory, grouped by executable

        pskiller snapshot -n 10         Print the top 10 processes and exit
    """
    # Only run if no subcommand was invoked
    if ctx.invoked_subcommand is not None:
        return

    overrides = build_cli_overrides(
        interval=interval,
        sort=sort,
        group=group,
        filter_text=filter_text,
        no_mouse=no_mouse,
        debug=debug,
    )
    cfg = load_or_exit(config, overrides)
    log = configure_logging(cfg.logging, debug=debug)

    run_app(cfg, logger=log)


def render_process_table(state: AppState, limit: int) -> Table:
    """Build a rich table of the visible processes."""
    processes = state.processes if limit == 0 else state.processes[:limit]
    title = "Running Processes"
    if state.grouped:
        title += " (grouped by executable)"
    table = Table(title=title, title_justify="left", expand=False)
    table.add_column("PID", justify="right", style="bright_cyan")
    table.add_column("Name", overflow="ellipsis", max_width=60)
    table.add_column("Uptime", justify="right")
    table.add_column("MEM", justify="right")
    table.add_column("CPU", justify="right")

    for stat in processes:
        name = stat.display_name
        if stat.is_group:
            name = f"[{len(stat.group_children)}] {name}"
        table.add_row(
            str(stat.pid),
            Text(name),
            format_duration(stat.run_time_seconds),
            Text(format_percent(stat.memory_usage), style=get_usage_color(stat.memory_usage)),
            Text(format_percent(stat.cpu_usage), style=get_usage_color(stat.cpu_usage)),
        )
    return table


@app.command("snapshot")
def snapshot_command(
    config: ConfigOption = None,
    interval: IntervalOption = None,
    sort: SortOption = None,
    group: GroupOption = None,
    filter_text: FilterOption = None,
    limit: LimitOption = DEFAULT_SNAPSHOT_LIMIT,
    debug: DebugOption = False,
) -> None:
    """Print system figures and the process list once, then exit.

    Two polls are taken one interval apart so that rates and CPU usage
    are measured rather than estimated.
    """
    overrides = build_cli_overrides(
        interval=interval,
        sort=sort,
        group=group,
        filter_text=filter_text,
        debug=debug,
    )
    cfg = load_or_exit(config, overrides)
    log = configure_logging(cfg.logging, debug=debug)

    state = AppState(
        PsutilSnapshotProvider(logger=log.getChild("collectors")),
        ordering=cfg.ordering,
        grouped=cfg.processes.group_by_exe,
        filter_text=cfg.processes.default_filter,
        logger=log.getChild("state"),
    )
    state.start()
    time.sleep(cfg.interval)
    state.poll()

    for line in state.system_lines():
        console.print(render_summary_line(line))
    console.print()
    console.print(render_process_table(state, limit))


def cli_main() -> None:
    """Entry point for the CLI application."""
    app()
