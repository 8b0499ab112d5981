"""
Command line interface for inspecting and watching INI files.

Usage:
    ini-monitor dump PATH [--raw]
    ini-monitor fingerprint PATH...
    ini-monitor watch PATH... [--interval SECONDS] [--duration SECONDS]
"""

import logging
import logging.config
import threading
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ini_monitor.config import get_config
from ini_monitor.models import ConfigTree
from ini_monitor.monitoring import ChangeMonitor
from ini_monitor.parsers import IniParser, load_config

logger = logging.getLogger(__name__)

console = Console()


def _load_trees(paths: tuple[Path, ...]) -> list[ConfigTree]:
    parser = IniParser()
    trees = []
    for path in paths:
        if not get_config().is_file_supported(path):
            console.print(f"[yellow]Warning:[/yellow] {path} does not have a recognized configuration extension")
        trees.append(load_config(path, parser=parser))
    return trees


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level")
def main(log_level: str | None) -> None:
    """Parse INI configuration files and watch them for changes."""
    config = get_config()
    log_config = config.get_log_config()
    if log_level:
        log_config["handlers"]["default"]["level"] = log_level.upper()
        log_config["loggers"]["ini_monitor"]["level"] = log_level.upper()
    logging.config.dictConfig(log_config)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--raw", is_flag=True, help="Print the file as read from disk instead of the parsed structure")
def dump(path: Path, raw: bool) -> None:
    """Print a parsed configuration file."""
    tree = load_config(path)
    click.echo(tree.raw_string() if raw else str(tree), nl=False)


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
def fingerprint(paths: tuple[Path, ...]) -> None:
    """Show the content fingerprint of one or more files."""
    table = Table(title="Configuration Fingerprints", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Fingerprint", style="white")
    table.add_column("Sections", style="dim", justify="right")

    for tree in _load_trees(paths):
        table.add_row(tree.name, tree.fingerprint or "-", str(len(tree.section_names)))

    console.print(table)


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--interval", type=float, default=None, help="Poll interval in seconds")
@click.option("--duration", type=float, default=None, help="Stop watching after this many seconds")
def watch(paths: tuple[Path, ...], interval: float | None, duration: float | None) -> None:
    """Watch files and print every detected change."""
    trees = _load_trees(paths)

    def on_change(tree: ConfigTree, change_count: int) -> None:
        label = "initial" if change_count == 0 else f"change {change_count}"
        console.print(f"[bold cyan]{tree.name}[/bold cyan] {label}: [green]{tree.fingerprint or '-'}[/green]")

    console.print(
        Panel.fit(
            "\n".join(str(path) for path in paths),
            title="Watching configuration files",
            border_style="blue",
        )
    )

    stop = threading.Event()
    with ChangeMonitor() as monitor:
        if interval is not None:
            monitor.set_poll_interval_seconds(interval)

        for tree in trees:
            monitor.subscribe(tree, on_change)

        try:
            stop.wait(timeout=duration)
        except KeyboardInterrupt:
            console.print("\n[yellow]Stopping...[/yellow]")

    stats = monitor.get_monitoring_stats()["processing_stats"]
    console.print(f"Poll cycles: {stats['poll_cycles']}, changes detected: {stats['changes_detected']}")


if __name__ == "__main__":
    main()
