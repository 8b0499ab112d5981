#!/usr/bin/env python3
"""
Demonstration script for INI change monitoring.

Creates a sample configuration file, subscribes to it, and rewrites it a few
times so the change notifications and fingerprints can be observed.

Usage:
    python examples/config_watch_demo.py [--workdir PATH] [--interval SECONDS]
"""

import logging
import tempfile
import threading
import time
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ini_monitor import ChangeMonitor, ConfigTree, MonitorConfig, load_config

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

console = Console()

REVISIONS = [
    "[server]\nhost = localhost\nport = 8080\n",
    "# comments and spacing do not change the fingerprint\n\n[server]\n  port = 8080\nhost = localhost   # local\n",
    "[server]\nhost = 0.0.0.0\nport = 8080\n\n[features]\nflags = search, export\n",
]


def create_history_table(history: list[tuple[int, str, str]]) -> Table:
    """Create a rich table of received notifications."""
    table = Table(title="Change Notifications", show_header=True)
    table.add_column("Change", style="cyan", justify="right")
    table.add_column("Fingerprint", style="white")
    table.add_column("Host", style="dim")

    for change_count, fingerprint, host in history:
        table.add_row(str(change_count), fingerprint, host)

    return table


def run_demo(workdir: Path, interval: float) -> None:
    config_path = workdir / "demo.ini"
    config_path.write_text(REVISIONS[0])

    tree = load_config(config_path)
    history: list[tuple[int, str, str]] = []
    received = threading.Event()

    def on_change(cfg: ConfigTree, change_count: int) -> None:
        host = cfg.get_section("server").get_first_val("host").get_val_str(0, "?")
        history.append((change_count, cfg.fingerprint, host))
        received.set()

    console.print(
        Panel.fit(
            f"Watching [cyan]{config_path}[/cyan] every [yellow]{interval}s[/yellow]\n"
            "Each revision is written with a later modification time and a forced poll.",
            title="INI Monitor Demo",
            border_style="blue",
        )
    )

    with ChangeMonitor(config=MonitorConfig(poll_interval_seconds=interval)) as monitor:
        monitor.subscribe(tree, on_change)

        for revision in REVISIONS[1:]:
            received.clear()
            # coarse filesystem timestamps need a visible step
            time.sleep(1.1)
            config_path.write_text(revision)
            monitor.force_update()
            if not received.wait(timeout=interval + 5):
                logger.warning("No notification received for revision")

    console.print(create_history_table(history))
    console.print(tree)


@click.command()
@click.option("--workdir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.option("--interval", type=float, default=2.0, show_default=True)
def main(workdir: Path | None, interval: float) -> None:
    """Run the INI monitor demonstration."""
    if workdir is not None:
        workdir.mkdir(parents=True, exist_ok=True)
        run_demo(workdir, interval)
        return

    with tempfile.TemporaryDirectory() as tmp:
        run_demo(Path(tmp), interval)


if __name__ == "__main__":
    main()
