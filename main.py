#!/usr/bin/env python3
import argparse
import asyncio
import os
from typing import Any, Dict, List, Optional

from rich.panel import Panel

from common import messages
from common.containers import container
from common.events import FILE_CHANGED, LOG
from common.file_watcher.errors import FileWatcherError
from common.models import DEFAULT_FILE_TIMEOUT_MS
from common.utils import console, logger, setup_file_logging


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print a notification each time a watched file settles after a write."
    )
    parser.add_argument("patterns", nargs="+", help="Glob patterns of files to watch")
    parser.add_argument(
        "--file-timeout",
        type=int,
        default=os.getenv("FILEGATE_FILE_TIMEOUT", str(DEFAULT_FILE_TIMEOUT_MS)),
        help="Quiet period in milliseconds before a change is reported",
    )
    parser.add_argument("--root", default=".", help="Directory patterns are relative to")
    parser.add_argument("--log-dir", default=".filegate", help="Directory for log files")
    return parser.parse_args(argv)


def display_banner() -> None:
    """Display the welcome banner using Rich"""
    welcome_panel = Panel(
        "\n[bold cyan]FILEGATE[/bold cyan]\n\n"
        + "[italic green]Settled file change notifications[/italic green]\n",
        border_style="bright_blue",
        title="Welcome",
        title_align="center",
        width=80,
    )
    console.print(welcome_panel, justify="center")
    console.print("\nPress Ctrl+C to stop watching.\n")


def print_log(payload: Dict[str, Any]) -> None:
    console.print(payload["msg"])


def print_change(payload: Dict[str, Any]) -> None:
    console.print(messages.files.changed(payload["path"]))


async def watch(
    patterns: List[str],
    file_timeout: int,
    root: str = ".",
    stop_event: Optional[asyncio.Event] = None,
) -> None:
    """Watch ``patterns`` until ``stop_event`` is set or the task is cancelled."""
    container.config.root.from_value(root)
    container.config.options.fileTimeout.from_value(file_timeout)

    sink = container.sink()
    session = container.session(patterns=patterns)

    sink.on(LOG, print_log)
    sink.on(FILE_CHANGED, print_change)
    try:
        session.start()
        await (stop_event or asyncio.Event()).wait()
    finally:
        session.stop()
        sink.off(LOG, print_log)
        sink.off(FILE_CHANGED, print_change)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    args = parse_args(argv)
    setup_file_logging(args.log_dir)
    display_banner()

    try:
        asyncio.run(watch(args.patterns, args.file_timeout, args.root))
    except KeyboardInterrupt:
        console.print("\n\nGoodbye!", style="bold green")
    except FileWatcherError as e:
        logger.error(f"Watch failed: {e}")
        console.print(f"\n[red]Error: {str(e)}[/red]\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
