"""Sort command - order raw event files by bucket so they can be merged."""

from __future__ import annotations

import argparse

from rich.console import Console

from ...utils.file_io import sort_event_dir

console = Console()


def handle_sort(args: argparse.Namespace) -> int:
    with console.status("[cyan]Sorting event files...", spinner="dots"):
        total = sort_event_dir(args.events, args.output)
    console.print(f"[green]✓ Sorted {total:,} events into {args.output}[/green]")
    return 0
