"""Display and UI utilities for the purgelapse CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..types import FileState

if TYPE_CHECKING:
    from ..pipeline import LapseResult
    from ..utils.profiling import Profiler

console = Console()

STATE_STYLES = {
    FileState.PRESENT: ("Present", "green"),
    FileState.DELETE_MARKER: ("Delete Marker", "yellow"),
    FileState.EXPIRED: ("Expired", "red"),
    FileState.DELETE_MARKER_DELETED: ("Completed", "white"),
    FileState.WEIRD_CASE: ("Weird Case", "magenta"),
}


def print_header(title: str) -> None:
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", border_style="cyan", expand=False))


def display_run_summary(result: LapseResult) -> None:
    """Final state distribution and run totals."""
    table = Table(
        title="[bold cyan]Final Object States[/bold cyan]",
        box=box.DOUBLE_EDGE,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
    )
    table.add_column("State", style="cyan bold", no_wrap=True)
    table.add_column("Objects", justify="right")
    table.add_column("Share", justify="right", style="dim")

    total = max(result.total_objects, 1)
    for state, (label, style) in STATE_STYLES.items():
        count = result.final_counts.get(state, 0)
        table.add_row(f"[{style}]{label}[/{style}]", f"{count:,}", f"{100.0 * count / total:.2f}%")

    console.print("\n", table)

    lines = [
        f"[bold]Frames written:[/bold] {result.frames_written:,}",
        f"[bold]Objects tracked:[/bold] {result.total_objects:,}",
        f"[bold]Actions applied:[/bold] {result.total_actions:,}",
    ]
    if result.first_report is not None and result.last_report is not None:
        lines.append(
            f"[bold]Buckets:[/bold] {result.first_report.bucket:%Y-%m-%d %H:%M} → "
            f"{result.last_report.bucket:%Y-%m-%d %H:%M} "
            f"({result.last_report.hours_since_start} hours)"
        )
    console.print(Panel("\n".join(lines), title="[bold cyan]Run[/bold cyan]", border_style="cyan", expand=False))


def display_profile(profiler: Profiler) -> None:
    rows = profiler.summary_rows()
    if not rows:
        return
    table = Table(title="[bold cyan]Stage Timings[/bold cyan]", box=box.ROUNDED)
    table.add_column("Stage", style="cyan")
    table.add_column("Calls", justify="right")
    table.add_column("Total (s)", justify="right", style="green")
    table.add_column("Mean (s)", justify="right", style="yellow")
    for name, calls, total, mean in rows:
        table.add_row(name, str(calls), f"{total:.2f}", f"{mean:.3f}")
    console.print("\n", table)
