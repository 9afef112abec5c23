"""Render command - replay the event corpus into numbered frames."""

from __future__ import annotations

import argparse

from rich.console import Console

from ...config import LapseConfig
from ...pipeline import run_lapse
from ...settings import LapseSettings
from ...utils.profiling import Profiler
from ..display import display_profile, display_run_summary, print_header

console = Console()


def handle_render(args: argparse.Namespace, settings: LapseSettings) -> int:
    """Build the state store, replay every batch and write one PNG per bucket."""
    output_size = args.output_size if args.output_size is not None else settings.output_size
    font_path = args.font or settings.font_path or None

    try:
        config = LapseConfig(
            segments_dir=args.segments,
            events_dir=args.events,
            state_dir=args.state_dir,
            output_size=output_size,
            font_path=font_path,
            show_progress=not args.no_progress,
            profile_path=args.profile,
            collect_timings=args.verbose,
        )
    except ValueError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        return 1

    print_header(f"Rendering {config.events_dir} → {config.state_dir}")
    result = run_lapse(config)

    display_run_summary(result)
    if args.profile or args.verbose:
        display_profile(Profiler())
    console.print(f"[green]✓ Wrote {result.frames_written} frames to {config.state_dir}[/green]")
    return 0
