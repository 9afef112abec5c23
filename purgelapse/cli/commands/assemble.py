"""Assemble command - stitch rendered frames into a time-lapse video."""

from __future__ import annotations

import argparse

from rich.console import Console

from ...settings import LapseSettings
from ...video import convert_frames_to_video

console = Console()


def handle_assemble(args: argparse.Namespace, settings: LapseSettings) -> int:
    fps = args.fps if args.fps is not None else settings.fps
    codec = args.codec or settings.codec

    with console.status(f"[cyan]Encoding frames from {args.frames} at {fps} fps...", spinner="dots"):
        written = convert_frames_to_video(args.frames, args.output, fps=fps, codec=codec)

    console.print(f"[green]✓ Encoded {written} frames into {args.output}[/green]")
    return 0
