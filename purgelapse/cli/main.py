"""Main CLI entry point for purgelapse."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console

from .commands import handle_assemble, handle_config, handle_render, handle_sort
from ..errors import LapseError, SettingsError
from ..settings import LapseSettings

console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all commands and options."""
    parser = argparse.ArgumentParser(
        prog="purgelapse",
        description="Replay object lifecycle logs into a time-lapse of state snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  purgelapse sort data/events data/events_sorted        # Pre-sort raw event files
  purgelapse render data/segments data/events_sorted frames 1000
  purgelapse assemble frames lapse.mp4 --fps 24         # Stitch frames into a video
  purgelapse config set render.output_size 2000

For more help: purgelapse <command> --help
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ═══════════════════════════════════════════════════════════
    # RENDER COMMAND
    # ═══════════════════════════════════════════════════════════
    render_parser = subparsers.add_parser("render", help="Render one frame per event bucket")
    render_parser.add_argument("segments", help="Directory of segment descriptor files")
    render_parser.add_argument("events", help="Directory of bucket-sorted event files")
    render_parser.add_argument("state_dir", help="Directory to write numbered PNG frames into")
    render_parser.add_argument(
        "output_size",
        type=int,
        nargs="?",
        help="Side length of the state tile in pixels (defaults to config)",
    )
    render_parser.add_argument("--font", help="TrueType font for the text panel (defaults to config)")
    render_parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    render_parser.add_argument("--profile", help="Write per-stage timing stats to this JSON file")
    render_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # ═══════════════════════════════════════════════════════════
    # ASSEMBLE COMMAND
    # ═══════════════════════════════════════════════════════════
    assemble_parser = subparsers.add_parser("assemble", help="Encode rendered frames as a video")
    assemble_parser.add_argument("frames", help="Directory of numbered PNG frames")
    assemble_parser.add_argument("output", help="Output video path (e.g. lapse.mp4)")
    assemble_parser.add_argument("--fps", type=int, help="Frames per second (defaults to config)")
    assemble_parser.add_argument("--codec", help="FourCC codec (defaults to config)")

    # ═══════════════════════════════════════════════════════════
    # SORT COMMAND
    # ═══════════════════════════════════════════════════════════
    sort_parser = subparsers.add_parser("sort", help="Sort raw event files by bucket and operation")
    sort_parser.add_argument("events", help="Directory of raw event files")
    sort_parser.add_argument("output", help="Directory for the sorted, gzipped copies")

    # ═══════════════════════════════════════════════════════════
    # CONFIG COMMANDS
    # ═══════════════════════════════════════════════════════════
    config_parser = subparsers.add_parser("config", help="Inspect or update purgelapse configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Configuration actions")
    config_subparsers.required = True

    config_subparsers.add_parser("show", help="Display the current configuration values")
    config_subparsers.add_parser("path", help="Print the configuration file path")
    config_subparsers.add_parser("reset", help="Reset configuration to defaults")

    config_set_parser = config_subparsers.add_parser("set", help="Update a configuration value")
    config_set_parser.add_argument("key", help="Configuration key (e.g., video.fps)")
    config_set_parser.add_argument("value", help="New value")

    return parser


def configure_logging(level: str, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = LapseSettings.load()
    except SettingsError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        console.print("[yellow]Run 'purgelapse config reset' to restore defaults.[/yellow]")
        return 1

    if args.command == "config":
        return handle_config(args, settings)

    configure_logging(settings.log_level, verbose=getattr(args, "verbose", False))

    try:
        if args.command == "render":
            return handle_render(args, settings)
        elif args.command == "assemble":
            return handle_assemble(args, settings)
        elif args.command == "sort":
            return handle_sort(args)
    except LapseError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
