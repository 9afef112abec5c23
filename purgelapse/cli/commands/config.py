"""Config command - manage purgelapse defaults."""

from __future__ import annotations

import argparse

from rich import box
from rich.console import Console
from rich.table import Table

from ...errors import SettingsError
from ...settings import LapseSettings

console = Console()


def handle_config(args: argparse.Namespace, settings: LapseSettings) -> int:
    """Handle the config command - inspect and modify configuration."""
    subcommand = getattr(args, "config_command", None)
    if subcommand is None:
        console.print("[red]No configuration subcommand provided. Use 'purgelapse config --help'.[/red]")
        return 1

    if subcommand == "show":
        table = Table(title="purgelapse Configuration", box=box.ROUNDED)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in settings.iter_display_items():
            table.add_row(key, value)
        console.print(table)
        return 0

    if subcommand == "set":
        try:
            settings.set_value(args.key, args.value)
            settings.save()
        except SettingsError as exc:
            console.print(f"[red]{exc}[/red]")
            return 1
        console.print(f"[green]Updated {args.key}.[/green]")
        return 0

    if subcommand == "reset":
        LapseSettings().save()
        console.print("[green]Configuration reset to defaults.[/green]")
        return 0

    if subcommand == "path":
        console.print(str(LapseSettings.config_path()))
        return 0

    console.print(f"[red]Unknown config subcommand: {subcommand}[/red]")
    return 1
