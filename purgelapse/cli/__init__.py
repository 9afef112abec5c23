"""Command-line interface for purgelapse."""

import sys

from .main import main as _main


def main() -> None:
    sys.exit(_main())


__all__ = ["main"]
