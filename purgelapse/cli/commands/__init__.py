"""Command handlers for the purgelapse CLI."""

from .assemble import handle_assemble
from .config import handle_config
from .render import handle_render
from .sort import handle_sort

__all__ = [
    "handle_assemble",
    "handle_config",
    "handle_render",
    "handle_sort",
]
