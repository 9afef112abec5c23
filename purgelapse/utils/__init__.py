"""Utility modules for purgelapse."""

from .file_io import (
    iter_jsonl,
    load_segments,
    open_event_streams,
    save_jsonl,
    sort_event_dir,
    sort_event_file,
)
from .profiling import Profiler, profile

__all__ = [
    'iter_jsonl',
    'load_segments',
    'open_event_streams',
    'save_jsonl',
    'sort_event_dir',
    'sort_event_file',
    'Profiler',
    'profile',
]
