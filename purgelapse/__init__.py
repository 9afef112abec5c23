"""purgelapse: object lifecycle logs replayed as a time-lapse of state snapshots."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("purgelapse")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from purgelapse.errors import (
    LapseError,
    ObjectIndexError,
    RecordError,
    RenderError,
    SettingsError,
    StreamOrderError,
    TransitionError,
)
from purgelapse.types import (
    Batch,
    BatchReport,
    Event,
    FileState,
    Frame,
    Operation,
    Segment,
    SegmentIndex,
)
from purgelapse.segments import build_index
from purgelapse.state import StateStore, transition
from purgelapse.merge import group_batches, iter_batches, merge_streams
from purgelapse.processor import BatchProcessor
from purgelapse.render import FrameRenderer, FrameWriter, load_font
from purgelapse.config import LapseConfig
from purgelapse.pipeline import LapseResult, render_lapse, run_lapse

__all__ = [
    # Version
    "__version__",
    # Errors
    "LapseError",
    "ObjectIndexError",
    "RecordError",
    "RenderError",
    "SettingsError",
    "StreamOrderError",
    "TransitionError",
    # Types
    "Batch",
    "BatchReport",
    "Event",
    "FileState",
    "Frame",
    "Operation",
    "Segment",
    "SegmentIndex",
    # Core
    "build_index",
    "StateStore",
    "transition",
    "merge_streams",
    "group_batches",
    "iter_batches",
    "BatchProcessor",
    "FrameRenderer",
    "FrameWriter",
    "load_font",
    # Pipeline
    "LapseConfig",
    "LapseResult",
    "render_lapse",
    "run_lapse",
]
