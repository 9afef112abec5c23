"""
Lapse Pipeline
==============

Strictly sequential orchestration of a render run:

    segments → SegmentIndex → StateStore
    event streams → merge → batches → {BatchProcessor → FrameRenderer → writer}

The store is created once and passed explicitly to every stage. Each frame is
handed to the writer before the next batch is read, so frames are never
buffered.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from tqdm import tqdm

from purgelapse.config import LapseConfig
from purgelapse.merge import iter_batches
from purgelapse.processor import BatchProcessor
from purgelapse.render import FrameRenderer, FrameWriter, load_font
from purgelapse.segments import build_index
from purgelapse.state import StateStore
from purgelapse.types import Batch, BatchReport, Event, FileState, Frame, Segment
from purgelapse.utils.file_io import load_segments, open_event_streams
from purgelapse.utils.profiling import Profiler

logger = logging.getLogger(__name__)


@dataclass
class LapseResult:
    """Outcome of a completed run."""
    frames_written: int = 0
    total_objects: int = 0
    total_actions: int = 0
    first_report: Optional[BatchReport] = None
    last_report: Optional[BatchReport] = None
    final_counts: Dict[FileState, int] = field(default_factory=dict)


def iter_frames(
    store: StateStore,
    batches: Iterable[Batch],
    renderer: FrameRenderer,
) -> Iterator[Frame]:
    """Apply each batch to ``store`` and yield its rendered frame, in bucket order."""
    processor = BatchProcessor(store)
    for batch in batches:
        report = processor.process(batch)
        yield renderer.render(store, report)


def render_lapse(
    segments: Iterable[Segment],
    streams: Sequence[Iterable[Event]],
    renderer: FrameRenderer,
    sink: Callable[[Frame], object],
    labels: Optional[Sequence[str]] = None,
    show_progress: bool = False,
) -> LapseResult:
    """
    Run the full pipeline over already-decoded inputs.

    Args:
        segments: Segment descriptors, any order
        streams: One event iterable per source, each sorted by bucket
        renderer: Frame renderer (fixes output size and font)
        sink: Called with every frame, in order; persists it
        labels: Optional source names for error messages
        show_progress: Show a tqdm bar over batches

    Returns:
        LapseResult with the frame count and the final state distribution
    """
    index = build_index(segments)
    store = StateStore(index)
    result = LapseResult(total_objects=index.total)

    frames = iter_frames(store, iter_batches(streams, labels=labels), renderer)
    pbar = tqdm(desc="Rendering frames", unit="frame", disable=not show_progress)
    try:
        for frame in frames:
            sink(frame)
            report = frame.report
            if result.first_report is None:
                result.first_report = report
            result.last_report = report
            result.total_actions += report.total_actions
            result.frames_written += 1
            pbar.update(1)
    finally:
        pbar.close()

    result.final_counts = store.snapshot_counts()
    logger.info(
        f"Rendered {result.frames_written} frames from {result.total_actions} actions "
        f"over {result.total_objects} objects"
    )
    return result


def run_lapse(config: LapseConfig) -> LapseResult:
    """Read the corpus described by ``config`` and write its frames to disk."""
    profiler = Profiler()
    profiler.reset()
    profiler.enabled = config.collect_timings or config.profile_path is not None

    segments: List[Segment] = load_segments(config.segments_dir)
    streams, labels = open_event_streams(config.events_dir)
    logger.info(f"Merging {len(streams)} event streams")

    renderer = FrameRenderer(config.output_size, font=load_font(config.font_path))
    writer = FrameWriter(config.state_dir)

    result = render_lapse(
        segments,
        streams,
        renderer,
        writer.write,
        labels=labels,
        show_progress=config.show_progress,
    )

    if config.profile_path is not None:
        profiler.save_stats(config.profile_path)
    return result
