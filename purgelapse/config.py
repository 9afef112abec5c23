"""
Run Configuration
=================

Validated configuration for a single render run.

Only the output tile size is a real knob; colours, panel layout and font size
are fixed in ``purgelapse.render``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class LapseConfig:
    """Inputs, outputs and presentation options for ``run_lapse``."""

    segments_dir: Path
    """Directory of (optionally gzipped) segment descriptor JSONL files."""

    events_dir: Path
    """Directory of per-source event JSONL files, each sorted by bucket."""

    state_dir: Path
    """Directory the numbered PNG frames are written into."""

    output_size: int = 1000
    """Side length in pixels of the downsampled state tile."""

    font_path: Optional[Path] = None
    """TrueType font for the summary panel (system DejaVuSans when unset)."""

    show_progress: bool = True
    """Show a tqdm progress bar over batches."""

    profile_path: Optional[Path] = None
    """Write per-stage timing stats as JSON here after the run."""

    collect_timings: bool = False
    """Time each stage even without ``profile_path`` (for on-screen summaries)."""

    def __post_init__(self):
        self.segments_dir = Path(self.segments_dir)
        self.events_dir = Path(self.events_dir)
        self.state_dir = Path(self.state_dir)
        if self.font_path is not None:
            self.font_path = Path(self.font_path)
        if self.profile_path is not None:
            self.profile_path = Path(self.profile_path)

        if self.output_size < 1:
            raise ValueError(f"output_size must be >= 1, got {self.output_size}")
        if not self.segments_dir.is_dir():
            raise ValueError(f"segments_dir is not a directory: {self.segments_dir}")
        if not self.events_dir.is_dir():
            raise ValueError(f"events_dir is not a directory: {self.events_dir}")
        if self.font_path is not None and not self.font_path.is_file():
            raise ValueError(f"font_path does not exist: {self.font_path}")

        logger.debug(
            f"LapseConfig validated: segments={self.segments_dir}, events={self.events_dir}, "
            f"state={self.state_dir}, output_size={self.output_size}"
        )
