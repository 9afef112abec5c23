"""
Frame Renderer
==============

Turns the state store into one annotated frame per batch.

Pipeline per frame:
1. Rasterize the full state array into a square RGB raster (one pixel per object)
2. Downsample it to the output size with a Lanczos filter
3. Compose a white text panel above it with the batch summary
4. Hand the canvas to a writer as ``NNNN.png``

Only one full raster and one composed canvas are alive at a time.
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from purgelapse.errors import RenderError
from purgelapse.state import StateStore
from purgelapse.types import BatchReport, FileState, Frame
from purgelapse.utils.profiling import profile

logger = logging.getLogger(__name__)

MARGIN_HEIGHT = 400
FONT_SIZE = 45
TEXT_X = 25
TEXT_START_Y = 25
LINE_BUFFER = 20

BACKGROUND = (0, 0, 0)
PANEL_COLOR = (255, 255, 255)
TEXT_COLOR = (0, 0, 0)

STATE_COLORS = {
    FileState.PRESENT: (0, 255, 0),
    FileState.DELETE_MARKER: (255, 255, 0),
    FileState.EXPIRED: (255, 0, 0),
    FileState.DELETE_MARKER_DELETED: (0, 0, 0),
    FileState.WEIRD_CASE: (0, 0, 0),
}

# Palette row per state tag, plus one trailing row for padding pixels.
_PAD_CODE = len(FileState)
PALETTE = np.array(
    [STATE_COLORS[state] for state in FileState] + [BACKGROUND], dtype=np.uint8
)

FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/Library/Fonts/DejaVuSans.ttf",
    "DejaVuSans.ttf",
)


def load_font(
    path: Optional[Union[str, Path]] = None,
    size: int = FONT_SIZE,
) -> ImageFont.ImageFont:
    """Load the panel font, falling back to Pillow's bundled default."""
    if path is not None:
        try:
            return ImageFont.truetype(str(path), size=size)
        except OSError as exc:
            raise RenderError(f"Could not load font {path}: {exc}") from exc

    for candidate in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size=size)
        except OSError:
            continue
    logger.warning("DejaVuSans not found, using Pillow's default font")
    return ImageFont.load_default(size=size)


def raster_side(total: int) -> int:
    """Side length of the square raster holding ``total`` objects."""
    return math.isqrt(total) + 1


def format_count(value: int) -> str:
    return f"{value:,}"


def summary_lines(report: BatchReport) -> List[str]:
    """Text panel lines for one batch."""
    counts = report.counts
    return [
        f"Hours: {report.hours_since_start}",
        f"Present: {format_count(counts[FileState.PRESENT])}",
        f"Delete Marker: {format_count(counts[FileState.DELETE_MARKER])}",
        f"Expired: {format_count(counts[FileState.EXPIRED])}",
        f"Completed: {format_count(counts[FileState.DELETE_MARKER_DELETED])}",
        f"Per second: {format_count(report.rate)}",
    ]


class FrameRenderer:
    """
    Renders ``output_size × (output_size + MARGIN_HEIGHT)`` frames from a store.

    Args:
        output_size: Side length of the downsampled state tile in pixels
        font: Font for the summary panel (``load_font()`` when omitted)
    """

    def __init__(self, output_size: int, font: Optional[ImageFont.ImageFont] = None):
        if output_size < 1:
            raise ValueError(f"output_size must be >= 1, got {output_size}")
        self.output_size = output_size
        self.font = font if font is not None else load_font()

    @profile("rasterize")
    def rasterize(self, store: StateStore) -> np.ndarray:
        """Full-resolution ``(side, side, 3)`` raster; pixel (x, y) is object ``y*side + x``."""
        logger.info("Creating image...")
        total = len(store)
        side = raster_side(total)
        if total and int(store.files.max()) >= _PAD_CODE:
            raise RenderError(f"State array holds unknown tag {int(store.files.max())}")
        codes = np.full(side * side, _PAD_CODE, dtype=np.uint8)
        codes[:total] = store.files
        return PALETTE[codes].reshape(side, side, 3)

    @profile("downsample")
    def downsample(self, raster: np.ndarray) -> Image.Image:
        logger.info("Resizing image...")
        try:
            image = Image.fromarray(raster)
            resized = image.resize(
                (self.output_size, self.output_size),
                resample=Image.Resampling.LANCZOS,
            )
        except (OSError, ValueError) as exc:
            raise RenderError(f"Resize failed: {exc}") from exc
        logger.info("Resized...")
        return resized

    @profile("compose")
    def compose(self, lines: Sequence[str], tile: Image.Image) -> Image.Image:
        """White text panel on top, state tile pasted below it."""
        canvas = Image.new(
            "RGB", (self.output_size, self.output_size + MARGIN_HEIGHT), PANEL_COLOR
        )
        draw = ImageDraw.Draw(canvas)
        y = TEXT_START_Y
        try:
            for line in lines:
                left, top, right, bottom = draw.textbbox((0, 0), line, font=self.font)
                draw.text((TEXT_X, y), line, fill=TEXT_COLOR, font=self.font)
                y += (bottom - top) + LINE_BUFFER
            canvas.paste(tile, (0, MARGIN_HEIGHT))
        except (OSError, ValueError) as exc:
            raise RenderError(f"Composite failed: {exc}") from exc
        return canvas

    def render(self, store: StateStore, report: BatchReport) -> Frame:
        """Render the current store state as the frame for ``report``."""
        raster = self.rasterize(store)
        tile = self.downsample(raster)
        del raster
        canvas = self.compose(summary_lines(report), tile)
        return Frame(index=report.index, image=canvas, report=report)


class FrameWriter:
    """Persists frames as ``NNNN.png`` in a state directory."""

    def __init__(self, state_dir: Union[str, Path]):
        self.state_dir = Path(state_dir)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.written = 0

    @profile("save_frame")
    def write(self, frame: Frame) -> Path:
        path = self.state_dir / frame.name
        try:
            frame.image.save(path)
        except (OSError, ValueError) as exc:
            raise RenderError(f"Error saving image {path}: {exc}") from exc
        self.written += 1
        return path

    def __call__(self, frame: Frame) -> Path:
        return self.write(frame)
