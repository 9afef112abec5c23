"""Unit tests for `purgelapse.render`."""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest
from PIL import Image, ImageFont

from purgelapse.errors import RenderError
from purgelapse.render import (
    MARGIN_HEIGHT,
    STATE_COLORS,
    FrameRenderer,
    FrameWriter,
    format_count,
    raster_side,
    summary_lines,
)
from purgelapse.segments import build_index
from purgelapse.state import StateStore
from purgelapse.types import BatchReport, FileState, Frame, Segment

T0 = datetime(2022, 9, 2, 15, 55, tzinfo=timezone.utc)


def make_report(index: int = 0, rate: int = 0, hours: float = 0.0, **counts) -> BatchReport:
    full = {state: 0 for state in FileState}
    for name, value in counts.items():
        full[FileState[name.upper()]] = value
    return BatchReport(
        index=index,
        bucket=T0,
        total_actions=0,
        elapsed_seconds=0,
        rate=rate,
        duration_since_start=timedelta(hours=hours),
        counts=full,
    )


@pytest.fixture
def renderer():
    return FrameRenderer(120, font=ImageFont.load_default(size=30))


class TestRasterize:
    """One pixel per object, row-major, padded with black"""

    @pytest.mark.parametrize("total, side", [(0, 1), (1, 2), (3, 2), (4, 3), (99, 10), (100, 11)])
    def test_raster_side(self, total, side):
        assert raster_side(total) == side

    def test_pixels_follow_flattened_index(self, renderer):
        store = StateStore(build_index([Segment(1, 3)]))
        store.load([FileState.DELETE_MARKER, FileState.EXPIRED, FileState.PRESENT])

        raster = renderer.rasterize(store)

        assert raster.shape == (2, 2, 3)
        assert tuple(raster[0, 0]) == STATE_COLORS[FileState.DELETE_MARKER]
        assert tuple(raster[0, 1]) == STATE_COLORS[FileState.EXPIRED]
        assert tuple(raster[1, 0]) == STATE_COLORS[FileState.PRESENT]
        assert tuple(raster[1, 1]) == (0, 0, 0)

    def test_state_colours(self):
        assert STATE_COLORS[FileState.PRESENT] == (0, 255, 0)
        assert STATE_COLORS[FileState.DELETE_MARKER] == (255, 255, 0)
        assert STATE_COLORS[FileState.EXPIRED] == (255, 0, 0)
        assert STATE_COLORS[FileState.DELETE_MARKER_DELETED] == (0, 0, 0)
        assert STATE_COLORS[FileState.WEIRD_CASE] == (0, 0, 0)

    def test_unknown_tag_is_fatal(self, renderer):
        store = StateStore(build_index([Segment(1, 3)]))
        store.files[2] = 200
        with pytest.raises(RenderError):
            renderer.rasterize(store)


class TestDownsampleAndCompose:
    def test_downsample_to_output_size(self, renderer):
        raster = np.zeros((500, 500, 3), dtype=np.uint8)
        raster[:, :, 1] = 255

        tile = renderer.downsample(raster)

        assert tile.size == (120, 120)
        assert tile.getpixel((60, 60)) == (0, 255, 0)

    def test_compose_places_tile_below_white_margin(self, renderer):
        tile = Image.new("RGB", (120, 120), (255, 0, 0))

        canvas = renderer.compose([], tile)

        assert canvas.size == (120, 120 + MARGIN_HEIGHT)
        assert canvas.getpixel((0, 0)) == (255, 255, 255)
        assert canvas.getpixel((119, MARGIN_HEIGHT - 1)) == (255, 255, 255)
        assert canvas.getpixel((0, MARGIN_HEIGHT)) == (255, 0, 0)
        assert canvas.getpixel((119, MARGIN_HEIGHT + 119)) == (255, 0, 0)

    def test_compose_draws_text_in_margin(self, renderer):
        tile = Image.new("RGB", (120, 120), (0, 255, 0))
        canvas = renderer.compose(["Hours: 1", "Present: 10"], tile)

        panel = np.asarray(canvas.crop((0, 0, 120, MARGIN_HEIGHT)))
        assert panel.min() < 128

    def test_invalid_output_size(self):
        with pytest.raises(ValueError):
            FrameRenderer(0, font=ImageFont.load_default())


class TestSummaryLines:
    def test_thousands_separators(self):
        assert format_count(0) == "0"
        assert format_count(1234567) == "1,234,567"

    def test_panel_lines(self):
        report = make_report(
            rate=12345,
            hours=2.99,
            present=1234567,
            delete_marker=1000,
            expired=12,
            delete_marker_deleted=940360641,
            weird_case=3,
        )

        assert summary_lines(report) == [
            "Hours: 2",
            "Present: 1,234,567",
            "Delete Marker: 1,000",
            "Expired: 12",
            "Completed: 940,360,641",
            "Per second: 12,345",
        ]


class TestRenderAndWrite:
    def test_render_frame(self, renderer):
        store = StateStore(build_index([Segment(1, 3)]))
        frame = renderer.render(store, make_report(index=7, present=3))

        assert frame.index == 7
        assert frame.name == "0007.png"
        assert frame.image.size == (120, 120 + MARGIN_HEIGHT)

    def test_frame_names_are_zero_padded(self):
        assert Frame(index=0, image=None).name == "0000.png"
        assert Frame(index=42, image=None).name == "0042.png"
        assert Frame(index=12345, image=None).name == "12345.png"

    def test_writer_saves_png(self, tmp_path, renderer):
        store = StateStore(build_index([Segment(1, 10)]))
        writer = FrameWriter(tmp_path / "frames")

        path = writer.write(renderer.render(store, make_report(index=0, present=10)))

        assert path == tmp_path / "frames" / "0000.png"
        with Image.open(path) as saved:
            assert saved.size == (120, 120 + MARGIN_HEIGHT)
        assert writer.written == 1
