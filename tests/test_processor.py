"""Unit tests for `purgelapse.processor`."""

from datetime import datetime, timedelta, timezone

import pytest

from purgelapse.errors import ObjectIndexError
from purgelapse.processor import BatchProcessor, actions_per_second
from purgelapse.segments import build_index
from purgelapse.state import StateStore
from purgelapse.types import Batch, Event, FileState, Operation, Segment

T0 = datetime(2022, 9, 2, 15, 55, tzinfo=timezone.utc)


def make_batch(seconds: int, *events) -> Batch:
    bucket = T0 + timedelta(seconds=seconds)
    return Batch(
        bucket=bucket,
        events=[
            Event(bucket=bucket, operation=op, segment=segment, items=list(items))
            for op, segment, items in events
        ],
    )


@pytest.fixture
def store():
    return StateStore(build_index([Segment(1, 100), Segment(2, 100)]))


class TestActionsPerSecond:
    @pytest.mark.parametrize(
        "actions, elapsed, expected",
        [(0, 0, 0), (500, 0, 0), (120, 60, 2), (7, 2, 3), (59, 60, 0)],
    )
    def test_floor_division_with_zero_guard(self, actions, elapsed, expected):
        assert actions_per_second(actions, elapsed) == expected


class TestBatchProcessor:
    """Application, counting and timing across consecutive batches"""

    def test_scenario_a_single_batch(self):
        store = StateStore(build_index([Segment(1, 3)]))
        processor = BatchProcessor(store)

        report = processor.process(make_batch(0, (Operation.DELETE, 1, [1, 2])))

        assert report.index == 0
        assert report.total_actions == 2
        assert report.elapsed_seconds == 0
        assert report.rate == 0
        assert report.duration_since_start == timedelta(0)
        assert report.counts[FileState.PRESENT] == 1
        assert report.counts[FileState.DELETE_MARKER] == 2

    def test_rate_uses_previous_bucket(self, store):
        processor = BatchProcessor(store)
        processor.process(make_batch(0, (Operation.DELETE, 1, range(1, 11))))
        report = processor.process(
            make_batch(60, (Operation.DELETE, 1, range(11, 71)), (Operation.DELETE, 2, range(1, 61)))
        )

        assert report.index == 1
        assert report.total_actions == 120
        assert report.elapsed_seconds == 60
        assert report.rate == 2

    def test_elapsed_counts_whole_second_boundaries(self, store):
        processor = BatchProcessor(store)
        first = T0 + timedelta(milliseconds=900)
        second = T0 + timedelta(seconds=1, milliseconds=100)
        processor.process(
            Batch(bucket=first, events=[Event(bucket=first, operation=Operation.DELETE, segment=1, items=[1])])
        )
        report = processor.process(
            Batch(
                bucket=second,
                events=[Event(bucket=second, operation=Operation.DELETE, segment=1, items=list(range(2, 52)))],
            )
        )

        assert report.elapsed_seconds == 1
        assert report.rate == 50

    def test_duration_tracks_first_bucket(self, store):
        processor = BatchProcessor(store)
        processor.process(make_batch(0, (Operation.DELETE, 1, [1])))
        processor.process(make_batch(3600, (Operation.EXPIRE, 1, [1])))
        report = processor.process(make_batch(3 * 3600 + 59, (Operation.EXPIRE, 1, [1])))

        assert report.duration_since_start == timedelta(hours=3, seconds=59)
        assert report.hours_since_start == 3
        assert report.elapsed_seconds == 2 * 3600 + 59
        assert report.counts[FileState.DELETE_MARKER_DELETED] == 1

    def test_counts_reflect_whole_batch(self, store):
        processor = BatchProcessor(store)
        report = processor.process(
            make_batch(
                0,
                (Operation.DELETE, 1, [1, 2, 3]),
                (Operation.EXPIRE, 2, [5]),
                (Operation.DELETE, 1, [1]),
            )
        )

        assert report.counts == {
            FileState.PRESENT: 196,
            FileState.DELETE_MARKER: 2,
            FileState.EXPIRED: 0,
            FileState.DELETE_MARKER_DELETED: 2,
            FileState.WEIRD_CASE: 0,
        }
        assert sum(report.counts.values()) == len(store)

    def test_bad_reference_aborts(self, store):
        processor = BatchProcessor(store)
        with pytest.raises(ObjectIndexError):
            processor.process(make_batch(0, (Operation.DELETE, 2, [101])))

    def test_report_to_dict(self, store):
        report = BatchProcessor(store).process(make_batch(0, (Operation.DELETE, 1, [1])))
        data = report.to_dict()
        assert data["counts"]["delete_marker"] == 1
        assert data["hours"] == 0
