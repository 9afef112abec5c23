"""
Event Stream Merger
===================

K-way merge of independently time-sorted event streams into one globally
ordered stream, then grouping of equal-bucket runs into batches.

Streams are consumed lazily: only the current head of each live stream is
held in memory, on a min-heap keyed by ``(bucket, source index, sequence)``.
Equal buckets therefore come out in source-index order, which keeps the
intra-batch event order reproducible from run to run.
"""

import heapq
import logging
from itertools import groupby
from typing import Iterable, Iterator, List, Optional, Sequence

from purgelapse.errors import StreamOrderError
from purgelapse.types import Batch, Event

logger = logging.getLogger(__name__)


def _checked(stream: Iterable[Event], source: str) -> Iterator[Event]:
    """Yield from ``stream``, failing if its buckets ever go backwards."""
    previous = None
    for event in stream:
        if previous is not None and event.bucket < previous:
            raise StreamOrderError(source, previous, event.bucket)
        previous = event.bucket
        yield event


def merge_streams(
    streams: Sequence[Iterable[Event]],
    labels: Optional[Sequence[str]] = None,
) -> Iterator[Event]:
    """
    Merge ascending event streams into one ascending stream.

    Args:
        streams: Event iterables, each non-decreasing by ``bucket``
        labels: Optional names for the streams, used in error messages

    Yields:
        Events in non-decreasing bucket order. Exhausted streams drop out.
    """
    if labels is not None and len(labels) != len(streams):
        raise ValueError(f"Got {len(labels)} labels for {len(streams)} streams")

    iterators: List[Iterator[Event]] = []
    for i, stream in enumerate(streams):
        source = labels[i] if labels is not None else f"#{i}"
        iterators.append(_checked(stream, source))

    heap = []
    for source_idx, it in enumerate(iterators):
        head = next(it, None)
        if head is not None:
            heap.append((head.bucket, source_idx, 0, head))
    heapq.heapify(heap)
    logger.debug(f"Merging {len(heap)} live streams out of {len(iterators)}")

    while heap:
        _, source_idx, seq, event = heap[0]
        yield event
        nxt = next(iterators[source_idx], None)
        if nxt is None:
            heapq.heappop(heap)
        else:
            heapq.heapreplace(heap, (nxt.bucket, source_idx, seq + 1, nxt))


def group_batches(events: Iterable[Event]) -> Iterator[Batch]:
    """Group adjacent events with the same bucket into one batch each."""
    previous = None
    for bucket, group in groupby(events, key=lambda e: e.bucket):
        if previous is not None and bucket <= previous:
            raise StreamOrderError("merged", previous, bucket)
        previous = bucket
        yield Batch(bucket=bucket, events=list(group))


def iter_batches(
    streams: Sequence[Iterable[Event]],
    labels: Optional[Sequence[str]] = None,
) -> Iterator[Batch]:
    """Merge ``streams`` and yield one batch per distinct bucket, ascending."""
    return group_batches(merge_streams(streams, labels=labels))
