"""Segment index construction: sorted segment table plus prefix-sum offsets."""

import logging
from typing import Iterable

import numpy as np

from purgelapse.types import Segment, SegmentIndex

logger = logging.getLogger(__name__)


def build_index(segments: Iterable[Segment]) -> SegmentIndex:
    """
    Sort segments by id and compute the global offset of each one.

    Offsets are the exclusive prefix sum of the segment counts, so
    ``offsets[i]`` is the index of the first object of the i-th segment.
    Segment ids must be distinct; duplicates are not detected and leave
    later lookups ill-defined.
    """
    ordered = sorted(segments, key=lambda s: s.segment)
    counts = np.fromiter((s.num for s in ordered), dtype=np.int64, count=len(ordered))

    offsets = np.zeros(len(ordered), dtype=np.int64)
    if len(ordered) > 1:
        np.cumsum(counts[:-1], out=offsets[1:])
    total = int(counts.sum())

    logger.info(f"Read {len(ordered)} segments with {total} total files")
    return SegmentIndex(segments=ordered, offsets=offsets, total=total)
