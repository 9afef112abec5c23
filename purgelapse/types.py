"""
Lifecycle Data Types
====================

Typed records that flow through a purgelapse run:

    Segment → SegmentIndex → Event → Batch → BatchReport → Frame

Records arrive as decoded JSON mappings; ``from_dict`` constructors turn them
into these types and reject anything malformed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

import numpy as np


class FileState(IntEnum):
    """Lifecycle state of one object. Values are the tags stored in the state array."""
    PRESENT = 0  # object exists
    DELETE_MARKER = 1  # key deleted, marker in place
    EXPIRED = 2  # object data expired
    DELETE_MARKER_DELETED = 3  # marker gone, lifecycle complete
    WEIRD_CASE = 4  # duplicate or disordered log lines; absorbing


class Operation(str, Enum):
    """Operation kinds found in the event logs"""
    DELETE = "delete"
    EXPIRE = "expire"


_BUCKET_FORMATS = (
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S%z",
)


def _strict_int(name: str, value: Any) -> int:
    """Accept JSON integers only; floats, bools and numeric strings are malformed."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def parse_bucket(value: Any) -> datetime:
    """
    Parse a bucket timestamp into a timezone-aware UTC datetime.

    Accepts ``"2022-09-02 15:55:00.0"``-style strings, ISO-8601 strings,
    epoch seconds and datetimes. Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid bucket timestamp: {value!r}")
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip().replace("T", " ")
        if text.endswith("Z"):
            text = text[:-1]
        parsed = None
        for fmt in _BUCKET_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid bucket timestamp: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class Segment:
    """A partition of the object id space: ``{"segment": 233023, "num": 33}``"""
    segment: int
    num: int

    def __post_init__(self):
        if self.num < 0:
            raise ValueError(f"num must be >= 0, got {self.num}")

    @staticmethod
    def from_dict(record: Dict[str, Any]) -> "Segment":
        return Segment(
            segment=_strict_int("segment", record["segment"]),
            num=_strict_int("num", record["num"]),
        )


@dataclass
class SegmentIndex:
    """Segments sorted by id with the global offset of each segment's first object."""
    segments: List[Segment]
    offsets: np.ndarray
    total: int

    def __len__(self) -> int:
        return len(self.segments)


@dataclass
class Event:
    """
    One log line: an operation applied to a run of objects in a segment.

    ``{"bucket":"2022-09-02 15:55:00.0","operation":"delete","segment":133135,"items":[1,2,3]}``
    """
    bucket: datetime
    operation: Operation
    segment: int
    items: List[int] = field(default_factory=list)

    @staticmethod
    def from_dict(record: Dict[str, Any]) -> "Event":
        items = record["items"]
        if not isinstance(items, list):
            raise ValueError(f"items must be a list, got {type(items).__name__}")
        return Event(
            bucket=parse_bucket(record["bucket"]),
            operation=Operation(str(record["operation"]).lower()),
            segment=_strict_int("segment", record["segment"]),
            items=[_strict_int("items", item) for item in items],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bucket": self.bucket.strftime("%Y-%m-%d %H:%M:%S.%f"),
            "operation": self.operation.value,
            "segment": self.segment,
            "items": list(self.items),
        }


@dataclass
class Batch:
    """All events that share one bucket timestamp."""
    bucket: datetime
    events: List[Event] = field(default_factory=list)

    @property
    def total_actions(self) -> int:
        return sum(len(event.items) for event in self.events)


@dataclass
class BatchReport:
    """Aggregate figures for one processed batch; drives the frame text panel."""
    index: int
    bucket: datetime
    total_actions: int
    elapsed_seconds: int
    rate: int
    duration_since_start: timedelta
    counts: Dict[FileState, int]

    @property
    def hours_since_start(self) -> int:
        return int(self.duration_since_start.total_seconds() // 3600)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "bucket": self.bucket.isoformat(),
            "total_actions": self.total_actions,
            "elapsed_seconds": self.elapsed_seconds,
            "rate": self.rate,
            "hours": self.hours_since_start,
            "counts": {state.name.lower(): count for state, count in self.counts.items()},
        }


@dataclass
class Frame:
    """A composed canvas and its position in the output sequence."""
    index: int
    image: Any  # PIL.Image.Image
    report: Optional[BatchReport] = None

    @property
    def name(self) -> str:
        return f"{self.index:04d}.png"


__all__ = [
    "FileState",
    "Operation",
    "parse_bucket",
    "Segment",
    "SegmentIndex",
    "Event",
    "Batch",
    "BatchReport",
    "Frame",
]
