"""Exception hierarchy shared across purgelapse stages.

Every failure inside a run is fatal: nothing here is retried, the CLI reports
the message and exits.
"""

from __future__ import annotations

from typing import Optional


class LapseError(RuntimeError):
    """Base class for all fatal purgelapse errors."""


class SettingsError(LapseError):
    """Raised when configuration operations fail."""


class RecordError(LapseError):
    """A segment or event record could not be read or decoded."""

    def __init__(self, source: str, line: Optional[int], reason: str):
        self.source = source
        self.line = line
        self.reason = reason
        where = f"{source}:{line}" if line is not None else source
        super().__init__(f"Malformed record at {where}: {reason}")


class ObjectIndexError(LapseError):
    """An event addressed an object outside the state array.

    Carries the full lookup context so a mismatched corpus can be tracked
    down from the error message alone.
    """

    def __init__(
        self,
        segment: int,
        number: int,
        offset: Optional[int],
        index: Optional[int],
        length: int,
    ):
        self.segment = segment
        self.number = number
        self.offset = offset
        self.index = index
        self.length = length
        super().__init__(
            f"Object lookup out of range: segment = {segment} number = {number} "
            f"offset = {offset} idx = {index} len = {length}"
        )


class TransitionError(LapseError):
    """A state/operation pair fell outside the transition table."""


class StreamOrderError(LapseError):
    """A source stream went backwards in time."""

    def __init__(self, source: str, previous, current):
        self.source = source
        self.previous = previous
        self.current = current
        super().__init__(
            f"Event stream {source} is not sorted: bucket {current} follows {previous}"
        )


class RenderError(LapseError):
    """Raster construction, resize, composite or persistence failed."""


__all__ = [
    "LapseError",
    "SettingsError",
    "RecordError",
    "ObjectIndexError",
    "TransitionError",
    "StreamOrderError",
    "RenderError",
]
