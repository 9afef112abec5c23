"""
State Store
===========

Dense per-object lifecycle state, addressed through the segment offset table.

The store is a single ``uint8`` array with one tag per object. Transitions go
through an explicit lookup table covering every (operation, state) pair; the
canonical lifecycle is

    Present → DeleteMarker → Expired → DeleteMarkerDeleted

and duplicated or disordered log lines are funnelled into the anomaly rows
(ending in the absorbing ``WeirdCase``) instead of aborting the run.
"""

import logging
from itertools import product
from typing import Dict, Sequence

import numpy as np

from purgelapse.errors import ObjectIndexError, TransitionError
from purgelapse.types import FileState, Operation, SegmentIndex

logger = logging.getLogger(__name__)


TRANSITIONS: Dict[tuple, FileState] = {
    # Standard flow
    (Operation.DELETE, FileState.PRESENT): FileState.DELETE_MARKER,
    (Operation.EXPIRE, FileState.DELETE_MARKER): FileState.EXPIRED,
    (Operation.EXPIRE, FileState.EXPIRED): FileState.DELETE_MARKER_DELETED,
    # Anomalies
    (Operation.DELETE, FileState.DELETE_MARKER): FileState.DELETE_MARKER_DELETED,
    (Operation.EXPIRE, FileState.PRESENT): FileState.DELETE_MARKER_DELETED,
    (Operation.DELETE, FileState.EXPIRED): FileState.WEIRD_CASE,
    (Operation.DELETE, FileState.DELETE_MARKER_DELETED): FileState.WEIRD_CASE,
    (Operation.EXPIRE, FileState.DELETE_MARKER_DELETED): FileState.WEIRD_CASE,
    # Absorbing
    (Operation.DELETE, FileState.WEIRD_CASE): FileState.WEIRD_CASE,
    (Operation.EXPIRE, FileState.WEIRD_CASE): FileState.WEIRD_CASE,
}

_missing = set(product(Operation, FileState)) - set(TRANSITIONS)
if _missing:
    raise TransitionError(f"Transition table is missing entries: {sorted(_missing)}")

OPERATION_CODES: Dict[Operation, int] = {op: i for i, op in enumerate(Operation)}
NUM_STATES = len(FileState)

# Row per operation, column per current state; cell holds the next state tag.
_TABLE = np.zeros((len(Operation), NUM_STATES), dtype=np.uint8)
for (_op, _state), _next in TRANSITIONS.items():
    _TABLE[OPERATION_CODES[_op], int(_state)] = int(_next)


def transition(operation: Operation, state: FileState) -> FileState:
    """Return the state that ``operation`` moves ``state`` into."""
    try:
        return TRANSITIONS[(Operation(operation), FileState(state))]
    except (KeyError, ValueError) as exc:
        raise TransitionError(f"Failure: op={operation!r} item={state!r}") from exc


class StateStore:
    """
    Maps global object index → lifecycle state.

    All objects start ``Present``. The array is sized once from the segment
    index and only ever moves forward through the transition table.
    """

    def __init__(self, index: SegmentIndex):
        self.index = index
        self.offsets = index.offsets
        self.files = np.full(index.total, int(FileState.PRESENT), dtype=np.uint8)
        logger.info(f"Allocated state for {len(self.files)} objects")

    def __len__(self) -> int:
        return len(self.files)

    # ------------------------------------------------------------------
    # Addressing
    # ------------------------------------------------------------------
    def _offset(self, segment: int, number: int) -> int:
        # Segment ids are 1-indexed positions in the sorted offset table
        if segment < 1 or segment > len(self.offsets):
            raise ObjectIndexError(segment, number, None, None, len(self.files))
        return int(self.offsets[segment - 1])

    def locate(self, segment: int, number: int) -> int:
        """Global index of object ``number`` (1-indexed) in ``segment``."""
        offset = self._offset(segment, number)
        idx = offset + number - 1
        if number < 1 or idx < 0 or idx >= len(self.files):
            raise ObjectIndexError(segment, number, offset, idx, len(self.files))
        return idx

    def _locate_many(self, segment: int, numbers: np.ndarray) -> np.ndarray:
        first = int(numbers[0]) if len(numbers) else 0
        offset = self._offset(segment, first)
        indices = offset + numbers - 1
        # Numbers are 1-indexed within their own segment
        bad = np.flatnonzero((numbers < 1) | (indices < 0) | (indices >= len(self.files)))
        if len(bad):
            pos = int(bad[0])
            raise ObjectIndexError(
                segment, int(numbers[pos]), offset, int(indices[pos]), len(self.files)
            )
        return indices

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def _check_states(self, states: np.ndarray, operation: Operation) -> None:
        if states.size and int(states.max()) >= NUM_STATES:
            raise TransitionError(f"Failure: op={operation!r} item={int(states.max())}")

    def apply(self, segment: int, number: int, operation: Operation) -> FileState:
        """Move one object through the transition table and return its new state."""
        idx = self.locate(segment, number)
        current = int(self.files[idx])
        if current >= NUM_STATES:
            raise TransitionError(f"Failure: op={operation!r} item={current}")
        nxt = _TABLE[OPERATION_CODES[Operation(operation)], current]
        self.files[idx] = nxt
        return FileState(int(nxt))

    def apply_items(self, segment: int, numbers: Sequence[int], operation: Operation) -> int:
        """
        Apply ``operation`` to every listed object of ``segment``, in list order.

        Returns the number of objects touched. Lists without repeated numbers
        are applied in one vectorised step; repeats are folded one at a time
        so each occurrence sees the state left by the previous one.
        """
        numbers = np.asarray(numbers, dtype=np.int64)
        if numbers.size == 0:
            return 0

        indices = self._locate_many(segment, numbers)
        row = _TABLE[OPERATION_CODES[Operation(operation)]]

        if np.unique(indices).size == indices.size:
            current = self.files[indices]
            self._check_states(current, operation)
            self.files[indices] = row[current]
        else:
            for idx in indices:
                current = self.files[idx]
                self._check_states(np.asarray([current]), operation)
                self.files[idx] = row[current]
        return int(numbers.size)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def state_of(self, segment: int, number: int) -> FileState:
        return FileState(int(self.files[self.locate(segment, number)]))

    def snapshot_counts(self) -> Dict[FileState, int]:
        """Count objects per state with a full scan of the array."""
        counts = np.bincount(self.files, minlength=NUM_STATES)
        if counts.size > NUM_STATES:
            raise TransitionError(f"State array holds unknown tags: {counts.size - 1}")
        return {state: int(counts[int(state)]) for state in FileState}

    def load(self, states: Sequence[int], start: int = 0) -> None:
        """Overwrite a slice of the array; used to build pre-states in isolation."""
        values = np.asarray(states, dtype=np.uint8)
        self.files[start:start + values.size] = values
