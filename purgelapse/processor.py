"""Batch processing: apply one bucket of events to the state store and summarise it."""

import logging
import math
from datetime import datetime
from typing import Optional

from purgelapse.state import StateStore
from purgelapse.types import Batch, BatchReport, FileState
from purgelapse.utils.profiling import profile

logger = logging.getLogger(__name__)


def actions_per_second(total_actions: int, elapsed_seconds: int) -> int:
    """Integer rate; zero when no time has passed."""
    if elapsed_seconds <= 0:
        return 0
    return total_actions // elapsed_seconds


class BatchProcessor:
    """
    Applies batches to a ``StateStore`` in bucket order.

    Tracks the first and previous bucket so each report carries the elapsed
    time since the last batch (for the rate) and since the start of the run.
    """

    def __init__(self, store: StateStore):
        self.store = store
        self.first_bucket: Optional[datetime] = None
        self.previous_bucket: Optional[datetime] = None
        self.batches_processed = 0

    @profile("process_batch")
    def process(self, batch: Batch) -> BatchReport:
        key = batch.bucket
        previous = self.previous_bucket if self.previous_bucket is not None else key
        if self.first_bucket is None:
            self.first_bucket = key

        logger.info(f"Processing group {key}")
        total_actions = 0
        for event in batch.events:
            total_actions += self.store.apply_items(event.segment, event.items, event.operation)

        # Whole epoch seconds per bucket, then the difference
        elapsed = math.floor(key.timestamp()) - math.floor(previous.timestamp())
        rate = actions_per_second(total_actions, elapsed)
        counts = self.store.snapshot_counts()

        logger.info(
            f"Present = {counts[FileState.PRESENT]}, "
            f"delete_marker = {counts[FileState.DELETE_MARKER]}, "
            f"expired = {counts[FileState.EXPIRED]}, "
            f"delete_marker_deleted = {counts[FileState.DELETE_MARKER_DELETED]} "
            f"weird_case = {counts[FileState.WEIRD_CASE]}"
        )
        logger.info(f"Per second: {rate}")

        report = BatchReport(
            index=self.batches_processed,
            bucket=key,
            total_actions=total_actions,
            elapsed_seconds=elapsed,
            rate=rate,
            duration_since_start=key - self.first_bucket,
            counts=counts,
        )
        self.previous_bucket = key
        self.batches_processed += 1
        return report
