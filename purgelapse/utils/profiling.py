"""Stage timing for render runs (apply, rasterize, resize, compose, save)."""

import json
import logging
import time
from collections import defaultdict
from contextlib import nullcontext
from functools import wraps
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Profiler:
    """
    Process-wide collector of per-stage wall-clock durations.

    A single instance is shared by every ``@profile``-decorated stage so the
    CLI can print or dump one summary at the end of a run.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(Profiler, cls).__new__(cls)
            cls._instance.timings = defaultdict(list)
            cls._instance.enabled = True
        return cls._instance

    def reset(self):
        self.timings = defaultdict(list)

    def stage(self, name: str):
        """Context manager timing one execution of ``name``."""
        if not self.enabled:
            return nullcontext()
        return StageTimer(name, self)

    def record(self, name: str, duration: float):
        self.timings[name].append(duration)

    def get_stats(self) -> Dict[str, Dict[str, float]]:
        stats = {}
        for name, times in self.timings.items():
            stats[name] = {
                "count": len(times),
                "total_time": sum(times),
                "avg_time": sum(times) / len(times),
                "max_time": max(times),
            }
        return stats

    def summary_rows(self) -> List[Tuple[str, int, float, float]]:
        """(stage, calls, total seconds, mean seconds), slowest stage first."""
        rows = [
            (name, int(s["count"]), s["total_time"], s["avg_time"])
            for name, s in self.get_stats().items()
        ]
        return sorted(rows, key=lambda r: r[2], reverse=True)

    def save_stats(self, filepath: Path):
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(json.dumps(self.get_stats(), indent=2), encoding="utf-8")
        logger.info(f"Profiling stats saved to {filepath}")


class StageTimer:
    def __init__(self, name: str, profiler: Profiler):
        self.name = name
        self.profiler = profiler
        self.started = 0.0

    def __enter__(self):
        self.started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.profiler.record(self.name, time.perf_counter() - self.started)


def profile(name: Optional[str] = None):
    """Decorator timing every call of a function under ``name``."""
    def decorator(func):
        stage_name = name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            with Profiler().stage(stage_name):
                return func(*args, **kwargs)
        return wrapper
    return decorator
