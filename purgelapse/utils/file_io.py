from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterator, List, Tuple, TypeVar

from purgelapse.errors import RecordError
from purgelapse.types import Event, Segment

logger = logging.getLogger(__name__)

T = TypeVar("T")

_GZIP_MAGIC = b"\x1f\x8b"


def _is_gzip(path: Path) -> bool:
    with open(path, "rb") as f:
        return f.read(2) == _GZIP_MAGIC


def open_text(path: Path):
    """Open a plain or gzip-compressed text file for reading."""
    path = Path(path)
    if _is_gzip(path):
        return gzip.open(path, "rt", encoding="utf-8")
    return open(path, "r", encoding="utf-8")


def iter_jsonl(path: Path) -> Iterator[Tuple[int, dict[str, Any]]]:
    """Lazily yield ``(line number, record)`` from a JSONL file, gzip or not."""
    path = Path(path)
    try:
        with open_text(path) as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    yield lineno, json.loads(line)
                except json.JSONDecodeError as exc:
                    raise RecordError(str(path), lineno, str(exc)) from exc
    except (OSError, EOFError, UnicodeDecodeError) as exc:
        raise RecordError(str(path), None, str(exc)) from exc


def iter_records(path: Path, factory: Callable[[dict[str, Any]], T]) -> Iterator[T]:
    """Decode each JSONL line of ``path`` through ``factory``."""
    for lineno, raw in iter_jsonl(path):
        try:
            yield factory(raw)
        except (KeyError, TypeError, ValueError) as exc:
            raise RecordError(str(path), lineno, f"{type(exc).__name__}: {exc}") from exc


def list_data_files(directory: Path) -> List[Path]:
    """Regular files in ``directory``, sorted by name so source order is stable."""
    directory = Path(directory)
    if not directory.is_dir():
        raise RecordError(str(directory), None, "not a directory")
    return sorted(p for p in directory.iterdir() if p.is_file() and not p.name.startswith("."))


def load_segments(directory: Path) -> List[Segment]:
    """Read every segment descriptor from every file in ``directory``."""
    segments: List[Segment] = []
    for path in list_data_files(directory):
        segments.extend(iter_records(path, Segment.from_dict))
    return segments


def open_event_streams(directory: Path) -> Tuple[List[Iterator[Event]], List[str]]:
    """One lazy event iterator per file in ``directory``, plus the file names."""
    streams: List[Iterator[Event]] = []
    labels: List[str] = []
    for path in list_data_files(directory):
        logger.info(f"Reading event file {path}")
        streams.append(iter_records(path, Event.from_dict))
        labels.append(str(path))
    return streams, labels


def save_jsonl(data: list[dict[str, Any]], path: Path, compress: bool = False) -> None:
    """Write records as JSON lines, gzip-compressed when ``compress`` is set."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    opener = gzip.open if compress else open
    with opener(path, "wt", encoding="utf-8") as f:
        for item in data:
            f.write(json.dumps(item, separators=(",", ":")) + "\n")


def sort_event_file(source: Path, target: Path) -> int:
    """
    Rewrite an event file ordered by ``(bucket, operation)``.

    Makes an unsorted log usable as a merge input. Returns the record count.
    """
    events = list(iter_records(source, Event.from_dict))
    events.sort(key=lambda e: (e.bucket, e.operation.value))
    save_jsonl([e.to_dict() for e in events], target, compress=True)
    logger.info(f"Sorted {len(events)} events from {source} into {target}")
    return len(events)


def sort_event_dir(source_dir: Path, target_dir: Path) -> int:
    """
    Sort every event file of ``source_dir`` into ``target_dir``.

    Outputs are always gzipped, so ``a`` and ``a.gz`` would land on the same
    target; such collisions are rejected before anything is written.
    """
    target_dir = Path(target_dir)
    targets: dict[str, Path] = {}
    for path in list_data_files(source_dir):
        name = path.name if path.name.endswith(".gz") else f"{path.name}.gz"
        if name in targets:
            raise RecordError(
                str(path), None, f"sorted output {name} would overwrite the one from {targets[name]}"
            )
        targets[name] = path

    total = 0
    for name, path in targets.items():
        total += sort_event_file(path, target_dir / name)
    return total
