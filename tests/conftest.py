import gzip
import json
import sys
from pathlib import Path

import pytest

# Add repository root to sys.path so 'purgelapse' can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.purgelapse/config.json."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("PURGELAPSE_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("PURGELAPSE_CONFIG_PATH", raising=False)
    return config_dir


@pytest.fixture
def write_jsonl():
    """Write records as (optionally gzipped) JSON lines and return the path."""

    def _write(path: Path, records, compress: bool = True) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        opener = gzip.open if compress else open
        with opener(path, "wt", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record) + "\n")
        return path

    return _write
