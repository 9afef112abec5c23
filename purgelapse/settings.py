"""User-facing configuration management for purgelapse."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple

from purgelapse.errors import SettingsError

CURRENT_VERSION = 1
logger = logging.getLogger(__name__)


@dataclass
class LapseSettings:
    """Persisted defaults loaded from ``config.json``; CLI flags override them."""

    output_size: int = 1000
    font_path: str = ""
    fps: int = 12
    codec: str = "mp4v"
    log_level: str = "INFO"
    config_version: int = CURRENT_VERSION

    _KEY_ALIASES: ClassVar[Dict[str, str]] = {
        "render.output.size": "output_size",
        "output.size": "output_size",
        "render.font": "font_path",
        "font.path": "font_path",
        "font": "font_path",
        "video.fps": "fps",
        "fps": "fps",
        "video.codec": "codec",
        "codec": "codec",
        "log.level": "log_level",
    }

    _VALID_LOG_LEVELS: ClassVar[Tuple[str, ...]] = (
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
    )

    # ------------------------------------------------------------------
    # Lifecycle helpers
    # ------------------------------------------------------------------
    @classmethod
    def config_path(cls) -> Path:
        """Return the location of the user configuration file."""
        env_path = os.getenv("PURGELAPSE_CONFIG_PATH")
        if env_path:
            path = Path(env_path).expanduser()
        else:
            base_dir = Path(
                os.getenv("PURGELAPSE_CONFIG_DIR", Path.home() / ".purgelapse")
            ).expanduser()
            path = base_dir / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @classmethod
    def load(cls) -> "LapseSettings":
        """Load settings from disk, creating defaults if necessary."""
        path = cls.config_path()
        if not path.exists():
            settings = cls()
            settings.save(path)
            return settings

        try:
            raw: Dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SettingsError(
                f"Configuration file at {path} is not valid JSON: {exc}"
            ) from exc

        known_fields = {field.name for field in fields(cls)}
        data = {name: raw[name] for name in known_fields if name in raw}

        settings = cls(**data)
        settings.config_version = CURRENT_VERSION
        settings.validate()

        # Ensure new defaults are written back so the file stays current.
        settings.save(path)
        return settings

    def save(self, path: Optional[Path] = None) -> None:
        """Persist the current settings to disk."""
        self.validate()
        target = path or self.config_path()
        target.write_text(
            json.dumps(self.to_dict(), indent=2, sort_keys=True), encoding="utf-8"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def iter_display_items(self) -> Iterable[Tuple[str, str]]:
        """Yield human-friendly key/value pairs for CLI display."""
        yield "render.output_size", str(self.output_size)
        yield "render.font", self.font_path or "(system DejaVuSans)"
        yield "video.fps", str(self.fps)
        yield "video.codec", self.codec
        yield "log.level", self.log_level

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------
    def set_value(self, key: str, raw_value: str) -> None:
        """Update a configuration value using CLI-friendly keys."""
        field_name = self._resolve_field_name(key)
        value: Any = raw_value.strip()

        if field_name in {"output_size", "fps"}:
            try:
                value = int(value)
            except ValueError as exc:
                raise SettingsError(f"'{key}' must be an integer, got {raw_value!r}.") from exc
        elif field_name == "log_level":
            value = value.upper()
        elif field_name == "codec" and len(value) != 4:
            raise SettingsError("Video codec must be a four-character code (e.g. mp4v).")

        setattr(self, field_name, value)
        self.validate()

    def _resolve_field_name(self, key: str) -> str:
        normalized = key.strip().lower().replace("_", ".").replace("-", ".")
        alias = self._KEY_ALIASES.get(normalized)
        if alias:
            return alias
        raise SettingsError(f"Unknown configuration key '{key}'.")

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> None:
        if not isinstance(self.output_size, int) or self.output_size < 1:
            raise SettingsError(f"Output size must be a positive integer, got {self.output_size!r}.")
        if not isinstance(self.fps, int) or self.fps < 1:
            raise SettingsError(f"Frame rate must be a positive integer, got {self.fps!r}.")
        if len(self.codec) != 4:
            raise SettingsError("Video codec must be a four-character code (e.g. mp4v).")
        if self.log_level not in self._VALID_LOG_LEVELS:
            raise SettingsError(f"Log level must be one of {self._VALID_LOG_LEVELS}.")
