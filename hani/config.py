"""User configuration stored as JSON under the home directory."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_WORD_WRAP = 80

# (attribute, JSON key, expected type)
_FIELDS: tuple[tuple[str, str, type], ...] = (
    ("tab_size", "tab_size", int),
    ("word_wrap", "word_wrap", int),
    ("show_numbers", "show_line_numbers", bool),
    ("theme", "theme", str),
    ("dark_mode", "dark_mode", bool),
    ("auto_save", "auto_save", bool),
    ("blink_rate", "cursor_blink_rate_ms", int),
)


def _matches(value: Any, kind: type) -> bool:
    if kind is bool:
        return isinstance(value, bool)
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


@dataclass
class Config:
    """Editor, theme and behaviour settings."""

    tab_size: int = 4
    word_wrap: int = DEFAULT_WORD_WRAP
    show_numbers: bool = False
    theme: str = "auto"
    dark_mode: bool = True
    auto_save: bool = False
    blink_rate: int = 500

    def to_dict(self) -> dict[str, Any]:
        """Return the settings keyed by their JSON names."""
        return {key: getattr(self, attr) for attr, key, _ in _FIELDS}

    @classmethod
    def from_dict(cls, data: Any) -> "Config":
        """Build a config from a JSON object, keeping defaults for absent keys.

        Keys are matched case-insensitively, unknown keys and nulls are
        ignored, and a value of the wrong type raises ValueError.
        """
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a JSON object")
        lookup = {key.lower(): (attr, key, kind) for attr, key, kind in _FIELDS}
        values: dict[str, Any] = {}
        for name, value in data.items():
            spec = lookup.get(str(name).lower())
            if spec is None or value is None:
                continue
            attr, key, kind = spec
            if not _matches(value, kind):
                raise ValueError(f"invalid value for {key!r}: {value!r}")
            values[attr] = value
        return cls(**values)


def default_config() -> Config:
    """Return the default configuration."""
    return Config()


def _home_dir(home: str | Path | None) -> Path:
    if home is not None:
        return Path(home)
    try:
        return Path.home()
    except (RuntimeError, KeyError) as exc:
        raise OSError("cannot determine home directory") from exc


def config_path(home: str | Path | None = None) -> Path:
    """Return the path of the configuration file under ``home``."""
    return _home_dir(home) / ".config" / "hani" / "config.json"


def load_config(home: str | Path | None = None) -> Config:
    """Load the configuration, falling back to defaults on any problem."""
    try:
        path = config_path(home)
        data = path.read_bytes()
    except OSError:
        return default_config()
    if not data:
        return default_config()
    try:
        return Config.from_dict(json.loads(data))
    except ValueError:
        return default_config()


def save_config(config: Config, home: str | Path | None = None) -> Path:
    """Write the configuration as indented JSON and return its path."""
    path = config_path(home)
    path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    path.write_text(
        json.dumps(config.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return path