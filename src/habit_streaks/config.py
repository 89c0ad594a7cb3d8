"""Configuration file management for habit-streaks.

Reads and writes ~/.habit-streaks/config.json for per-user defaults
(timezone, grace hour) used when the command line doesn't give them.
"""
from __future__ import annotations

import json
from pathlib import Path

from habit_streaks.dates import DEFAULT_GRACE_HOUR, DEFAULT_TIMEZONE

DEFAULT_CONFIG_PATH: Path = Path.home() / ".habit-streaks" / "config.json"


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def get_default_timezone(config_path: Path | None = None) -> str:
    """Return the configured IANA timezone, or UTC if not set."""
    raw = load_config(config_path).get("timezone")
    return raw if isinstance(raw, str) and raw else DEFAULT_TIMEZONE


def set_default_timezone(tz_name: str, config_path: Path | None = None) -> None:
    config = load_config(config_path)
    config["timezone"] = tz_name
    save_config(config, config_path)


def _valid_grace_hour(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 23


def get_grace_hour(config_path: Path | None = None) -> int:
    """Return the configured grace hour. Out-of-range values fall back to 3."""
    raw = load_config(config_path).get("grace_hour")
    return raw if _valid_grace_hour(raw) else DEFAULT_GRACE_HOUR


def set_grace_hour(hour: int, config_path: Path | None = None) -> None:
    """Persist the grace hour. Raises ValueError outside 0..23."""
    if not _valid_grace_hour(hour):
        raise ValueError(f"Grace hour must be between 0 and 23, got {hour!r}")
    config = load_config(config_path)
    config["grace_hour"] = hour
    save_config(config, config_path)
