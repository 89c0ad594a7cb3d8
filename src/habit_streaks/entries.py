"""Check-in entries and the JSON files they are loaded from.

A check-in row from storage looks like {localDate?, occurredAt?, count}.
Rows become one of two entry types: LocalDateEntry when the caller already
resolved a calendar date, InstantEntry when only a UTC instant is known.
"""
from __future__ import annotations

import json
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from habit_streaks.dates import DEFAULT_GRACE_HOUR, parse_instant, parse_local_date, resolve_local_date
from habit_streaks.log import get_logger

logger = get_logger(__name__)

Count = int | float


@dataclass(frozen=True)
class LocalDateEntry:
    local_date: str  # YYYY-MM-DD, already in the user's calendar
    count: Count = 1


@dataclass(frozen=True)
class InstantEntry:
    occurred_at: datetime  # aware
    count: Count = 1


StreakEntry = LocalDateEntry | InstantEntry


@dataclass
class HabitRecord:
    title: str
    cadence: str
    target: int = 1
    timezone: str | None = None  # overrides the user's timezone when set
    entries: list[StreakEntry] = field(default_factory=list)


def _coerce_count(raw: object) -> Count:
    """Read a count as a number: int when integral, float otherwise, 0 if not numeric."""
    if isinstance(raw, int):
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(value):
        return 0
    return int(value) if value.is_integer() else value


def entry_from_row(row: Mapping) -> StreakEntry | None:
    """Build an entry from a raw row. Returns None for an inert row.

    Accepts camelCase (localDate, occurredAt) and snake_case keys.
    localDate wins when both dates are present.
    """
    count = _coerce_count(row.get("count", 0))
    local_date = row.get("localDate") or row.get("local_date")
    if local_date:
        return LocalDateEntry(local_date=str(local_date), count=count)

    raw_instant = row.get("occurredAt") or row.get("occurred_at")
    instant = parse_instant(raw_instant) if raw_instant else None
    if instant is None:
        logger.debug("entry.inert", reason="no_date", row=dict(row))
        return None
    return InstantEntry(occurred_at=instant, count=count)


def coerce_entries(entries: Iterable[StreakEntry | Mapping] | None) -> list[StreakEntry]:
    """Normalize a mix of entries and raw rows, dropping inert rows."""
    result: list[StreakEntry] = []
    for item in entries or []:
        if isinstance(item, (LocalDateEntry, InstantEntry)):
            result.append(item)
        elif isinstance(item, Mapping):
            entry = entry_from_row(item)
            if entry is not None:
                result.append(entry)
    return result


def entry_local_date(
    entry: StreakEntry,
    tz_name: str | None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> str | None:
    """Resolve an entry to its local date (YYYY-MM-DD), or None if invalid.

    Grace-hour reattribution only applies to instants. A pre-resolved
    local date is taken as-is.
    """
    if isinstance(entry, LocalDateEntry):
        day = parse_local_date(entry.local_date)
        if day is None:
            logger.debug("entry.inert", reason="invalid_local_date", local_date=entry.local_date)
            return None
        return day.isoformat()
    local_date = resolve_local_date(tz_name, entry.occurred_at, grace_hour)
    if local_date is None:
        logger.debug("entry.inert", reason="invalid_instant", occurred_at=str(entry.occurred_at))
    return local_date


def _read_json(path: Path) -> object | None:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, IsADirectoryError, json.JSONDecodeError, UnicodeDecodeError):
        return None


def load_entries(path: Path) -> list[StreakEntry] | None:
    """Parse a JSON file holding a list of check-in rows.

    Returns None if the file doesn't exist, can't be parsed, or isn't a list.
    Malformed rows are skipped.
    """
    raw = _read_json(path)
    if not isinstance(raw, list):
        return None
    return coerce_entries(row for row in raw if isinstance(row, Mapping))


def load_habit_entries(path: Path) -> dict[str, list[StreakEntry]] | None:
    """Parse a JSON file of per-habit rows for account streaks.

    Accepts {"habit title": [rows...]} or [[rows...], [rows...]]; list
    form habits are named "habit-1", "habit-2", ...
    """
    raw = _read_json(path)
    if isinstance(raw, dict):
        items = raw.items()
    elif isinstance(raw, list):
        items = ((f"habit-{i}", rows) for i, rows in enumerate(raw, start=1))
    else:
        return None

    habits: dict[str, list[StreakEntry]] = {}
    for title, rows in items:
        if not isinstance(rows, list):
            continue
        habits[str(title)] = coerce_entries(row for row in rows if isinstance(row, Mapping))
    return habits


def habit_from_dict(raw: Mapping) -> HabitRecord:
    """Build a HabitRecord from a habit object in a habits file."""
    target = raw.get("target", raw.get("target_per_period", raw.get("targetPerPeriod", 1)))
    rows = raw.get("entries") or []
    return HabitRecord(
        title=str(raw.get("title") or raw.get("name") or "Untitled habit"),
        cadence=str(raw.get("cadence", "daily")),
        target=_coerce_count(target),
        timezone=raw.get("timezone") or None,
        entries=coerce_entries(row for row in rows if isinstance(row, Mapping)),
    )


def load_habits(path: Path) -> list[HabitRecord] | None:
    """Parse a JSON file holding a list of habit objects.

    Each object: {"title", "cadence", "target", "timezone"?, "entries": [rows]}.
    Returns None if the file doesn't exist or can't be parsed.
    """
    raw = _read_json(path)
    if not isinstance(raw, list):
        return None
    return [habit_from_dict(item) for item in raw if isinstance(item, Mapping)]
