"""Cadence periods: calendar days and ISO-8601 weeks.

Daily periods are keyed by the local date itself ("2024-03-01"). Weekly
periods are keyed by ISO year and week ("2024-W01"). ISO weeks start on
Monday and week 1 is the week holding the year's first Thursday, so
29-31 December can fall in week 1 of the next year and 1-3 January in
the last week of the previous one.
"""
from __future__ import annotations

import re
from datetime import date, timedelta
from enum import Enum

from habit_streaks.dates import parse_local_date


class Cadence(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"  # no streak semantics


STREAK_CADENCES = frozenset({Cadence.DAILY, Cadence.WEEKLY})

_WEEK_KEY_RE = re.compile(r"^(\d{4})-W(\d{2})$")


def coerce_cadence(value: Cadence | str) -> Cadence | None:
    """Return the Cadence for value, or None if it is not a known cadence."""
    if isinstance(value, Cadence):
        return value
    try:
        return Cadence(str(value).strip().lower())
    except ValueError:
        return None


def iso_week(day: date) -> tuple[int, int]:
    """Return the ISO-8601 (year, week) pair for day.

    Shift to the Thursday of the same Monday-start week; that Thursday's
    year is the ISO year, and its day-of-year gives the week number.
    """
    thursday = day + timedelta(days=3 - day.weekday())
    week = (thursday.timetuple().tm_yday - 1) // 7 + 1
    return thursday.year, week


def iso_week_start(year: int, week: int) -> date:
    """Return the Monday of ISO week `week` of ISO year `year`."""
    jan4 = date(year, 1, 4)  # always in week 1
    return jan4 - timedelta(days=jan4.weekday()) + timedelta(weeks=week - 1)


def weeks_in_iso_year(year: int) -> int:
    # 28 December is always in the last ISO week of its year
    return iso_week(date(year, 12, 28))[1]


def format_week_key(year: int, week: int) -> str:
    return f"{year:04d}-W{week:02d}"


def to_period_key(cadence: Cadence | str, local_date: str | date) -> str:
    """Map a local date to its period key under cadence.

    Raises ValueError for a cadence without periods or an invalid date.
    """
    kind = coerce_cadence(cadence)
    day = parse_local_date(local_date)
    if day is None:
        raise ValueError(f"Invalid local date: {local_date!r}")
    if kind == Cadence.DAILY:
        return day.isoformat()
    if kind == Cadence.WEEKLY:
        return format_week_key(*iso_week(day))
    raise ValueError(f"Cadence {cadence!r} has no streak periods")


def period_start(cadence: Cadence | str, key: str) -> date | None:
    """Return the first day of the period named by key, or None if malformed."""
    kind = coerce_cadence(cadence)
    if kind == Cadence.DAILY:
        return parse_local_date(key)
    if kind == Cadence.WEEKLY:
        match = _WEEK_KEY_RE.match(key or "")
        if not match:
            return None
        year, week = int(match.group(1)), int(match.group(2))
        if year < 1 or not 1 <= week <= weeks_in_iso_year(year):
            return None
        return iso_week_start(year, week)
    return None


def _step(cadence: Cadence | str, key: str, direction: int) -> str:
    start = period_start(cadence, key)
    if start is None:
        raise ValueError(f"Invalid period key for {cadence}: {key!r}")
    days = 7 if coerce_cadence(cadence) == Cadence.WEEKLY else 1
    return to_period_key(cadence, start + timedelta(days=days * direction))


def next_period(cadence: Cadence | str, key: str) -> str:
    """Return the key of the period right after key (2023-W52 -> 2024-W01)."""
    return _step(cadence, key, 1)


def previous_period(cadence: Cadence | str, key: str) -> str:
    """Return the key of the period right before key (2024-W01 -> 2023-W52)."""
    return _step(cadence, key, -1)
