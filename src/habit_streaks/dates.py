"""Local calendar date resolution for check-ins.

A check-in recorded as a UTC instant is mapped to the calendar date the
user experienced in their own timezone. Check-ins before the grace hour
(3:00 AM by default) belong to the previous day, so a 1:45 AM check-in
still counts toward "yesterday".
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from habit_streaks.log import get_logger

logger = get_logger(__name__)

DEFAULT_GRACE_HOUR = 3
DEFAULT_TIMEZONE = "UTC"


@lru_cache(maxsize=128)
def load_timezone(name: str | None) -> tzinfo:
    """Return the IANA zone for name, or UTC if it is empty or unknown.

    Cached, so an unknown name is reported once rather than per entry.
    """
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError):
        logger.warning("timezone.unknown", timezone=name, fallback=DEFAULT_TIMEZONE)
        return timezone.utc


def parse_instant(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 instant. Naive values are taken as UTC.

    Returns None for missing or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        instant = value
    else:
        try:
            instant = datetime.fromisoformat(str(value).strip())
        except ValueError:
            return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def parse_local_date(value: str | date | None) -> date | None:
    """Parse a YYYY-MM-DD string. Returns None if it is not a valid date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def previous_day(local_date: str) -> str:
    return (date.fromisoformat(local_date) - timedelta(days=1)).isoformat()


def next_day(local_date: str) -> str:
    return (date.fromisoformat(local_date) + timedelta(days=1)).isoformat()


def resolve_local_date(
    tz_name: str | None,
    instant: str | datetime,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> str | None:
    """Map a UTC instant to the user's local calendar date (YYYY-MM-DD).

    The conversion goes through the zone's real wall-clock offset, so
    instants on either side of a DST shift land on the right day. If the
    local hour is strictly less than grace_hour, the previous day is
    returned instead. Returns None when instant cannot be parsed.
    """
    aware = parse_instant(instant)
    if aware is None:
        return None
    local = aware.astimezone(load_timezone(tz_name))
    local_date = local.date()
    if local.hour < grace_hour:
        local_date -= timedelta(days=1)
    return local_date.isoformat()


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)
