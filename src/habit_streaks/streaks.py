"""Streak computation for habits and accounts.

Every function here is pure: the same entries, cadence, timezone, grace
hour and `now` always give the same result. Malformed calendar input
degrades to "no activity" instead of raising.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime

from habit_streaks.dates import DEFAULT_GRACE_HOUR, parse_instant, resolve_local_date, utc_now
from habit_streaks.entries import StreakEntry, coerce_entries, entry_local_date
from habit_streaks.log import get_logger
from habit_streaks.periods import (
    STREAK_CADENCES,
    Cadence,
    coerce_cadence,
    next_period,
    period_start,
    previous_period,
    to_period_key,
)

logger = get_logger(__name__)

EntriesLike = Iterable[StreakEntry | Mapping]


@dataclass(frozen=True)
class StreakResult:
    current: int = 0
    longest: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


NO_STREAK = StreakResult(current=0, longest=0)


def current_period_key(
    cadence: Cadence | str,
    timezone: str | None,
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> str:
    """Return the period key containing now in the user's timezone."""
    instant = parse_instant(now) or utc_now()
    return to_period_key(cadence, resolve_local_date(timezone, instant, grace_hour))


def active_periods(
    entries: EntriesLike,
    cadence: Cadence | str,
    timezone: str | None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> set[str]:
    """Return the period keys holding at least one entry with count > 0.

    Activity is decided per entry, not on a summed count: a period with
    entries [-1, +1] is active.
    """
    periods: set[str] = set()
    for entry in coerce_entries(entries):
        if entry.count <= 0:
            continue
        local_date = entry_local_date(entry, timezone, grace_hour)
        if local_date is None:
            continue
        periods.add(to_period_key(cadence, local_date))
    return periods


def _scan(active: Iterable[str], cadence: Cadence, now_period: str) -> StreakResult:
    """Count the current and longest runs of consecutive active periods.

    Rules:
    - Periods after now_period are ignored (clock skew, fixtures)
    - Current streak ends at now_period, or at the period before it when
      now_period has no activity yet
    - Longest streak is the longest run anywhere in history
    """
    present: set[str] = set()
    for key in active:
        start = period_start(cadence, key)
        if start is None:
            continue
        canonical = to_period_key(cadence, start)
        # Canonical keys are fixed-width, so string order is chronological
        if canonical <= now_period:
            present.add(canonical)
    if not present:
        return NO_STREAK

    periods = sorted(present)

    current = 0
    cursor = now_period if now_period in present else previous_period(cadence, now_period)
    while cursor in present:
        current += 1
        cursor = previous_period(cadence, cursor)

    longest = 0
    run = 0
    previous: str | None = None
    for key in periods:
        if previous is not None and next_period(cadence, previous) == key:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = key

    return StreakResult(current=current, longest=max(longest, current))


def scan_streak(
    active: Iterable[str],
    cadence: Cadence | str,
    timezone: str | None,
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> StreakResult:
    """Compute {current, longest} over a set of active period keys."""
    kind = coerce_cadence(cadence)
    if kind not in STREAK_CADENCES:
        return NO_STREAK
    now_period = current_period_key(kind, timezone, now, grace_hour)
    return _scan(active, kind, now_period)


def compute_streak(
    entries: EntriesLike,
    cadence: Cadence | str,
    timezone: str | None,
    *,
    target: int = 1,
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> StreakResult:
    """Compute a habit's current and longest streak.

    A period counts when it has any positive activity; the per-period
    target does not gate continuation. A target <= 0 means the habit is
    not tracked and always yields {0, 0}, as does the custom cadence.
    """
    kind = coerce_cadence(cadence)
    if target <= 0 or kind not in STREAK_CADENCES:
        return NO_STREAK

    periods = active_periods(entries, kind, timezone, grace_hour)
    result = scan_streak(periods, kind, timezone, now, grace_hour)
    logger.debug(
        "streak.computed",
        cadence=kind.value,
        active_periods=len(periods),
        current=result.current,
        longest=result.longest,
    )
    return result


def compute_current_period_count(
    cadence: Cadence | str,
    timezone: str | None,
    target: int,
    entries: EntriesLike,
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> int | float:
    """Sum the raw counts of entries in now's period ("3 of 5 today").

    Unlike the streak, zero and negative counts are included as-is.
    target is accepted for call compatibility and does not affect the sum.
    """
    kind = coerce_cadence(cadence)
    if kind not in STREAK_CADENCES:
        return 0

    now_period = current_period_key(kind, timezone, now, grace_hour)
    total = 0
    for entry in coerce_entries(entries):
        local_date = entry_local_date(entry, timezone, grace_hour)
        if local_date is not None and to_period_key(kind, local_date) == now_period:
            total += entry.count
    return total


def compute_account_streak(
    timezone: str | None,
    all_habit_entries: Iterable[EntriesLike],
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> StreakResult:
    """Compute the account-level daily streak over all of a user's habits.

    A day counts if any habit had positive activity on it. Each habit's
    own cadence is ignored: account streaks are always counted in days.
    """
    active_days: set[str] = set()
    for habit_entries in all_habit_entries:
        active_days |= active_periods(habit_entries, Cadence.DAILY, timezone, grace_hour)
    return scan_streak(active_days, Cadence.DAILY, timezone, now, grace_hour)


def compute_account_today_count(
    timezone: str | None,
    all_habit_entries: Iterable[EntriesLike],
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> int | float:
    """Sum today's raw counts across every habit."""
    instant = parse_instant(now) or utc_now()
    return sum(
        compute_current_period_count(Cadence.DAILY, timezone, 1, habit_entries, instant, grace_hour)
        for habit_entries in all_habit_entries
    )
