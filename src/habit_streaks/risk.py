"""Streak-at-risk detection for reminder jobs.

A habit is at risk when it has a running streak but nothing logged yet in
the current period. The account gets a reminder only when its account
streak is alive and no habit at all was done today.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from habit_streaks.dates import DEFAULT_GRACE_HOUR, parse_instant, utc_now
from habit_streaks.entries import HabitRecord
from habit_streaks.streaks import StreakResult, compute_current_period_count, compute_streak


@dataclass
class HabitSummary:
    title: str
    cadence: str
    current_streak: int
    longest_streak: int
    today_count: int | float  # raw count in the current period
    target: int = 1


@dataclass
class StreakRiskResult:
    is_at_risk: bool
    most_at_risk_habit: HabitSummary | None
    risk_count: int


def summarize_habit(
    habit: HabitRecord,
    timezone: str | None,
    now: datetime | None = None,
    grace_hour: int = DEFAULT_GRACE_HOUR,
) -> HabitSummary:
    """Compute the streak and current-period count shown for one habit.

    The habit's own timezone, when set, wins over the user's.
    """
    tz_name = habit.timezone or timezone
    instant = parse_instant(now) or utc_now()
    streak = compute_streak(
        habit.entries, habit.cadence, tz_name,
        target=habit.target, now=instant, grace_hour=grace_hour,
    )
    today_count = compute_current_period_count(
        habit.cadence, tz_name, habit.target, habit.entries, instant, grace_hour,
    )
    return HabitSummary(
        title=habit.title,
        cadence=habit.cadence,
        current_streak=streak.current,
        longest_streak=streak.longest,
        today_count=today_count,
        target=habit.target,
    )


def is_habit_at_risk(summary: HabitSummary) -> bool:
    return summary.current_streak > 0 and summary.today_count == 0


def check_streak_risk(habits: Iterable[HabitSummary]) -> StreakRiskResult:
    """Find the habits whose streaks will break if nothing is logged today.

    The most at-risk habit is the one with the longest current streak;
    the first one wins on ties.
    """
    at_risk: Sequence[HabitSummary] = [h for h in habits if is_habit_at_risk(h)]
    if not at_risk:
        return StreakRiskResult(is_at_risk=False, most_at_risk_habit=None, risk_count=0)

    most_at_risk = max(at_risk, key=lambda h: h.current_streak)
    return StreakRiskResult(
        is_at_risk=True,
        most_at_risk_habit=most_at_risk,
        risk_count=len(at_risk),
    )


def should_send_reminder(account_streak: StreakResult, account_today_count: float) -> bool:
    """Send a reminder iff the account streak is alive and nothing was done today."""
    return account_streak.current > 0 and account_today_count == 0
