"""Property-based tests for the streak engine using Hypothesis.

These check invariants that must hold for any input, complementing the
example-based tests in test_streaks.py.
"""

from datetime import date, datetime, timedelta, timezone

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from habit_streaks.entries import LocalDateEntry
from habit_streaks.periods import iso_week, next_period, previous_period, to_period_key
from habit_streaks.streaks import compute_account_streak, compute_streak

NOW = datetime(2024, 6, 15, 12, tzinfo=timezone.utc)  # a Saturday, 2024-W24
TODAY = date(2024, 6, 15)

hypothesis_settings = settings(
    max_examples=100,
    suppress_health_check=[HealthCheck.too_slow],
)

# =============================================================================
# Custom Strategies
# =============================================================================

past_dates = st.dates(min_value=date(2023, 1, 1), max_value=TODAY)
future_dates = st.dates(min_value=TODAY + timedelta(days=1), max_value=date(2024, 12, 31))
cadences = st.sampled_from(["daily", "weekly"])


@st.composite
def entry_lists(draw, dates=past_dates, min_size: int = 0, max_size: int = 40) -> list[LocalDateEntry]:
    """Lists of dated entries with mostly positive counts."""
    return draw(
        st.lists(
            st.builds(
                LocalDateEntry,
                local_date=dates.map(date.isoformat),
                count=st.integers(min_value=-2, max_value=5),
            ),
            min_size=min_size,
            max_size=max_size,
        )
    )


@st.composite
def consecutive_runs(draw, max_length: int = 30) -> list[LocalDateEntry]:
    """A run of consecutive days ending today or yesterday."""
    length = draw(st.integers(min_value=1, max_value=max_length))
    end = TODAY - timedelta(days=draw(st.integers(min_value=0, max_value=1)))
    return [LocalDateEntry((end - timedelta(days=i)).isoformat(), 1) for i in range(length)]


# =============================================================================
# ISO weeks and period stepping
# =============================================================================


class TestPeriodProperties:
    @given(day=st.dates(min_value=date(1900, 1, 1), max_value=date(2200, 12, 31)))
    @hypothesis_settings
    def test_iso_week_matches_isocalendar(self, day: date):
        iso = day.isocalendar()
        assert iso_week(day) == (iso.year, iso.week)

    @given(day=st.dates(min_value=date(1950, 1, 1), max_value=date(2150, 12, 31)), cadence=cadences)
    @hypothesis_settings
    def test_next_and_previous_are_inverse(self, day: date, cadence: str):
        key = to_period_key(cadence, day)
        assert previous_period(cadence, next_period(cadence, key)) == key
        assert next_period(cadence, previous_period(cadence, key)) == key

    @given(day=st.dates(min_value=date(1950, 1, 1), max_value=date(2150, 12, 31)))
    @hypothesis_settings
    def test_next_week_is_seven_days_later(self, day: date):
        key = to_period_key("weekly", day)
        assert next_period("weekly", key) == to_period_key("weekly", day + timedelta(days=7))

    @given(a=past_dates, b=past_dates, cadence=cadences)
    @hypothesis_settings
    def test_keys_sort_chronologically(self, a: date, b: date, cadence: str):
        if a <= b:
            assert to_period_key(cadence, a) <= to_period_key(cadence, b)


# =============================================================================
# Streak invariants
# =============================================================================


class TestStreakInvariants:
    @given(entries=entry_lists(), cadence=cadences)
    @hypothesis_settings
    def test_longest_gte_current(self, entries, cadence):
        result = compute_streak(entries, cadence, "UTC", now=NOW)
        assert result.longest >= result.current >= 0

    @given(entries=entry_lists(), cadence=cadences)
    @hypothesis_settings
    def test_idempotent(self, entries, cadence):
        first = compute_streak(entries, cadence, "America/New_York", now=NOW)
        second = compute_streak(entries, cadence, "America/New_York", now=NOW)
        assert first == second

    @given(entries=entry_lists(), cadence=cadences)
    @hypothesis_settings
    def test_order_does_not_matter(self, entries, cadence):
        assert compute_streak(entries, cadence, "UTC", now=NOW) == compute_streak(
            list(reversed(entries)), cadence, "UTC", now=NOW
        )

    @given(entries=entry_lists(), future=entry_lists(dates=future_dates, min_size=1), cadence=cadences)
    @hypothesis_settings
    def test_future_entries_never_change_result(self, entries, future, cadence):
        # The rest of the current week (Sun 2024-06-16) is not future for weekly
        if cadence == "weekly":
            future = [e for e in future if e.local_date > "2024-06-16"]
        base = compute_streak(entries, cadence, "UTC", now=NOW)
        assert compute_streak(entries + future, cadence, "UTC", now=NOW) == base

    @given(entries=entry_lists(), extra=entry_lists(min_size=1), cadence=cadences)
    @hypothesis_settings
    def test_adding_entries_never_lowers_streaks(self, entries, extra, cadence):
        base = compute_streak(entries, cadence, "UTC", now=NOW)
        more = compute_streak(entries + extra, cadence, "UTC", now=NOW)
        assert more.longest >= base.longest
        assert more.current >= base.current

    @given(entries=entry_lists(), cadence=cadences)
    @hypothesis_settings
    def test_non_positive_entries_are_invisible(self, entries, cadence):
        positive = [e for e in entries if e.count > 0]
        assert compute_streak(entries, cadence, "UTC", now=NOW) == compute_streak(
            positive, cadence, "UTC", now=NOW
        )

    @given(entries=entry_lists(), cadence=cadences)
    @hypothesis_settings
    def test_longest_bounded_by_active_periods(self, entries, cadence):
        periods = {to_period_key(cadence, e.local_date) for e in entries if e.count > 0}
        assert compute_streak(entries, cadence, "UTC", now=NOW).longest <= len(periods)

    @given(entries=entry_lists(), target=st.integers(max_value=0))
    @hypothesis_settings
    def test_non_positive_target_forces_zero(self, entries, target):
        result = compute_streak(entries, "daily", "UTC", target=target, now=NOW)
        assert (result.current, result.longest) == (0, 0)

    @given(run=consecutive_runs())
    @hypothesis_settings
    def test_unbroken_run_is_current(self, run):
        result = compute_streak(run, "daily", "UTC", now=NOW)
        assert result.current == len(run)
        assert result.longest == len(run)

    @given(weeks=st.integers(min_value=1, max_value=80))
    @hypothesis_settings
    def test_unbroken_weekly_run_crosses_years(self, weeks):
        entries = [LocalDateEntry((TODAY - timedelta(weeks=i)).isoformat(), 1) for i in range(weeks)]
        result = compute_streak(entries, "weekly", "UTC", now=NOW)
        assert result.current == weeks


class TestAccountInvariants:
    @given(habits=st.lists(entry_lists(), min_size=1, max_size=4))
    @hypothesis_settings
    def test_account_dominates_each_daily_habit(self, habits):
        account = compute_account_streak("UTC", habits, NOW)
        for entries in habits:
            habit = compute_streak(entries, "daily", "UTC", now=NOW)
            assert account.current >= habit.current
            assert account.longest >= habit.longest

    @given(habits=st.lists(entry_lists(), min_size=1, max_size=4))
    @hypothesis_settings
    def test_account_equals_streak_of_merged_entries(self, habits):
        merged = [e for entries in habits for e in entries]
        assert compute_account_streak("UTC", habits, NOW) == compute_streak(merged, "daily", "UTC", now=NOW)
