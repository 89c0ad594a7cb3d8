"""CLI commands for habit-streaks."""

from __future__ import annotations

import argparse
import json
from datetime import datetime
from pathlib import Path

from habit_streaks.config import (
    get_default_timezone,
    get_grace_hour,
    load_config,
    set_default_timezone,
    set_grace_hour,
)
from habit_streaks.dates import parse_instant, utc_now
from habit_streaks.display import (
    print_account_streak,
    print_config,
    print_no_data_message,
    print_risk_report,
    print_streak,
)
from habit_streaks.entries import load_entries, load_habit_entries, load_habits
from habit_streaks.log import configure_logging, get_logger
from habit_streaks.periods import Cadence
from habit_streaks.risk import check_streak_risk, is_habit_at_risk, should_send_reminder, summarize_habit
from habit_streaks.streaks import (
    compute_account_streak,
    compute_account_today_count,
    compute_current_period_count,
    compute_streak,
)

logger = get_logger(__name__)


def _parse_now(value: str) -> datetime:
    instant = parse_instant(value)
    if instant is None:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value!r}")
    return instant


def _parse_grace_hour(value: str) -> int:
    try:
        hour = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an hour: {value!r}") from None
    if not 0 <= hour <= 23:
        raise argparse.ArgumentTypeError(f"grace hour must be between 0 and 23, got {hour}")
    return hour


def _add_calendar_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--timezone", "-z", default=None, help="IANA timezone (default: from config, else UTC)")
    parser.add_argument("--now", type=_parse_now, default=None, help="Evaluate as of this ISO-8601 instant")
    parser.add_argument("--grace-hour", type=_parse_grace_hour, default=None, help="Local hour before which check-ins count for the previous day")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="habit-streaks",
        description="Compute habit streaks from check-in data",
    )
    subparsers = parser.add_subparsers(dest="command")

    streak_parser = subparsers.add_parser("streak", help="Current and longest streak for one habit")
    streak_parser.add_argument("file", type=Path, help="JSON list of check-in rows")
    streak_parser.add_argument("--cadence", "-c", choices=[c.value for c in Cadence], default="daily")
    streak_parser.add_argument("--target", "-t", type=int, default=1, help="Completions expected per period")
    streak_parser.add_argument("--title", default=None, help="Habit name for display")
    _add_calendar_args(streak_parser)

    account_parser = subparsers.add_parser("account", help="Account streak across all habits")
    account_parser.add_argument("file", type=Path, help="JSON object of habit title -> check-in rows")
    _add_calendar_args(account_parser)

    risk_parser = subparsers.add_parser("risk", help="Streaks at risk and reminder decision")
    risk_parser.add_argument("file", type=Path, help="JSON list of habits with their check-ins")
    _add_calendar_args(risk_parser)

    config_parser = subparsers.add_parser("config", help="Show or change defaults")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Show the effective configuration")
    config_set_p = config_sub.add_parser("set", help="Change defaults")
    config_set_p.add_argument("--timezone", "-z", default=None, help="Default IANA timezone")
    config_set_p.add_argument("--grace-hour", type=_parse_grace_hour, default=None, help="Default grace hour (0-23)")
    return parser


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()
    configure_logging()

    if args.command is None:
        parser.print_help()
        return

    if args.command == "config":
        if args.config_command == "set":
            do_config_set(timezone=args.timezone, grace_hour=args.grace_hour)
        else:
            do_config_show()
        return

    calendar = {
        "timezone": args.timezone,
        "now": args.now,
        "grace_hour": args.grace_hour,
        "as_json": args.json,
    }
    if args.command == "streak":
        result = do_streak(
            args.file, cadence=args.cadence, target=args.target, title=args.title, **calendar
        )
    elif args.command == "account":
        result = do_account(args.file, **calendar)
    else:
        result = do_risk(args.file, **calendar)

    if result is None:
        raise SystemExit(1)


def _resolve_settings(
    timezone: str | None, grace_hour: int | None, config_path: Path | None = None
) -> tuple[str, int]:
    """Fill in timezone and grace hour from config when not given."""
    tz_name = timezone or get_default_timezone(config_path)
    hour = grace_hour if grace_hour is not None else get_grace_hour(config_path)
    return tz_name, hour


def _emit_json(data: dict) -> None:
    print(json.dumps(data, indent=2))


def do_streak(
    path: Path,
    cadence: str = "daily",
    target: int = 1,
    title: str | None = None,
    timezone: str | None = None,
    now: datetime | None = None,
    grace_hour: int | None = None,
    as_json: bool = False,
    config_path: Path | None = None,
) -> dict | None:
    """Compute a single habit's streak from a rows file.

    Returns the result dict, or None if the file has no usable data.
    """
    entries = load_entries(path)
    if entries is None:
        print_no_data_message(str(path))
        return None

    tz_name, hour = _resolve_settings(timezone, grace_hour, config_path)
    instant = now or utc_now()
    streak = compute_streak(entries, cadence, tz_name, target=target, now=instant, grace_hour=hour)
    period_count = compute_current_period_count(cadence, tz_name, target, entries, instant, hour)

    result = {
        "title": title or path.stem,
        "cadence": cadence,
        "target": target,
        "timezone": tz_name,
        "current": streak.current,
        "longest": streak.longest,
        "period_count": period_count,
    }
    logger.info("cli.streak", file=str(path), entries=len(entries), current=streak.current)

    if as_json:
        _emit_json(result)
    else:
        print_streak(result)
    return result


def do_account(
    path: Path,
    timezone: str | None = None,
    now: datetime | None = None,
    grace_hour: int | None = None,
    as_json: bool = False,
    config_path: Path | None = None,
) -> dict | None:
    """Compute the account streak from a per-habit rows file."""
    habits = load_habit_entries(path)
    if habits is None:
        print_no_data_message(str(path))
        return None

    tz_name, hour = _resolve_settings(timezone, grace_hour, config_path)
    instant = now or utc_now()
    all_entries = list(habits.values())
    streak = compute_account_streak(tz_name, all_entries, instant, hour)
    today_count = compute_account_today_count(tz_name, all_entries, instant, hour)

    result = {
        "timezone": tz_name,
        "current": streak.current,
        "longest": streak.longest,
        "habit_count": len(habits),
        "today_count": today_count,
    }
    logger.info("cli.account", file=str(path), habits=len(habits), current=streak.current)

    if as_json:
        _emit_json(result)
    else:
        print_account_streak(result)
    return result


def do_risk(
    path: Path,
    timezone: str | None = None,
    now: datetime | None = None,
    grace_hour: int | None = None,
    as_json: bool = False,
    config_path: Path | None = None,
) -> dict | None:
    """Summarize every habit, find streaks at risk, and decide on a reminder."""
    habits = load_habits(path)
    if habits is None:
        print_no_data_message(str(path))
        return None

    tz_name, hour = _resolve_settings(timezone, grace_hour, config_path)
    instant = now or utc_now()
    summaries = [summarize_habit(h, tz_name, instant, hour) for h in habits]
    risk = check_streak_risk(summaries)

    # The account streak uses the user's timezone for every habit
    all_entries = [h.entries for h in habits]
    account = compute_account_streak(tz_name, all_entries, instant, hour)
    account_today = compute_account_today_count(tz_name, all_entries, instant, hour)
    send = should_send_reminder(account, account_today)

    result = {
        "timezone": tz_name,
        "habits": [
            {
                "title": s.title,
                "cadence": s.cadence,
                "target": s.target,
                "current_streak": s.current_streak,
                "longest_streak": s.longest_streak,
                "today_count": s.today_count,
                "at_risk": is_habit_at_risk(s),
            }
            for s in summaries
        ],
        "account_current": account.current,
        "account_longest": account.longest,
        "account_today_count": account_today,
        "risk_count": risk.risk_count,
        "most_at_risk": risk.most_at_risk_habit.title if risk.most_at_risk_habit else None,
        "send_reminder": send,
    }
    logger.info("cli.risk", file=str(path), habits=len(habits), at_risk=risk.risk_count, send_reminder=send)

    if as_json:
        _emit_json(result)
    else:
        print_risk_report(result)
    return result


def do_config_show(config_path: Path | None = None) -> dict:
    """Show stored config merged with defaults."""
    tz_name, hour = _resolve_settings(None, None, config_path)
    effective = {**load_config(config_path), "timezone": tz_name, "grace_hour": hour}
    print_config(effective)
    return effective


def do_config_set(
    timezone: str | None = None,
    grace_hour: int | None = None,
    config_path: Path | None = None,
) -> dict:
    """Persist new defaults and show the result."""
    if timezone is not None:
        set_default_timezone(timezone, config_path)
    if grace_hour is not None:
        set_grace_hour(grace_hour, config_path)
    return do_config_show(config_path)


if __name__ == "__main__":
    main()
