"""Rich terminal display for habit-streaks."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()

_PERIOD_WORDS: dict[str, tuple[str, str]] = {
    "daily": ("day", "days"),
    "weekly": ("week", "weeks"),
}


def format_streak(n: int, cadence: str = "daily") -> str:
    """Format a streak length: (1, 'daily') -> '1 day', (3, 'weekly') -> '3 weeks'."""
    singular, plural = _PERIOD_WORDS.get(cadence, ("period", "periods"))
    return f"{n} {singular if n == 1 else plural}"


def _progress_bar(current: int, total: int, width: int = 20) -> str:
    """Render period progress as text: [████████░░░░░░░░░░░░]."""
    if total <= 0:
        return "[" + "\u2591" * width + "]"
    ratio = min(max(current, 0) / total, 1.0)
    filled = int(ratio * width)
    empty = width - filled
    return "[" + "\u2588" * filled + "\u2591" * empty + "]"


def _streak_color(current: int, longest: int) -> str:
    if current == 0:
        return "grey50"
    if current >= longest:
        return "gold1"
    return "dark_orange3"


def print_streak(data: dict) -> None:
    """Print one habit's streak and current-period progress.

    data keys: title, cadence, current, longest, period_count, target.
    """
    cadence = data.get("cadence", "daily")
    current = data.get("current", 0)
    longest = data.get("longest", 0)
    period_count = data.get("period_count", 0)
    target = data.get("target", 1)
    color = _streak_color(current, longest)
    period_word = "this week" if cadence == "weekly" else "today"

    lines: list[str] = []
    lines.append("")
    lines.append(f"  \U0001f525 Current streak: [bold {color}]{format_streak(current, cadence)}[/]")
    lines.append(f"  \U0001f3c6 Longest streak: [bold]{format_streak(longest, cadence)}[/]")
    if cadence in _PERIOD_WORDS:
        lines.append("")
        lines.append(f"  {_progress_bar(period_count, target)} {period_count} of {target} {period_word}")
    else:
        lines.append("")
        lines.append(f"  [grey50]{escape(str(cadence))} habits have no streak[/]")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title=f"[bold]{escape(str(data.get('title', 'Habit')))}[/]",
        box=box.ROUNDED,
        border_style=color,
        width=50,
    )
    console.print(panel)


def print_account_streak(data: dict) -> None:
    """Print the account-level streak across all habits.

    data keys: current, longest, habit_count, today_count.
    """
    current = data.get("current", 0)
    longest = data.get("longest", 0)
    color = _streak_color(current, longest)

    lines: list[str] = []
    lines.append("")
    lines.append(f"  \U0001f525 Current streak: [bold {color}]{format_streak(current)}[/]")
    lines.append(f"  \U0001f3c6 Longest streak: [bold]{format_streak(longest)}[/]")
    lines.append(f"  \U0001f4cb Habits: {data.get('habit_count', 0)}  |  Done today: {data.get('today_count', 0)}")
    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]ACCOUNT STREAK[/]",
        box=box.ROUNDED,
        border_style=color,
        width=50,
    )
    console.print(panel)


def print_risk_report(data: dict) -> None:
    """Print per-habit streaks with at-risk flags and the reminder decision.

    data keys: habits (list of dicts), account_current, account_longest,
    risk_count, most_at_risk (str|None), send_reminder (bool).
    """
    table = Table(
        title="Streaks at Risk",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("", width=2)
    table.add_column("Habit", min_width=16)
    table.add_column("Cadence", width=8)
    table.add_column("Streak", justify="right")
    table.add_column("Best", justify="right")
    table.add_column("Progress", min_width=14)

    for habit in data.get("habits", []):
        at_risk = habit.get("at_risk", False)
        icon = "\u26a0\ufe0f" if at_risk else "\u2705" if habit.get("today_count", 0) > 0 else "\u2796"
        cadence = habit.get("cadence", "daily")
        table.add_row(
            icon,
            f"[bold]{escape(str(habit.get('title', '')))}[/]",
            escape(str(cadence)),
            format_streak(habit.get("current_streak", 0), cadence),
            format_streak(habit.get("longest_streak", 0), cadence),
            f"{_progress_bar(habit.get('today_count', 0), habit.get('target', 1), width=8)} "
            f"{habit.get('today_count', 0)}/{habit.get('target', 1)}",
        )

    table.add_section()
    table.add_row(
        "",
        "[bold]Account[/]",
        "daily",
        format_streak(data.get("account_current", 0)),
        format_streak(data.get("account_longest", 0)),
        "",
    )
    console.print(table)

    most_at_risk = data.get("most_at_risk")
    if most_at_risk:
        console.print(
            f"  {data.get('risk_count', 0)} habit(s) at risk, most at risk: [bold]{escape(str(most_at_risk))}[/]"
        )
    else:
        console.print("  No habits at risk.")
    if data.get("send_reminder"):
        console.print("  [bold yellow]Reminder due:[/] account streak is alive and nothing is done today.")


def print_config(config: dict) -> None:
    """Print the effective configuration."""
    table = Table(title="Configuration", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Setting", style="bold")
    table.add_column("Value", justify="right")
    for key, value in config.items():
        table.add_row(escape(key), escape(str(value)))
    console.print(table)


def print_no_data_message(path: str) -> None:
    """Print message when an input file is missing or unreadable."""
    panel = Panel(
        f"\n  No check-in data found in [bold]{escape(path)}[/].\n"
        "  Expected a JSON file of rows like {\"localDate\": \"2024-03-01\", \"count\": 1}.\n",
        title="[bold]HABIT STREAKS[/]",
        box=box.ROUNDED,
        border_style="grey50",
        width=60,
    )
    console.print(panel)
