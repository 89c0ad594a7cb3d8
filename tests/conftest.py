"""Shared fixtures for the habit-streaks tests."""
import pytest
import structlog

from habit_streaks.dates import load_timezone
from habit_streaks.log import configure_defaults


@pytest.fixture(autouse=True)
def default_logging():
    """Start every test from the import-time logging setup and a cold zone cache."""
    structlog.reset_defaults()
    configure_defaults()
    load_timezone.cache_clear()
    yield
    structlog.reset_defaults()
    configure_defaults()
