from datetime import date, datetime
from zoneinfo import ZoneInfo

from config import TIMEZONE


class SystemClock:
    """Calendar date in the configured time zone."""

    def __init__(self, tz_name: str = TIMEZONE):
        self.tz = ZoneInfo(tz_name)

    def today(self) -> date:
        return datetime.now(self.tz).date()


class FixedClock:
    """Always returns the same day. Used by tests and manual backfills."""

    def __init__(self, day: date):
        self.day = day

    def today(self) -> date:
        return self.day


def get_clock() -> SystemClock:
    """FastAPI dependency — overridden in tests."""
    return SystemClock()
