# src/daily_board/tasks/clock.py

"""
Calendar-day helpers.

All board timestamps are integer milliseconds since the epoch. A "day" is the
midnight-normalized timestamp of a calendar date in the board's timezone
(tz=None means host local time). Day arithmetic goes through calendar dates,
so a 23h or 25h DST day still maps to exactly one previous day.
"""

from __future__ import annotations

import time
from datetime import date, datetime, time as dtime, timedelta, tzinfo


def now_ms() -> int:
    return int(time.time() * 1000)


def to_datetime(ts_ms: int, tz: tzinfo | None = None) -> datetime:
    return datetime.fromtimestamp(ts_ms / 1000.0, tz=tz)


def calendar_date(ts_ms: int, tz: tzinfo | None = None) -> date:
    return to_datetime(ts_ms, tz).date()


def date_start_ms(d: date, tz: tzinfo | None = None) -> int:
    midnight = datetime.combine(d, dtime.min, tzinfo=tz)
    return int(midnight.timestamp() * 1000)


def day_start_ms(ts_ms: int, tz: tzinfo | None = None) -> int:
    """Midnight (start of the calendar day) containing ts_ms."""
    return date_start_ms(calendar_date(ts_ms, tz), tz)


def previous_day_start_ms(day_ms: int, tz: tzinfo | None = None) -> int:
    """Midnight of the calendar day before the day containing day_ms."""
    return date_start_ms(calendar_date(day_ms, tz) - timedelta(days=1), tz)


def format_day(day_ms: int, tz: tzinfo | None = None) -> str:
    if day_ms <= 0:
        return "never"
    return calendar_date(day_ms, tz).isoformat()
