# tests/test_clock.py

from __future__ import annotations

from datetime import date, timezone
from zoneinfo import ZoneInfo

from daily_board.tasks.clock import date_start_ms, day_start_ms, format_day, previous_day_start_ms

from .fakes import ms

HOUR_MS = 3_600_000
NEW_YORK = ZoneInfo("America/New_York")


def test_day_start_is_midnight() -> None:
    assert day_start_ms(ms(2024, 3, 10, 23, 59), timezone.utc) == ms(2024, 3, 10, 0, 0)


def test_previous_day_across_spring_forward_is_23h() -> None:
    day = date_start_ms(date(2024, 3, 11), NEW_YORK)
    assert day - previous_day_start_ms(day, NEW_YORK) == 23 * HOUR_MS


def test_previous_day_across_fall_back_is_25h() -> None:
    day = date_start_ms(date(2024, 11, 4), NEW_YORK)
    assert day - previous_day_start_ms(day, NEW_YORK) == 25 * HOUR_MS


def test_previous_day_from_any_time_of_day() -> None:
    noon = ms(2024, 3, 11, 16, 0)  # 12:00 in New York (EDT)
    assert previous_day_start_ms(noon, NEW_YORK) == date_start_ms(date(2024, 3, 10), NEW_YORK)


def test_format_day() -> None:
    assert format_day(0) == "never"
    assert format_day(ms(2024, 3, 10, 12, 0), timezone.utc) == "2024-03-10"
