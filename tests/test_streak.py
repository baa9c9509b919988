# tests/test_streak.py

from __future__ import annotations

import sqlite3
from concurrent.futures import ThreadPoolExecutor
from datetime import timezone
from pathlib import Path

import pytest

from daily_board.tasks.clock import day_start_ms
from daily_board.tasks.streak import StreakOutcome, StreakTracker, decide
from daily_board.tasks.task_models import StreakCounter

from .fakes import ms

DAY1 = ms(2024, 3, 10, 20, 0)
DAY2 = ms(2024, 3, 11, 9, 30)
DAY4 = ms(2024, 3, 13, 23, 59)


@pytest.fixture()
def tracker(tmp_path: Path) -> StreakTracker:
    return StreakTracker(tmp_path / "tasks.sqlite3", tz=timezone.utc)


def test_fresh_counter_is_zeroed(tracker: StreakTracker) -> None:
    s = tracker.get()
    assert (s.current_streak, s.longest_streak, s.last_completed_date) == (0, 0, 0)


def test_no_dailies_leaves_counter_alone(tracker: StreakTracker) -> None:
    assert tracker.evaluate(DAY1, 0, 0) == StreakOutcome.NO_DAILIES
    assert tracker.get().current_streak == 0


def test_first_completion_starts_streak(tracker: StreakTracker) -> None:
    assert tracker.evaluate(DAY1, 3, 0) == StreakOutcome.STARTED
    s = tracker.get()
    assert s.current_streak == 1
    assert s.longest_streak == 1
    assert s.last_completed_date == day_start_ms(DAY1, timezone.utc)


def test_same_day_evaluation_is_idempotent(tracker: StreakTracker) -> None:
    tracker.evaluate(DAY1, 3, 0)
    before = tracker.get()
    assert tracker.evaluate(DAY1 + 60_000, 3, 0) == StreakOutcome.ALREADY_CREDITED
    assert tracker.get() == before


def test_consecutive_day_continues(tracker: StreakTracker) -> None:
    tracker.evaluate(DAY1, 2, 0)
    assert tracker.evaluate(DAY2, 2, 0) == StreakOutcome.CONTINUED
    s = tracker.get()
    assert s.current_streak == 2
    assert s.longest_streak == 2
    assert s.last_completed_date == day_start_ms(DAY2, timezone.utc)


def test_open_dailies_after_credit_yesterday_are_pending(tracker: StreakTracker) -> None:
    tracker.evaluate(DAY1, 2, 0)
    assert tracker.evaluate(DAY2, 2, 1) == StreakOutcome.PENDING
    assert tracker.get().current_streak == 1


def test_missed_day_breaks_streak_but_keeps_longest(tracker: StreakTracker) -> None:
    tracker.evaluate(DAY1, 2, 0)
    tracker.evaluate(DAY2, 2, 0)
    assert tracker.evaluate(DAY4, 2, 1) == StreakOutcome.BROKEN
    s = tracker.get()
    assert s.current_streak == 0
    assert s.longest_streak == 2
    assert s.last_completed_date == day_start_ms(DAY2, timezone.utc)


def test_completion_after_gap_restarts_at_one(tracker: StreakTracker) -> None:
    tracker.evaluate(DAY1, 2, 0)
    tracker.evaluate(DAY2, 2, 0)
    assert tracker.evaluate(DAY4, 2, 0) == StreakOutcome.STARTED
    s = tracker.get()
    assert s.current_streak == 1
    assert s.longest_streak == 2


def test_reset_keeps_longest(tracker: StreakTracker) -> None:
    tracker.evaluate(DAY1, 1, 0)
    tracker.evaluate(DAY2, 1, 0)
    s = tracker.reset()
    assert (s.current_streak, s.longest_streak, s.last_completed_date) == (0, 2, 0)
    assert tracker.get() == s


def test_longest_below_current_is_repaired(tracker: StreakTracker) -> None:
    conn = sqlite3.connect(str(tracker.db_path))
    try:
        conn.execute("UPDATE streak_counter SET current_streak = 5, longest_streak = 3 WHERE id = 1")
        conn.commit()
    finally:
        conn.close()

    s = tracker.get()
    assert s.current_streak == 5
    assert s.longest_streak == 5


def test_decide_returns_same_object_when_unchanged() -> None:
    counter = StreakCounter(current_streak=0, longest_streak=4, last_completed_date=0, created_at=1)
    today = day_start_ms(DAY4, timezone.utc)
    outcome, after = decide(counter, today=today, yesterday=today - 86_400_000, total=3, incomplete=2)
    assert outcome == StreakOutcome.BROKEN
    assert after is counter


def test_concurrent_evaluate_credits_once(tracker: StreakTracker) -> None:
    with ThreadPoolExecutor(max_workers=16) as pool:
        outcomes = list(pool.map(lambda _: tracker.evaluate(DAY1, 3, 0), range(16)))

    assert outcomes.count(StreakOutcome.STARTED) == 1
    assert outcomes.count(StreakOutcome.ALREADY_CREDITED) == 15
    s = tracker.get()
    assert s.current_streak == 1
    assert s.longest_streak == 1
