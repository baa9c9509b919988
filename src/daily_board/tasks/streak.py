# src/daily_board/tasks/streak.py

"""
Streak tracker: consecutive calendar days on which every daily was completed.

evaluate() is called from two places:
- the completion-toggle path, so a day is credited the moment the last
  daily gets checked off;
- any time the UI asks for a refresh.

The nightly rollover resets dailies to incomplete. It must run after the
day's evaluate() has had its chance, otherwise that day's credit is lost.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import tzinfo
from enum import StrEnum
from pathlib import Path

from .clock import day_start_ms, format_day, now_ms, previous_day_start_ms
from .db import SQLiteStore
from .task_models import StreakCounter

logger = logging.getLogger(__name__)

_STREAK_DDL = """
CREATE TABLE IF NOT EXISTS streak_counter (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    current_streak INTEGER NOT NULL DEFAULT 0 CHECK (current_streak >= 0),
    longest_streak INTEGER NOT NULL DEFAULT 0 CHECK (longest_streak >= 0),
    last_completed_date INTEGER NOT NULL DEFAULT 0,
    created_at INTEGER NOT NULL
)
"""


class StreakOutcome(StrEnum):
    """Which branch evaluate() took."""

    NO_DAILIES = "unchanged_no_dailies"
    CONTINUED = "continued"
    STARTED = "started"
    ALREADY_CREDITED = "already_credited"
    BROKEN = "broken"
    PENDING = "pending"


def decide(
    counter: StreakCounter,
    *,
    today: int,
    yesterday: int,
    total: int,
    incomplete: int,
) -> tuple[StreakOutcome, StreakCounter]:
    """
    Pure transition function. Returns the branch taken and the new counter
    (the same object when nothing changes).
    """
    last = counter.last_completed_date

    if total <= 0:
        return StreakOutcome.NO_DAILIES, counter

    if incomplete <= 0:
        if last == yesterday:
            current = counter.current_streak + 1
            return StreakOutcome.CONTINUED, StreakCounter(
                current_streak=current,
                longest_streak=max(counter.longest_streak, current),
                last_completed_date=today,
                created_at=counter.created_at,
            )
        if last < today:
            return StreakOutcome.STARTED, StreakCounter(
                current_streak=1,
                longest_streak=max(counter.longest_streak, 1),
                last_completed_date=today,
                created_at=counter.created_at,
            )
        return StreakOutcome.ALREADY_CREDITED, counter

    # Some dailies still open: only a confirmed missed day breaks the streak.
    if last < today and last != yesterday:
        if counter.current_streak == 0:
            return StreakOutcome.BROKEN, counter
        return StreakOutcome.BROKEN, StreakCounter(
            current_streak=0,
            longest_streak=counter.longest_streak,
            last_completed_date=last,
            created_at=counter.created_at,
        )
    return StreakOutcome.PENDING, counter


class StreakTracker(SQLiteStore):
    """
    Singleton streak counter stored next to the tasks table.

    Each evaluate()/reset() is one BEGIN IMMEDIATE transaction, so two
    concurrent evaluations on the same day cannot both start a streak.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, tz: tzinfo | None = None) -> None:
        super().__init__(db_path)
        self._tz = tz
        self._ensure_table(_STREAK_DDL, table="streak_counter", columns={})
        with self.transaction() as conn:
            self._load(conn)
        logger.info("StreakTracker ready db=%s", self._db_path)

    @property
    def tz(self) -> tzinfo | None:
        return self._tz

    @staticmethod
    def _row_to_counter(row: sqlite3.Row) -> StreakCounter:
        return StreakCounter(
            current_streak=int(row["current_streak"]),
            longest_streak=int(row["longest_streak"]),
            last_completed_date=int(row["last_completed_date"]),
            created_at=int(row["created_at"]),
        )

    def _load(self, conn: sqlite3.Connection) -> StreakCounter:
        """Read the singleton row, creating it zeroed if missing and repairing longest < current."""
        row = conn.execute("SELECT * FROM streak_counter WHERE id = 1").fetchone()
        if row is None:
            created = now_ms()
            conn.execute(
                """
                INSERT INTO streak_counter(id, current_streak, longest_streak, last_completed_date, created_at)
                VALUES (1, 0, 0, 0, ?)
                """,
                (created,),
            )
            logger.info("Streak counter initialized")
            return StreakCounter(0, 0, 0, created)

        counter = self._row_to_counter(row)
        if counter.longest_streak < counter.current_streak:
            logger.warning(
                "Streak invariant broken (longest=%s < current=%s); raising longest",
                counter.longest_streak,
                counter.current_streak,
            )
            counter.longest_streak = counter.current_streak
            self._save(conn, counter)
        return counter

    @staticmethod
    def _save(conn: sqlite3.Connection, counter: StreakCounter) -> None:
        conn.execute(
            """
            UPDATE streak_counter
            SET current_streak = ?,
                longest_streak = ?,
                last_completed_date = ?
            WHERE id = 1
            """,
            (counter.current_streak, counter.longest_streak, counter.last_completed_date),
        )

    # ---- public API ----

    def get(self) -> StreakCounter:
        with self.transaction() as conn:
            return self._load(conn)

    def evaluate(self, now: int, dailies_total: int, dailies_incomplete: int) -> StreakOutcome:
        """
        Credit, extend, break or keep the streak for the calendar day of `now` (ms).

        - no dailies: nothing changes
        - all done, last credit yesterday: +1
        - all done, last credit older (or never): restart at 1
        - all done, already credited today: nothing changes
        - some open, last credit before yesterday: streak drops to 0
        - some open otherwise: nothing changes yet
        """
        today = day_start_ms(now, self._tz)
        yesterday = previous_day_start_ms(today, self._tz)

        with self.transaction() as conn:
            before = self._load(conn)
            outcome, after = decide(
                before,
                today=today,
                yesterday=yesterday,
                total=int(dailies_total),
                incomplete=int(dailies_incomplete),
            )
            if after is not before:
                self._save(conn, after)

        if after is not before:
            logger.info(
                "Streak %s: current=%s longest=%s last=%s",
                outcome.value,
                after.current_streak,
                after.longest_streak,
                format_day(after.last_completed_date, self._tz),
            )
        else:
            logger.debug("Streak %s: no change", outcome.value)
        return outcome

    def reset(self) -> StreakCounter:
        """Zero the current streak and forget the last credited day. longest is kept."""
        with self.transaction() as conn:
            counter = self._load(conn)
            counter.current_streak = 0
            counter.last_completed_date = 0
            self._save(conn, counter)
        logger.info("Streak reset (longest=%s kept)", counter.longest_streak)
        return counter
