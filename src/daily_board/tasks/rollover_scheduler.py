# src/daily_board/tasks/rollover_scheduler.py

from __future__ import annotations

"""
Daily reset trigger.

A small polling loop that:
- checks whether today's rollover is due (local time past reset_hour),
- runs it at most once per calendar day (recorded in board_meta),
- logs and waits for the next tick on failure.

Missed days are not replayed: the next successful run simply processes
whatever has accumulated in the buckets.

A database with no recorded rollover day (fresh install, or one only used
with the scheduler disabled) is not rolled over on the first tick: the
most recent reset slot is recorded as already handled, and rolling over
starts from the next one.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import timedelta, tzinfo
from typing import TYPE_CHECKING

from .clock import now_ms, to_datetime
from .rollover import RolloverEngine, RolloverResult
from .task_store import TaskStore

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)

LAST_ROLLOVER_KEY = "last_rollover_day"


def rollover_due(now: int, last_day: str | None, *, reset_hour: int, tz: tzinfo | None = None) -> bool:
    """True when local time is past reset_hour and no rollover ran on this calendar day."""
    local = to_datetime(now, tz)
    if local.hour < reset_hour:
        return False
    return last_day != local.date().isoformat()


def last_reset_slot_day(now: int, *, reset_hour: int, tz: tzinfo | None = None) -> str:
    """Calendar day of the most recent reset_hour boundary at or before now."""
    local = to_datetime(now, tz)
    day = local.date() if local.hour >= reset_hour else local.date() - timedelta(days=1)
    return day.isoformat()


def maybe_run_daily_reset(
    engine: RolloverEngine,
    task_store: TaskStore,
    *,
    now: int,
    reset_hour: int,
    tz: tzinfo | None = None,
) -> RolloverResult | None:
    """
    One scheduler tick. Returns the rollover result when it ran.

    With nothing recorded yet, the tick only records the latest reset slot;
    tasks already on the board are left where they are.

    The due check is repeated under the write lock, and the day is recorded in
    the same transaction as the rollover, so two processes sharing the
    database cannot both roll over on the same day.
    """
    last_day = task_store.get_meta(LAST_ROLLOVER_KEY)
    if last_day is not None and not rollover_due(now, last_day, reset_hour=reset_hour, tz=tz):
        return None

    today = to_datetime(now, tz).date().isoformat()
    with task_store.transaction() as conn:
        last_day = task_store.get_meta(LAST_ROLLOVER_KEY, conn=conn)
        if last_day is None:
            slot = last_reset_slot_day(now, reset_hour=reset_hour, tz=tz)
            task_store.set_meta(LAST_ROLLOVER_KEY, slot, conn=conn)
            logger.info("No rollover recorded yet; marking %s as handled without rolling over", slot)
            return None
        if not rollover_due(now, last_day, reset_hour=reset_hour, tz=tz):
            return None
        logger.info("Daily rollover due (last=%s today=%s)", last_day, today)
        result = engine.perform_daily_reset(now, conn=conn)
        task_store.set_meta(LAST_ROLLOVER_KEY, today, conn=conn)
    return result


async def run_daily_reset_scheduler(
        engine: RolloverEngine,
        task_store: TaskStore,
        *,
        reset_hour: int = 6,
        interval_seconds: float = 60.0,
        tz: tzinfo | None = None,
        clock: Callable[[], int] = now_ms,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds:
    - read the last rollover day from board_meta
    - if due, perform the daily reset and record today's date
      On failure:
        - log it; the day is not recorded, so the next tick tries again

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.5, float(interval_seconds))
    hour = max(0, min(23, int(reset_hour)))

    logger.info("Daily reset scheduler started (reset_hour=%s interval=%.1fs)", hour, sleep_s)

    while True:
        try:
            maybe_run_daily_reset(engine, task_store, now=clock(), reset_hour=hour, tz=tz)
        except Exception:
            logger.exception("Daily rollover failed; will retry on next tick")

        await asyncio.sleep(sleep_s)


def trigger_daily_reset(state: AppState) -> RolloverResult:
    """
    Manual trigger: roll over now, whatever the hour.

    The day is recorded so the scheduled run does not repeat it later today.
    """
    now = now_ms()
    with state.task_store.transaction() as conn:
        result = state.rollover.perform_daily_reset(now, conn=conn)
        state.task_store.set_meta(LAST_ROLLOVER_KEY, to_datetime(now, state.tz).date().isoformat(), conn=conn)
    return result
