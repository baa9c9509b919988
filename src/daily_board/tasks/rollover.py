# src/daily_board/tasks/rollover.py

"""
Daily rollover.

Once per calendar day:
  1. tomorrow -> today (stamping last_reset = now)
  2. today    -> week  (sees step 1's output, so promoted tasks land in week too)
  3. dailies  -> completed = false

Every task in a source bucket moves, regardless of when it arrived. Running
the rollover twice therefore sweeps anything a user put into `today` in
between straight into `week`.

Ordering contract with the streak tracker: never run this before the day's
streak evaluation has had its chance. Step 3 wipes the completion flags the
evaluation looks at.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from .clock import now_ms
from .task_models import TaskCategory
from .task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RolloverResult:
    at: int
    promoted: int  # tomorrow -> today
    swept: int  # today -> week (includes the promoted ones)
    dailies_reset: int


class RolloverEngine:
    """Stateless between calls; everything lives in the TaskStore."""

    def __init__(self, task_store: TaskStore) -> None:
        self._store = task_store

    def perform_daily_reset(
        self,
        now: int | None = None,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> RolloverResult:
        """
        Run the three steps in order inside one transaction (the caller's,
        when conn is given).

        A storage failure rolls back all three steps. Do not retry blindly:
        a retry after manual edits re-sweeps `today`.
        """
        at = now_ms() if now is None else int(now)
        with self._store.writing(conn) as c:
            promoted = self._store.update_category_bulk(
                TaskCategory.TOMORROW, TaskCategory.TODAY, last_reset=at, conn=c
            )
            swept = self._store.update_category_bulk(TaskCategory.TODAY, TaskCategory.WEEK, conn=c)
            dailies_reset = self._store.reset_dailies(conn=c)

        result = RolloverResult(at=at, promoted=promoted, swept=swept, dailies_reset=dailies_reset)
        logger.info(
            "Daily rollover done: promoted=%s swept=%s dailies_reset=%s",
            result.promoted,
            result.swept,
            result.dailies_reset,
        )
        return result

    def reset_dailies(self) -> int:
        n = self._store.reset_dailies()
        logger.info("Dailies reset: %s tasks", n)
        return n
