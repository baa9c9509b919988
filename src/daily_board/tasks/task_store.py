# src/daily_board/tasks/task_store.py

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..errors import DuplicateKey, NotFound
from .db import SQLiteStore
from .task_models import Task, TaskCategory, TaskPatch, TaskPriority

logger = logging.getLogger(__name__)

_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    priority TEXT NOT NULL DEFAULT 'medium'
        CHECK (priority IN ('low', 'medium', 'high')),
    category TEXT NOT NULL
        CHECK (category IN ('today', 'tomorrow', 'week', 'dailies')),
    completed INTEGER NOT NULL DEFAULT 0 CHECK (completed IN (0, 1)),
    created_at INTEGER NOT NULL,
    last_reset INTEGER DEFAULT NULL
)
"""

_META_DDL = """
CREATE TABLE IF NOT EXISTS board_meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""

_INSERT_SQL = """
INSERT INTO tasks(id, title, description, priority, category, completed, created_at, last_reset)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


class TaskStore(SQLiteStore):
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Enum and boolean columns are guarded by CHECK constraints; `completed`
    is 0/1 on disk and a strict bool on Task.

    Update semantics: a non-empty patch for an unknown id raises NotFound,
    an empty patch is a no-op. Deleting an unknown id is a no-op.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        super().__init__(db_path)
        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    def _ensure_schema(self) -> None:
        self._ensure_table(
            _TASKS_DDL,
            table="tasks",
            columns={"last_reset": "INTEGER DEFAULT NULL"},
        )
        with self.transaction() as conn:
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category, completed)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")
            conn.execute(_META_DDL)

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            title=str(row["title"]),
            description=str(row["description"] or ""),
            priority=TaskPriority.from_db(row["priority"]),
            category=TaskCategory.from_db(row["category"]),
            completed=bool(row["completed"]),
            created_at=int(row["created_at"]),
            last_reset=int(row["last_reset"]) if row["last_reset"] is not None else None,
        )

    @staticmethod
    def _task_params(task: Task) -> tuple[Any, ...]:
        if not task.title or not task.title.strip():
            raise ValueError("title is required")
        return (
            task.id,
            task.title.strip(),
            task.description or "",
            TaskPriority(task.priority).value,
            TaskCategory(task.category).value,
            1 if task.completed else 0,
            int(task.created_at),
            task.last_reset,
        )

    @staticmethod
    def _patch_sql(patch: TaskPatch) -> tuple[list[str], list[Any]]:
        sets: list[str] = []
        params: list[Any] = []
        for name, value in patch.items():
            if name == "title":
                value = str(value).strip()
                if not value:
                    raise ValueError("title must not be empty")
            elif name == "priority":
                value = TaskPriority(value).value
            elif name == "category":
                value = TaskCategory(value).value
            elif name == "completed":
                value = 1 if value else 0
            sets.append(f"{name} = ?")
            params.append(value)
        return sets, params

    # ---- reads ----

    def count_tasks(self) -> int:
        with self._reading() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def list_all(self) -> list[Task]:
        """All tasks, oldest first. rowid breaks createdAt ties deterministically."""
        with self._reading() as conn:
            rows = conn.execute("SELECT * FROM tasks ORDER BY created_at ASC, rowid ASC").fetchall()
            return [self._row_to_task(r) for r in rows]

    def list_by_category(self, category: TaskCategory) -> list[Task]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT * FROM tasks WHERE category = ? ORDER BY created_at ASC, rowid ASC",
                (TaskCategory(category).value,),
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def get(self, task_id: str) -> Task | None:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def find_by_prefix(self, prefix: str, limit: int = 8) -> list[Task]:
        prefix = (prefix or "").strip()
        if not prefix:
            return []
        with self._reading() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE substr(id, 1, ?) = ?
                ORDER BY created_at ASC, rowid ASC
                    LIMIT ?
                """,
                (len(prefix), prefix, int(limit)),
            ).fetchall()
            return [self._row_to_task(r) for r in rows]

    def count_category(self, category: TaskCategory, *, completed: bool | None = None) -> int:
        sql = "SELECT COUNT(*) FROM tasks WHERE category = ?"
        params: list[Any] = [TaskCategory(category).value]
        if completed is not None:
            sql += " AND completed = ?"
            params.append(1 if completed else 0)
        with self._reading() as conn:
            (n,) = conn.execute(sql, params).fetchone()
            return int(n)

    def count_dailies(self) -> tuple[int, int]:
        """(total, incomplete) for the dailies bucket, read in one statement."""
        with self._reading() as conn:
            row = conn.execute(
                """
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(CASE WHEN completed = 0 THEN 1 ELSE 0 END), 0) AS incomplete
                FROM tasks
                WHERE category = 'dailies'
                """
            ).fetchone()
            return int(row["total"]), int(row["incomplete"])

    # ---- single-row writes ----

    def insert(self, task: Task) -> None:
        params = self._task_params(task)
        with self.transaction() as conn:
            try:
                conn.execute(_INSERT_SQL, params)
            except sqlite3.IntegrityError as e:
                raise DuplicateKey(task.id) from e
        logger.debug("Task added id=%s category=%s priority=%s", task.id, task.category, task.priority)

    def update(self, task_id: str, patch: TaskPatch) -> None:
        if patch.is_empty():
            return
        sets, params = self._patch_sql(patch)
        params.append(str(task_id))
        with self.transaction() as conn:
            cur = conn.execute(f"UPDATE tasks SET {', '.join(sets)} WHERE id = ?", params)
            if cur.rowcount == 0:
                raise NotFound(str(task_id))
        logger.debug("Task updated id=%s fields=%s", task_id, [name for name, _ in patch.items()])

    def delete(self, task_id: str) -> bool:
        with self.transaction() as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            deleted = cur.rowcount > 0
        if deleted:
            logger.debug("Task deleted id=%s", task_id)
        return deleted

    # ---- bulk writes ----

    def bulk_insert(self, tasks: Iterable[Task]) -> int:
        """All-or-nothing insert: any duplicate id rolls back the whole batch."""
        items = list(tasks)
        if not items:
            return 0
        rows = [self._task_params(t) for t in items]
        with self.transaction() as conn:
            for task, params in zip(items, rows):
                try:
                    conn.execute(_INSERT_SQL, params)
                except sqlite3.IntegrityError as e:
                    raise DuplicateKey(task.id) from e
        logger.info("Bulk insert: %d tasks", len(items))
        return len(items)

    def update_by_category(
        self,
        category: TaskCategory,
        patch: TaskPatch,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        """Apply patch to every task in category. Returns affected rows."""
        if patch.is_empty():
            return 0
        sets, params = self._patch_sql(patch)
        params.append(TaskCategory(category).value)
        with self.writing(conn) as c:
            cur = c.execute(f"UPDATE tasks SET {', '.join(sets)} WHERE category = ?", params)
            return int(cur.rowcount)

    def update_category_bulk(
        self,
        from_category: TaskCategory,
        to_category: TaskCategory,
        *,
        last_reset: int | None = None,
        conn: sqlite3.Connection | None = None,
    ) -> int:
        """
        Move every task in from_category to to_category in one statement,
        optionally stamping last_reset. Returns moved rows.
        """
        sets = ["category = ?"]
        params: list[Any] = [TaskCategory(to_category).value]
        if last_reset is not None:
            sets.append("last_reset = ?")
            params.append(int(last_reset))
        params.append(TaskCategory(from_category).value)
        with self.writing(conn) as c:
            cur = c.execute(f"UPDATE tasks SET {', '.join(sets)} WHERE category = ?", params)
            return int(cur.rowcount)

    def reset_dailies(self, *, conn: sqlite3.Connection | None = None) -> int:
        return self.update_by_category(TaskCategory.DAILIES, TaskPatch(completed=False), conn=conn)

    # ---- board metadata ----

    def get_meta(self, key: str, *, conn: sqlite3.Connection | None = None) -> str | None:
        if conn is not None:
            row = conn.execute("SELECT value FROM board_meta WHERE key = ?", (key,)).fetchone()
            return str(row["value"]) if row else None
        with self._reading() as c:
            row = c.execute("SELECT value FROM board_meta WHERE key = ?", (key,)).fetchone()
            return str(row["value"]) if row else None

    def set_meta(self, key: str, value: str, *, conn: sqlite3.Connection | None = None) -> None:
        with self.writing(conn) as c:
            c.execute(
                """
                INSERT INTO board_meta(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, str(value)),
            )
