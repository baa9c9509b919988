# src/daily_board/tasks/task_api.py

"""
High-level board operations used by the UI layer (console commands).

Each helper takes the AppState built at startup and performs one logical
operation. Toggling completion of a daily re-evaluates the streak right
away, so a day is credited the moment its last daily is checked off.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from ..core.state import AppState
from ..errors import BreakdownError, NotFound
from ..llm.breakdown import BreakdownTask, break_down_tasks
from .clock import now_ms
from .rollover import RolloverResult
from .rollover_scheduler import trigger_daily_reset
from .streak import StreakOutcome
from .task_models import StreakCounter, Task, TaskCategory, TaskPatch, TaskPriority, new_task

logger = logging.getLogger(__name__)


# ---- tasks ----

def list_tasks(state: AppState, category: TaskCategory | None = None) -> list[Task]:
    if category is None:
        return state.task_store.list_all()
    return state.task_store.list_by_category(category)


def resolve_task(state: AppState, ref: str) -> Task:
    """Find a task by full id or by a unique id prefix."""
    ref = (ref or "").strip()
    if not ref:
        raise ValueError("task id is required")
    task = state.task_store.get(ref)
    if task is not None:
        return task
    matches = state.task_store.find_by_prefix(ref, limit=2)
    if not matches:
        raise NotFound(ref)
    if len(matches) > 1:
        raise ValueError(f"Ambiguous task id prefix: {ref}")
    return matches[0]


def create_task(
    state: AppState,
    *,
    title: str,
    category: TaskCategory,
    priority: TaskPriority = TaskPriority.MEDIUM,
    description: str = "",
) -> Task:
    task = new_task(title=title, category=category, priority=priority, description=description)
    state.task_store.insert(task)
    logger.info("Created task id=%s category=%s", task.id, task.category.value)
    return task


def bulk_create_tasks(state: AppState, items: list[dict[str, Any]]) -> list[Task]:
    """Create many tasks at once; nothing is stored if any of them is rejected."""
    tasks = [Task.from_dict(item) for item in items]
    state.task_store.bulk_insert(tasks)
    return tasks


def patch_task(state: AppState, task_id: str, patch: TaskPatch) -> Task:
    before = state.task_store.get(task_id)
    state.task_store.update(task_id, patch)
    task = state.task_store.get(task_id)
    if before is None or task is None:
        raise NotFound(task_id)
    touches_dailies = TaskCategory.DAILIES in (before.category, task.category)
    if touches_dailies and (patch.completed is not None or patch.category is not None):
        refresh_streak(state)
    return task


def set_completed(state: AppState, task_id: str, completed: bool) -> Task:
    return patch_task(state, task_id, TaskPatch(completed=completed))


def move_task(state: AppState, task_id: str, category: TaskCategory) -> Task:
    return patch_task(state, task_id, TaskPatch(category=category))


def delete_task(state: AppState, task_id: str) -> bool:
    deleted = state.task_store.delete(task_id)
    if deleted:
        logger.info("Deleted task id=%s", task_id)
    return deleted


def reset_dailies(state: AppState) -> int:
    return state.rollover.reset_dailies()


def perform_daily_reset(state: AppState) -> RolloverResult:
    return trigger_daily_reset(state)


# ---- streak ----

def get_streak(state: AppState) -> StreakCounter:
    return state.streak.get()


def refresh_streak(state: AppState, now: int | None = None) -> StreakOutcome:
    total, incomplete = state.task_store.count_dailies()
    return state.streak.evaluate(now_ms() if now is None else now, total, incomplete)


def reset_streak(state: AppState) -> StreakCounter:
    return state.streak.reset()


# ---- task breakdown ----

def weekly_titles(state: AppState) -> list[str]:
    return [t.title for t in state.task_store.list_by_category(TaskCategory.WEEK) if not t.completed]


def breakdown_week(state: AppState) -> list[BreakdownTask]:
    if state.llm is None:
        raise BreakdownError("AI breakdown is disabled (BOARD_LLM_ENABLED=false).")
    return break_down_tasks(state.llm, weekly_titles(state))


def apply_breakdown(state: AppState, suggestions: list[BreakdownTask]) -> list[Task]:
    tasks = [
        new_task(
            title=s.title,
            description=s.description,
            priority=s.priority,
            category=s.category,
        )
        for s in suggestions
    ]
    state.task_store.bulk_insert(tasks)
    return tasks


# ---- import / export ----

def export_tasks(state: AppState, path: str | Path) -> int:
    tasks = state.task_store.list_all()
    out = Path(path).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")
    payload = {"tasks": [t.to_dict() for t in tasks], "streak": state.streak.get().to_dict()}
    tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
    os.replace(tmp, out)
    logger.info("Exported %d tasks to %s", len(tasks), out)
    return len(tasks)


def import_tasks(state: AppState, path: str | Path) -> int:
    """
    Restore tasks from an export file (a {"tasks": [...]} object or a bare list).

    All-or-nothing: a malformed entry or an id that already exists rejects the
    whole file.
    """
    src = Path(path).expanduser()
    data = json.loads(src.read_text("utf-8"))
    items = data.get("tasks", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError(f"Unexpected import format in {src}")
    for n, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Import entry #{n} in {src} is not an object")
    tasks = bulk_create_tasks(state, items)
    logger.info("Imported %d tasks from %s", len(tasks), src)
    return len(tasks)
