# src/daily_board/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields
from enum import StrEnum
from typing import Any

from ..errors import InvariantViolation
from .clock import now_ms


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str) -> TaskPriority:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown priority: {raw!r} (expected low, medium or high)") from None

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        try:
            return cls(raw)
        except ValueError:
            raise InvariantViolation(f"Stored task has unknown priority {raw!r}") from None


class TaskCategory(StrEnum):
    """
    Bucket a task lives in.

    today/tomorrow/week are advanced by the daily rollover;
    dailies are recurring and only get their completion flag reset.
    """

    TODAY = "today"
    TOMORROW = "tomorrow"
    WEEK = "week"
    DAILIES = "dailies"

    @classmethod
    def parse(cls, raw: str) -> TaskCategory:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown category: {raw!r} (expected today, tomorrow, week or dailies)"
            ) from None

    @classmethod
    def from_db(cls, raw: str | None) -> TaskCategory:
        try:
            return cls(raw)
        except ValueError:
            raise InvariantViolation(f"Stored task has unknown category {raw!r}") from None


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    priority: TaskPriority
    category: TaskCategory
    completed: bool
    created_at: int  # ms since epoch
    last_reset: int | None = None  # set by the tomorrow -> today promotion

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "category": self.category.value,
            "completed": self.completed,
            "createdAt": self.created_at,
            "lastReset": self.last_reset,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Build a Task from the exported JSON shape.

        Missing id / createdAt are filled in; enums are validated.
        """
        title = str(data.get("title") or "").strip()
        if not title:
            raise ValueError("title is required")
        last_reset = data.get("lastReset")
        return cls(
            id=str(data.get("id") or new_task_id()),
            title=title,
            description=str(data.get("description") or ""),
            priority=TaskPriority.parse(data.get("priority") or TaskPriority.MEDIUM.value),
            category=TaskCategory.parse(data.get("category") or ""),
            completed=bool(data.get("completed", False)),
            created_at=int(data.get("createdAt") or now_ms()),
            last_reset=int(last_reset) if last_reset else None,
        )


@dataclass(frozen=True, slots=True)
class TaskPatch:
    """
    Partial update of a task. None means "leave the field alone".

    id, createdAt and lastReset are not patchable.
    """

    title: str | None = None
    description: str | None = None
    priority: TaskPriority | None = None
    category: TaskCategory | None = None
    completed: bool | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def items(self) -> list[tuple[str, Any]]:
        return [(f.name, getattr(self, f.name)) for f in fields(self) if getattr(self, f.name) is not None]


@dataclass(slots=True)
class StreakCounter:
    current_streak: int
    longest_streak: int
    last_completed_date: int  # midnight ms, 0 = never credited
    created_at: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastCompletedDate": self.last_completed_date,
            "createdAt": self.created_at,
        }


def new_task_id() -> str:
    return uuid.uuid4().hex


def new_task(
    *,
    title: str,
    category: TaskCategory,
    priority: TaskPriority = TaskPriority.MEDIUM,
    description: str = "",
    created_at: int | None = None,
) -> Task:
    title = (title or "").strip()
    if not title:
        raise ValueError("title is required")
    return Task(
        id=new_task_id(),
        title=title,
        description=(description or "").strip(),
        priority=priority,
        category=category,
        completed=False,
        created_at=now_ms() if created_at is None else int(created_at),
        last_reset=None,
    )
