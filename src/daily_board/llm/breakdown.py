# src/daily_board/llm/breakdown.py

"""
Break the week's plans into smaller today/tomorrow tasks with a local LLM.

The model is asked for a bare JSON array; anything around the outermost
[...] is ignored and malformed entries are dropped.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from ..core.ports import CompletionClient
from ..errors import BreakdownError
from ..tasks.task_models import TaskCategory, TaskPriority

logger = logging.getLogger(__name__)

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

_ALLOWED_CATEGORIES = {TaskCategory.TODAY.value, TaskCategory.TOMORROW.value}
_ALLOWED_PRIORITIES = {p.value for p in TaskPriority}

_PROMPT_TEMPLATE = """You are a task management assistant. I have these weekly plans/tasks:

{tasks}

Please break these down into smaller, actionable tasks and distribute them across today and tomorrow. Follow these guidelines:

1. Break large tasks into smaller, specific actions (max 2-3 hours each)
2. Consider urgency and importance when assigning to today vs tomorrow
3. Assign priority levels (high, medium, low) based on importance and urgency
4. Provide clear, actionable descriptions
5. Balance the load between today and tomorrow when possible

Respond with a JSON array in this exact format:
[
  {{
    "title": "Specific task title",
    "description": "Clear description of what needs to be done",
    "priority": "high|medium|low",
    "category": "today|tomorrow"
  }}
]

Only respond with the JSON array, no other text."""


@dataclass(slots=True, frozen=True)
class BreakdownTask:
    title: str
    description: str
    priority: TaskPriority
    category: TaskCategory


def build_breakdown_prompt(titles: list[str]) -> str:
    numbered = "\n".join(f"{i}. {t}" for i, t in enumerate(titles, start=1))
    return _PROMPT_TEMPLATE.format(tasks=numbered)


def _coerce(item: Any) -> BreakdownTask | None:
    if not isinstance(item, dict):
        return None
    title = str(item.get("title") or "").strip()
    description = str(item.get("description") or "").strip()
    priority = str(item.get("priority") or "").strip().lower()
    category = str(item.get("category") or "").strip().lower()
    if not title or not description:
        return None
    if priority not in _ALLOWED_PRIORITIES or category not in _ALLOWED_CATEGORIES:
        return None
    return BreakdownTask(
        title=title,
        description=description,
        priority=TaskPriority(priority),
        category=TaskCategory(category),
    )


def parse_breakdown(text: str) -> list[BreakdownTask]:
    m = _JSON_ARRAY_RE.search(text or "")
    if not m:
        raise BreakdownError("AI response did not contain valid JSON")
    try:
        data = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise BreakdownError("AI response did not contain valid JSON") from e
    if not isinstance(data, list):
        raise BreakdownError("AI response was not an array")

    out = [t for t in (_coerce(item) for item in data) if t is not None]
    dropped = len(data) - len(out)
    if dropped:
        logger.info("Breakdown: dropped %d malformed entries", dropped)
    return out


def break_down_tasks(client: CompletionClient, titles: list[str]) -> list[BreakdownTask]:
    titles = [t.strip() for t in titles if t and t.strip()]
    if not titles:
        raise ValueError("No weekly tasks found to break down")
    logger.info("Breakdown: %d weekly tasks", len(titles))
    text = client.complete(build_breakdown_prompt(titles))
    tasks = parse_breakdown(text)
    logger.info("Breakdown: %d suggested tasks", len(tasks))
    return tasks
