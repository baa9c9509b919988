# tests/test_breakdown.py

from __future__ import annotations

import pytest

from daily_board.errors import BreakdownError
from daily_board.llm.breakdown import break_down_tasks, build_breakdown_prompt, parse_breakdown
from daily_board.tasks.task_models import TaskCategory, TaskPriority

from .fakes import FakeCompletionClient


def test_parse_extracts_array_from_chatter_and_drops_bad_entries() -> None:
    text = """Sure! Here you go:
[
  {"title": "Outline", "description": "Write the outline", "priority": "High", "category": "today"},
  {"title": "No description", "priority": "low", "category": "today"},
  {"title": "Wrong bucket", "description": "x", "priority": "low", "category": "week"},
  {"title": "Bad priority", "description": "x", "priority": "urgent", "category": "tomorrow"},
  "not an object",
  {"title": "Review", "description": "Proofread", "priority": "low", "category": "tomorrow"}
]
Good luck!"""
    tasks = parse_breakdown(text)
    assert [t.title for t in tasks] == ["Outline", "Review"]
    assert tasks[0].priority == TaskPriority.HIGH
    assert tasks[1].category == TaskCategory.TOMORROW


def test_parse_without_json_raises() -> None:
    with pytest.raises(BreakdownError, match="valid JSON"):
        parse_breakdown("I cannot help with that.")
    with pytest.raises(BreakdownError, match="valid JSON"):
        parse_breakdown("[not json]")


def test_prompt_numbers_titles() -> None:
    prompt = build_breakdown_prompt(["A", "B"])
    assert "1. A\n2. B" in prompt
    assert '"category": "today|tomorrow"' in prompt


def test_empty_week_is_rejected_before_calling_the_model() -> None:
    client = FakeCompletionClient()
    with pytest.raises(ValueError, match="No weekly tasks"):
        break_down_tasks(client, ["", "   "])
    assert client.calls == []


def test_connection_failure_propagates() -> None:
    with pytest.raises(BreakdownError):
        break_down_tasks(FakeCompletionClient(fail=True), ["Plan"])
