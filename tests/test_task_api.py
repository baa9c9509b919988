# tests/test_task_api.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from daily_board.errors import BreakdownError, DuplicateKey, NotFound
from daily_board.tasks import task_api
from daily_board.tasks.task_models import TaskCategory, TaskPriority


def test_completing_last_daily_credits_the_day(state) -> None:
    a = task_api.create_task(state, title="stretch", category=TaskCategory.DAILIES)
    b = task_api.create_task(state, title="read", category=TaskCategory.DAILIES)

    task_api.set_completed(state, a.id, True)
    assert task_api.get_streak(state).current_streak == 0

    task_api.set_completed(state, b.id, True)
    assert task_api.get_streak(state).current_streak == 1

    # unchecking and re-checking on the same day does not double count
    task_api.set_completed(state, b.id, False)
    task_api.set_completed(state, b.id, True)
    assert task_api.get_streak(state).current_streak == 1


def test_completing_a_non_daily_does_not_touch_streak(state) -> None:
    t = task_api.create_task(state, title="ship", category=TaskCategory.TODAY)
    task_api.set_completed(state, t.id, True)
    s = task_api.get_streak(state)
    assert s.current_streak == 0
    assert s.last_completed_date == 0


def test_resolve_task_by_prefix(state) -> None:
    t = task_api.create_task(state, title="x", category=TaskCategory.WEEK)
    assert task_api.resolve_task(state, t.id).id == t.id
    assert task_api.resolve_task(state, t.id[:8]).id == t.id
    with pytest.raises(NotFound):
        task_api.resolve_task(state, "zzzz-not-there")
    with pytest.raises(ValueError):
        task_api.resolve_task(state, "  ")


def test_move_and_patch_unknown_task(state) -> None:
    t = task_api.create_task(state, title="x", category=TaskCategory.WEEK, priority=TaskPriority.LOW)
    moved = task_api.move_task(state, t.id, TaskCategory.TOMORROW)
    assert moved.category == TaskCategory.TOMORROW
    assert moved.priority == TaskPriority.LOW
    with pytest.raises(NotFound):
        task_api.move_task(state, "missing", TaskCategory.TODAY)


def test_perform_daily_reset_through_api(state) -> None:
    task_api.create_task(state, title="later", category=TaskCategory.TOMORROW)
    r = task_api.perform_daily_reset(state)
    assert r.promoted == 1
    assert [t.category for t in task_api.list_tasks(state)] == [TaskCategory.WEEK]


def test_export_then_import_restores_board(state, tmp_path: Path) -> None:
    task_api.create_task(state, title="one", category=TaskCategory.TODAY, description="first")
    task_api.create_task(state, title="two", category=TaskCategory.DAILIES, priority=TaskPriority.HIGH)
    out = tmp_path / "export" / "board.json"

    assert task_api.export_tasks(state, out) == 2
    payload = json.loads(out.read_text("utf-8"))
    assert [t["title"] for t in payload["tasks"]] == ["one", "two"]
    assert payload["tasks"][0]["createdAt"] > 0
    assert payload["streak"]["currentStreak"] == 0

    before = [t.to_dict() for t in task_api.list_tasks(state)]
    for t in task_api.list_tasks(state):
        task_api.delete_task(state, t.id)

    assert task_api.import_tasks(state, out) == 2
    assert [t.to_dict() for t in task_api.list_tasks(state)] == before


def test_import_with_existing_id_adds_nothing(state, tmp_path: Path) -> None:
    keep = task_api.create_task(state, title="keep", category=TaskCategory.TODAY)
    src = tmp_path / "in.json"
    src.write_text(
        json.dumps(
            [
                {"title": "fresh", "category": "week"},
                {"id": keep.id, "title": "clash", "category": "today"},
            ]
        ),
        "utf-8",
    )
    with pytest.raises(DuplicateKey):
        task_api.import_tasks(state, src)
    assert [t.title for t in task_api.list_tasks(state)] == ["keep"]


def test_breakdown_week_uses_open_weekly_titles(state, fake_llm) -> None:
    task_api.create_task(state, title="Prepare quarterly report", category=TaskCategory.WEEK)
    done = task_api.create_task(state, title="Old thing", category=TaskCategory.WEEK)
    task_api.set_completed(state, done.id, True)
    fake_llm.next_text = json.dumps(
        [{"title": "Collect numbers", "description": "Pull Q3 data", "priority": "high", "category": "today"}]
    )

    suggestions = task_api.breakdown_week(state)

    prompt, _model = fake_llm.calls[0]
    assert "1. Prepare quarterly report" in prompt
    assert "Old thing" not in prompt
    assert [s.title for s in suggestions] == ["Collect numbers"]

    created = task_api.apply_breakdown(state, suggestions)
    assert created[0].category == TaskCategory.TODAY
    assert created[0].priority == TaskPriority.HIGH
    assert task_api.list_tasks(state, TaskCategory.TODAY)[0].description == "Pull Q3 data"


def test_breakdown_without_client_is_an_error(state) -> None:
    state.llm = None
    with pytest.raises(BreakdownError):
        task_api.breakdown_week(state)


def test_moving_a_done_task_into_dailies_refreshes_streak(state) -> None:
    t = task_api.create_task(state, title="floss", category=TaskCategory.TODAY)
    task_api.set_completed(state, t.id, True)
    assert task_api.get_streak(state).current_streak == 0

    task_api.move_task(state, t.id, TaskCategory.DAILIES)
    assert task_api.get_streak(state).current_streak == 1


def test_import_with_non_object_entry_adds_nothing(state, tmp_path: Path) -> None:
    src = tmp_path / "in.json"
    src.write_text(json.dumps({"tasks": [{"title": "fine", "category": "week"}, "oops"]}), "utf-8")
    with pytest.raises(ValueError, match="#2"):
        task_api.import_tasks(state, src)
    assert task_api.list_tasks(state) == []
