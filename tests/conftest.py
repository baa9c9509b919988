# tests/conftest.py

from __future__ import annotations

from datetime import timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from daily_board.core.state import AppState
from daily_board.tasks.rollover import RolloverEngine
from daily_board.tasks.streak import StreakTracker
from daily_board.tasks.task_store import TaskStore

from .fakes import FakeCompletionClient


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="daily-board-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        timezone="UTC",
        reset_hour=6,
        reset_check_interval_seconds=0.5,
        llm_enabled=False,
        llm_base_url="http://localhost:11434/v1",
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def fake_llm() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture()
def state(settings: SimpleNamespace, task_store: TaskStore, fake_llm: FakeCompletionClient) -> AppState:
    """
    AppState wired with a fake completion client.

    NOTE: We keep the real SQLite stores here because their correctness is
    part of what we want to test. Days are computed in UTC.
    """
    return AppState(
        settings=settings,
        task_store=task_store,
        streak=StreakTracker(settings.tasks_db_path, tz=timezone.utc),
        rollover=RolloverEngine(task_store),
        llm=fake_llm,
        tz=timezone.utc,
    )
