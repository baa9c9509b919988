# tests/test_config_bootstrap.py

from __future__ import annotations

from pathlib import Path

import pytest

from daily_board.cli.bootstrap import create_initial_state, resolve_timezone
from daily_board.config import Settings


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("BOARD_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("BOARD_TASKS_DB_PATH", raising=False)
    monkeypatch.setenv("BOARD_DB_PATH", str(tmp_path / "legacy.sqlite3"))
    monkeypatch.setenv("BOARD_RESET_HOUR", "42")
    monkeypatch.setenv("BOARD_LLM_PREFERRED_MODELS", "llama3, mistral")
    monkeypatch.setenv("BOARD_SCHEDULER_ENABLED", "off")

    s = Settings.from_env()
    assert s.data_dir == tmp_path
    assert s.tasks_db_path == tmp_path / "legacy.sqlite3"
    assert s.reset_hour == 23
    assert s.llm_preferred_models == ["llama3", "mistral"]
    assert s.scheduler_enabled is False


def test_resolve_timezone() -> None:
    assert resolve_timezone("") is None
    assert resolve_timezone("Not/AZone") is None
    assert resolve_timezone("UTC") is not None


def test_create_initial_state_wires_stores(settings) -> None:
    state = create_initial_state(settings=settings)
    assert state.llm is None
    assert state.tz is not None
    assert state.task_store.db_path == settings.tasks_db_path
    assert state.streak.db_path == settings.tasks_db_path
    assert state.streak.tz == state.tz
