# src/daily_board/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (stores, rollover engine, LLM client).
"""

from __future__ import annotations

import logging
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..config import get_settings
from ..core.ports import CompletionClient
from ..core.state import AppState
from ..llm.client import LocalLLMClient
from ..tasks.rollover import RolloverEngine
from ..tasks.streak import StreakTracker
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def resolve_timezone(name: str | None) -> tzinfo | None:
    """IANA name -> tzinfo. Empty or unknown names fall back to host local time (None)."""
    name = (name or "").strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using host local time.", name)
        return None


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    tz = resolve_timezone(getattr(settings, "timezone", ""))

    llm_client: CompletionClient | None = None
    if getattr(settings, "llm_enabled", False):
        try:
            llm_client = LocalLLMClient(settings)
        except RuntimeError:
            logger.warning("AI breakdown disabled: LLM client is not configured.", exc_info=True)

    task_store = TaskStore(settings.tasks_db_path)
    return AppState(
        settings=settings,
        task_store=task_store,
        streak=StreakTracker(settings.tasks_db_path, tz=tz),
        rollover=RolloverEngine(task_store),
        llm=llm_client,
        tz=tz,
    )
