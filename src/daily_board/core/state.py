# src/daily_board/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any

from ..tasks.rollover import RolloverEngine
from ..tasks.streak import StreakTracker
from ..tasks.task_store import TaskStore
from .ports import CompletionClient


@dataclass
class AppState:
    """
    Everything a request handler needs, built once by the composition root.

    No component reaches for a global store; they all get it from here.
    """

    settings: Any
    task_store: TaskStore
    streak: StreakTracker
    rollover: RolloverEngine
    llm: CompletionClient | None = None
    tz: tzinfo | None = None

    # Last /breakdown suggestions, kept until applied or replaced.
    pending_breakdown: list[Any] = field(default_factory=list)
