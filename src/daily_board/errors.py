# src/daily_board/errors.py

"""
Error taxonomy shared by the stores, the rollover engine and the UI layer.

Store-level errors propagate unchanged to the caller; nothing here retries.
"""

from __future__ import annotations


class BoardError(Exception):
    """Base class for all daily-board errors."""


class StorageError(BoardError):
    """The backing SQLite store is unavailable or a write failed."""


class NotFound(BoardError):
    """A referenced task id does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class DuplicateKey(BoardError):
    """Insert with an id that already exists."""

    def __init__(self, task_id: str | None = None) -> None:
        msg = f"Task id already exists: {task_id}" if task_id else "Duplicate task id in batch"
        super().__init__(msg)
        self.task_id = task_id


class InvariantViolation(BoardError):
    """Stored data breaks a board invariant (unknown category/priority literal, ...)."""


class BreakdownError(BoardError):
    """The task-breakdown helper could not produce a usable answer."""


class LLMConnectionError(BreakdownError):
    """The local inference server is unreachable or timed out."""


class NoModelAvailableError(BreakdownError):
    """The inference server answered but has no model to run."""
