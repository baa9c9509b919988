# src/daily_board/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the board layer.

The board depends on Protocols instead of concrete implementations.
This keeps the model server swappable and makes testing easier.
"""

from typing import Protocol


class CompletionClient(Protocol):
    """Single-shot text completion (OpenAI-compatible local server)."""
    def complete(self, prompt: str, model: str | None = None) -> str: ...
