# src/daily_board/llm/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..errors import BreakdownError, LLMConnectionError, NoModelAvailableError

logger = logging.getLogger(__name__)


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return True
    return exc.__class__.__name__ in {
        "APIConnectionError",
        "APITimeoutError",
        "ConnectTimeout",
        "ReadTimeout",
        "ConnectError",
    }


def _make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


def friendly_llm_error_message(err: Exception) -> str:
    if isinstance(err, LLMConnectionError):
        return "Cannot connect to the local model server. Make sure Ollama (or vLLM) is running."
    if isinstance(err, NoModelAvailableError):
        return "No AI models available. Pull a model on the local server first (e.g. `ollama pull qwen3`)."
    if isinstance(err, BreakdownError):
        return "AI failed to break down tasks. Please try again or check your weekly tasks."
    return str(err).strip() or "LLM error."


class LocalLLMClient:
    """
    Thin client for an OpenAI-compatible local inference server.

    - No retries: the breakdown is an interactive, best-effort feature.
    - Model choice: first installed model whose name contains a preferred
      name (in preference order), else the first installed model.
    """

    def __init__(self, settings: Any) -> None:
        base_url = str(getattr(settings, "llm_base_url", "") or "").strip()
        if not base_url:
            raise RuntimeError("LLM base URL is not set. Set BOARD_LLM_BASE_URL in your .env.")

        self._preferred: list[str] = list(getattr(settings, "llm_preferred_models", []) or [])
        self._temperature = float(getattr(settings, "llm_temperature", 0.7))
        self._top_p = float(getattr(settings, "llm_top_p", 0.9))
        self._max_tokens = int(getattr(settings, "llm_max_tokens", 2000))

        timeout = _make_timeout(
            connect_s=float(getattr(settings, "llm_connect_timeout_seconds", 5.0)),
            read_s=float(getattr(settings, "llm_read_timeout_seconds", 120.0)),
        )
        self._client = OpenAI(
            base_url=base_url,
            api_key=str(getattr(settings, "llm_api_key", "") or "ollama"),
            timeout=timeout,
            max_retries=0,
        )
        self._base_url = base_url

    def list_models(self) -> list[str]:
        try:
            page = self._client.models.list()
        except Exception as e:
            if _is_connection_error(e):
                raise LLMConnectionError(f"Unable to connect to model server at {self._base_url}") from e
            raise BreakdownError(f"Model listing failed: {e.__class__.__name__}") from e
        return [m.id for m in page.data if getattr(m, "id", None)]

    def pick_model(self) -> str:
        models = self.list_models()
        for preferred in self._preferred:
            p = preferred.lower()
            for name in models:
                if p in name.lower():
                    return name
        if models:
            return models[0]
        raise NoModelAvailableError("No models available. Please pull a model first.")

    def complete(self, prompt: str, model: str | None = None) -> str:
        """Single non-streaming completion. Returns the raw text."""
        selected = model or self.pick_model()
        logger.info("LLM: generating with model=%s", selected)
        try:
            resp = self._client.chat.completions.create(
                model=selected,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                top_p=self._top_p,
                max_tokens=self._max_tokens,
                stream=False,
            )
        except Exception as e:
            if _is_connection_error(e):
                raise LLMConnectionError(f"Model server unreachable during generation ({selected})") from e
            if isinstance(e, openai.NotFoundError):
                raise NoModelAvailableError(f"Model not available: {selected}") from e
            raise BreakdownError(f"Generation failed on model={selected}: {e.__class__.__name__}") from e

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError):
            content = None
        if not content:
            raise BreakdownError(f"Model returned no content: {selected}")
        logger.debug("LLM: %d chars from model=%s", len(content), selected)
        return content
