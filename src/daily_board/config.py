# src/daily_board/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time (local inference servers need no key).
- Components receive settings explicitly; get_settings() is only read by the entrypoint.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "BOARD"

# Local .env never overrides variables that are already set.
load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Calendar ----
    timezone: str  # IANA name; "" = host local time

    # ---- Connectors / background jobs ----
    console_enabled: bool
    scheduler_enabled: bool
    reset_hour: int
    reset_check_interval_seconds: float

    # ---- Task breakdown (OpenAI-compatible local server: Ollama / vLLM) ----
    llm_enabled: bool
    llm_base_url: str
    llm_api_key: str
    llm_preferred_models: list[str]
    llm_temperature: float
    llm_top_p: float
    llm_max_tokens: int
    llm_connect_timeout_seconds: float
    llm_read_timeout_seconds: float

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "daily-board")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/daily_board"))
        # DB_PATH is accepted for compatibility with older deployments.
        tasks_db_raw = _first_env(_k("TASKS_DB_PATH"), _k("DB_PATH"), default=None)
        tasks_db_path = Path(tasks_db_raw).expanduser() if tasks_db_raw else data_dir / "tasks.sqlite3"

        timezone = _env(_k("TIMEZONE"), "").strip()

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        scheduler_enabled = _env_bool(_k("SCHEDULER_ENABLED"), True)
        reset_hour = max(0, min(23, _env_int(_k("RESET_HOUR"), 6)))
        reset_check_interval_seconds = max(1.0, _env_float(_k("RESET_CHECK_INTERVAL_SECONDS"), 60.0))

        llm_enabled = _env_bool(_k("LLM_ENABLED"), True)
        llm_base_url = (
            _first_env(_k("LLM_BASE_URL"), "OLLAMA_BASE_URL", default="http://localhost:11434/v1")
            or "http://localhost:11434/v1"
        ).strip()
        llm_api_key = _env(_k("LLM_API_KEY"), "ollama")
        llm_preferred_models = _env_list(_k("LLM_PREFERRED_MODELS"), ["qwen3", "gemma3"])
        llm_temperature = _env_float(_k("LLM_TEMPERATURE"), 0.7)
        llm_top_p = _env_float(_k("LLM_TOP_P"), 0.9)
        llm_max_tokens = _env_int(_k("LLM_MAX_TOKENS"), 2000)
        llm_connect_timeout_seconds = _env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0)
        llm_read_timeout_seconds = _env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 120.0)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            timezone=timezone,
            console_enabled=console_enabled,
            scheduler_enabled=scheduler_enabled,
            reset_hour=reset_hour,
            reset_check_interval_seconds=reset_check_interval_seconds,
            llm_enabled=llm_enabled,
            llm_base_url=llm_base_url,
            llm_api_key=llm_api_key,
            llm_preferred_models=llm_preferred_models,
            llm_temperature=llm_temperature,
            llm_top_p=llm_top_p,
            llm_max_tokens=llm_max_tokens,
            llm_connect_timeout_seconds=llm_connect_timeout_seconds,
            llm_read_timeout_seconds=llm_read_timeout_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
