# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "BOARD_APP_NAME": "App display name (default: daily-board).",
    "BOARD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "BOARD_DATA_DIR": "Local data directory for the database and logs (default: .local/daily_board).",
    "BOARD_TASKS_DB_PATH": "SQLite path (default: <data_dir>/tasks.sqlite3). BOARD_DB_PATH is accepted too.",
    # Calendar
    "BOARD_TIMEZONE": "IANA timezone for day boundaries, e.g. Europe/Berlin (default: host local time).",
    # Connectors / background jobs
    "BOARD_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "BOARD_SCHEDULER_ENABLED": "Run the daily rollover scheduler (true/false, default: true).",
    "BOARD_RESET_HOUR": "Local hour (0-23) after which the daily rollover runs (default: 6).",
    "BOARD_RESET_CHECK_INTERVAL_SECONDS": "How often the scheduler checks whether the rollover is due (default: 60).",
    # Task breakdown (local model server)
    "BOARD_LLM_ENABLED": "Enable /breakdown (true/false, default: true).",
    "BOARD_LLM_BASE_URL": "OpenAI-compatible endpoint (default: http://localhost:11434/v1). OLLAMA_BASE_URL is accepted too.",
    "BOARD_LLM_API_KEY": "API key sent to the server (default: ollama; local servers ignore it).",
    "BOARD_LLM_PREFERRED_MODELS": "Comma/space separated name fragments tried in order (default: qwen3 gemma3).",
    "BOARD_LLM_TEMPERATURE": "Sampling temperature (default: 0.7).",
    "BOARD_LLM_TOP_P": "Nucleus sampling (default: 0.9).",
    "BOARD_LLM_MAX_TOKENS": "Max tokens per answer (default: 2000).",
    "BOARD_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "BOARD_LLM_READ_TIMEOUT_SECONDS": "Read timeout (default: 120).",
}
