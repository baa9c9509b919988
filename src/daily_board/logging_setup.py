# src/daily_board/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "daily_board.log"

# Background rollover chatter stays in the log file unless something goes wrong.
_QUIET_ON_CONSOLE = {"daily_board.tasks.rollover_scheduler": logging.WARNING}


class _BoardConsoleFilter(logging.Filter):
    """
    Console output shares the terminal with the >>> prompt:
    - board loggers pass (a few background ones only at WARNING+)
    - everything else, including captured py.warnings, only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("daily_board."):
            return record.levelno >= logging.ERROR
        return record.levelno >= _QUIET_ON_CONSOLE.get(name, logging.NOTSET)


def quiet_loggers(*names: str, level: int = logging.WARNING) -> None:
    """Cap chatty third-party loggers (HTTP clients, SDKs)."""
    for name in names:
        logging.getLogger(name).setLevel(level)


def setup_logging(
    *,
    log_dir: str | Path = ".local/daily_board",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 2_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Console handler (short format, filtered) + rotating file handler (everything).

    Call once from the entrypoint, before the first log call.
    Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    console.addFilter(_BoardConsoleFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        str(log_file), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s [%(threadName)s]: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
