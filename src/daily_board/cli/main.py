# src/daily_board/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the daily reset scheduler on a background event-loop thread (optional),
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import asyncio
import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import quiet_loggers, setup_logging
from ..tasks.rollover_scheduler import run_daily_reset_scheduler

logger = logging.getLogger(__name__)


class SchedulerRunner(threading.Thread):
    """Runs the rollover scheduler coroutine on its own event loop."""

    def __init__(self, state: AppState) -> None:
        super().__init__(name="daily-reset-scheduler", daemon=True)
        self._state = state
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None
        self._ready = threading.Event()

    def run(self) -> None:
        loop = asyncio.new_event_loop()
        self._loop = loop
        asyncio.set_event_loop(loop)
        settings = self._state.settings
        self._task = loop.create_task(
            run_daily_reset_scheduler(
                self._state.rollover,
                self._state.task_store,
                reset_hour=int(getattr(settings, "reset_hour", 6)),
                interval_seconds=float(getattr(settings, "reset_check_interval_seconds", 60.0)),
                tz=self._state.tz,
            )
        )
        self._ready.set()
        try:
            loop.run_until_complete(self._task)
        except asyncio.CancelledError:
            logger.info("Daily reset scheduler stopped.")
        finally:
            loop.close()

    def stop(self) -> None:
        self._ready.wait(timeout=5.0)
        if self._loop is not None and self._task is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._task.cancel)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)
    quiet_loggers("httpx", "httpcore", "openai")

    logger.info("Starting %s (log file: %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    scheduler: SchedulerRunner | None = None
    if settings.scheduler_enabled:
        scheduler = SchedulerRunner(state)
        scheduler.start()

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    # The console REPL handles Ctrl+C itself (KeyboardInterrupt at the prompt).
    if not settings.console_enabled:
        signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running the daily reset scheduler only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if scheduler is not None:
            scheduler.stop()
            scheduler.join(timeout=10.0)
        state.task_store.close()
        state.streak.close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
