# src/daily_board/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..errors import BoardError, BreakdownError
from ..llm.client import friendly_llm_error_message
from ..tasks import task_api
from ..tasks.clock import format_day
from ..tasks.task_models import Task, TaskCategory, TaskPatch, TaskPriority

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_BUCKET_ORDER = [TaskCategory.TODAY, TaskCategory.TOMORROW, TaskCategory.WEEK, TaskCategory.DAILIES]
_PRIORITY_MARK = {TaskPriority.HIGH: "!!!", TaskPriority.MEDIUM: "!! ", TaskPriority.LOW: "!  "}
_ID_WIDTH = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Board errors and bad input become a one-line reply; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except BreakdownError as e:
            logger.info("/%s: breakdown failed: %s", name, e)
            return friendly_llm_error_message(e)
        except (BoardError, ValueError, OSError) as e:
            logger.info("/%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_task(t: Task) -> str:
    box = "[x]" if t.completed else "[ ]"
    line = f"  {box} {t.id[:_ID_WIDTH]} {_PRIORITY_MARK[t.priority]} {t.title}"
    if t.description:
        line += f" :: {t.description}"
    return line


def _need(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise ValueError(f"Usage: {usage}")


def _streak_line(state: AppState) -> str:
    s = task_api.get_streak(state)
    return (
        f"Streak: {s.current_streak} day(s) (longest {s.longest_streak}, "
        f"last credited {format_day(s.last_completed_date, state.tz)})"
    )


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    counts = ", ".join(
        f"{c.value}={state.task_store.count_category(c)}" for c in _BUCKET_ORDER
    )
    llm = getattr(settings, "llm_base_url", "-") if state.llm is not None else "disabled"
    return (
        "Status:\n"
        f"  Database: {state.task_store.db_path}\n"
        f"  Tasks: {counts}\n"
        f"  Daily reset hour: {getattr(settings, 'reset_hour', 6)}:00\n"
        f"  AI breakdown: {llm}\n"
        f"  {_streak_line(state)}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list            -> all buckets
    /list <bucket>   -> one bucket
    """
    buckets = [TaskCategory.parse(args[0])] if args else _BUCKET_ORDER
    tasks = task_api.list_tasks(state)
    lines: list[str] = []
    for bucket in buckets:
        in_bucket = [t for t in tasks if t.category == bucket]
        lines.append(f"{bucket.value.upper()} ({len(in_bucket)})")
        lines.extend(_format_task(t) for t in in_bucket)
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <bucket> [!low|!medium|!high] <title> [:: description]
    """
    usage = "/add <today|tomorrow|week|dailies> [!low|!medium|!high] <title> [:: description]"
    _need(args, 2, usage)
    category = TaskCategory.parse(args[0])
    rest = args[1:]
    priority = TaskPriority.MEDIUM
    if rest and rest[0].startswith("!"):
        priority = TaskPriority.parse(rest[0][1:])
        rest = rest[1:]
    text = " ".join(rest)
    title, _, description = text.partition("::")
    if not title.strip():
        raise ValueError(f"Usage: {usage}")
    task = task_api.create_task(
        state,
        title=title,
        category=category,
        priority=priority,
        description=description,
    )
    return f"Added {task.id[:_ID_WIDTH]} to {task.category.value}: {task.title}"


def _set_completed(state: AppState, args: list[str], completed: bool) -> str:
    _need(args, 1, "/done <id>" if completed else "/undone <id>")
    task = task_api.resolve_task(state, args[0])
    task = task_api.set_completed(state, task.id, completed)
    msg = f"{'Completed' if completed else 'Reopened'}: {task.title}"
    if task.category == TaskCategory.DAILIES:
        msg += f"\n{_streak_line(state)}"
    return msg


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undone(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_move(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/move <id> <today|tomorrow|week|dailies>")
    task = task_api.resolve_task(state, args[0])
    task = task_api.move_task(state, task.id, TaskCategory.parse(args[1]))
    return f"Moved to {task.category.value}: {task.title}"


def cmd_priority(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/priority <id> <low|medium|high>")
    task = task_api.resolve_task(state, args[0])
    task = task_api.patch_task(state, task.id, TaskPatch(priority=TaskPriority.parse(args[1])))
    return f"Priority {task.priority.value}: {task.title}"


def cmd_rename(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/rename <id> <new title>")
    task = task_api.resolve_task(state, args[0])
    task = task_api.patch_task(state, task.id, TaskPatch(title=" ".join(args[1:])))
    return f"Renamed: {task.title}"


def cmd_describe(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/describe <id> [text]")
    task = task_api.resolve_task(state, args[0])
    task = task_api.patch_task(state, task.id, TaskPatch(description=" ".join(args[1:])))
    return f"Description {'updated' if task.description else 'cleared'}: {task.title}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/delete <id>")
    task = task_api.resolve_task(state, args[0])
    task_api.delete_task(state, task.id)
    return f"Deleted: {task.title}"


def cmd_resetdailies(state: AppState, args: list[str]) -> str:
    n = task_api.reset_dailies(state)
    return f"Dailies reset: {n} task(s) unchecked."


def cmd_rollover(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("[ROLLOVER] Advancing buckets (tomorrow -> today -> week, dailies unchecked)...")
    r = task_api.perform_daily_reset(state)
    return (
        f"Rollover done: {r.promoted} promoted from tomorrow, "
        f"{r.swept} moved to week, {r.dailies_reset} dailies reset."
    )


def cmd_streak(state: AppState, args: list[str]) -> str:
    """
    /streak          -> show
    /streak refresh  -> re-evaluate now
    /streak reset    -> zero the current streak (longest is kept)
    """
    sub = args[0].lower() if args else ""
    if sub == "reset":
        task_api.reset_streak(state)
    elif sub == "refresh":
        task_api.refresh_streak(state)
    elif sub:
        return "Usage: /streak [refresh|reset]"
    return _streak_line(state)


def cmd_breakdown(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /breakdown        -> ask the local model to split this week's tasks
    /breakdown apply  -> add the last suggestions to today/tomorrow
    """
    if args and args[0].lower() == "apply":
        if not state.pending_breakdown:
            return "Nothing to apply. Run /breakdown first."
        created = task_api.apply_breakdown(state, state.pending_breakdown)
        state.pending_breakdown = []
        return f"Added {len(created)} task(s) from the breakdown."

    if emit:
        emit("[AI] Breaking down this week's tasks (may take a while)...")
    suggestions = task_api.breakdown_week(state)
    state.pending_breakdown = suggestions
    if not suggestions:
        return "The model returned no usable tasks."
    lines = [f"Suggested {len(suggestions)} task(s):"]
    for i, s in enumerate(suggestions, start=1):
        lines.append(f"  {i}. [{s.category.value}] ({s.priority.value}) {s.title} :: {s.description}")
    lines.append("Use /breakdown apply to add them.")
    return "\n".join(lines)


def cmd_export(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/export <path.json>")
    n = task_api.export_tasks(state, args[0])
    return f"Exported {n} task(s) to {args[0]}"


def cmd_import(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/import <path.json>")
    n = task_api.import_tasks(state, args[0])
    return f"Imported {n} task(s) from {args[0]}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show database, bucket sizes and streak.")
registry.register("list", cmd_list, help_text="List tasks: /list [today|tomorrow|week|dailies].", aliases=["ls"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <bucket> [!low|!medium|!high] <title> [:: description].",
)
registry.register("done", cmd_done, help_text="Mark a task completed: /done <id>.", aliases=["x"])
registry.register("undone", cmd_undone, help_text="Mark a task not completed: /undone <id>.")
registry.register("move", cmd_move, help_text="Move a task: /move <id> <bucket>.", aliases=["mv"])
registry.register("priority", cmd_priority, help_text="Set priority: /priority <id> <low|medium|high>.")
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <id> <title>.")
registry.register("describe", cmd_describe, help_text="Set or clear a description: /describe <id> [text].")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("resetdailies", cmd_resetdailies, help_text="Uncheck every daily.")
registry.register("rollover", cmd_rollover, help_text="Run the daily rollover now.")
registry.register("streak", cmd_streak, help_text="Show the streak: /streak [refresh|reset].")
registry.register(
    "breakdown",
    cmd_breakdown,
    help_text="Split this week's tasks with the local model: /breakdown [apply].",
)
registry.register("export", cmd_export, help_text="Export all tasks to JSON: /export <path>.")
registry.register("import", cmd_import, help_text="Import tasks from JSON: /import <path>.")
