# src/taskshift/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import re
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..errors import MalformedTimeString
from ..tasks import task_api
from ..tasks.task_models import Bucket, TaskBoard

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8

# Anything shaped like a clock time is taken as one, so "9:5" is rejected
# instead of silently becoming part of the task text.
_TIME_LIKE = re.compile(r"^\d{1,2}:\d{1,2}$")


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
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def _resolve_id(board: TaskBoard, prefix: str) -> str | None:
    """Match a full id or a unique id prefix (as shown by /list)."""
    matches = [t.id for _b, tasks in board.iter_buckets() for t in tasks if t.id.startswith(prefix)]
    if prefix in matches:
        return prefix
    return matches[0] if len(matches) == 1 else None


def _split_time_and_text(args: list[str]) -> tuple[str | None, str, bool]:
    """
    Leading HH:MM (or "-" for "no time") is the time; the rest is the text.
    The flag tells whether a time token was given at all.
    """
    if args and (args[0] == "-" or _TIME_LIKE.match(args[0])):
        time_str = None if args[0] == "-" else args[0]
        return time_str, " ".join(args[1:]), True
    return None, " ".join(args), False


def render_board(board: TaskBoard) -> str:
    titles = {Bucket.TODAY: "Today", Bucket.TOMORROW: "Tomorrow", Bucket.DAY_AFTER: "Day after"}
    lines: list[str] = []
    for b, tasks in board.iter_buckets():
        lines.append(f"{titles[b]}:")
        if not tasks:
            lines.append("  (empty)")
        for t in tasks:
            when = t.time or "--:--"
            lines.append(f"  [{t.id[:SHORT_ID_LEN]}] {when}  {t.text}")
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_board(task_api.list_board(state))


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add today 18:00 Call mom
    /add tomorrow Buy milk
    """
    if len(args) < 2:
        return "Usage: /add <today|tomorrow|dayafter> [HH:MM] <text>"
    try:
        bucket = Bucket.parse(args[0])
    except ValueError as e:
        return str(e)

    time_str, text, _ = _split_time_and_text(args[1:])
    task = task_api.add_task(state, bucket, text, time_str)
    if task is None:
        return "Nothing added: task text is empty."
    when = f" at {task.time}" if task.time else ""
    return f"Added to {bucket.value}{when}: {task.text} [{task.id[:SHORT_ID_LEN]}]"


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <id>"
    task_id = _resolve_id(task_api.list_board(state), args[0])
    if task_id is None or not task_api.remove_task(state, task_id):
        return f"No single task matches id {args[0]!r}."
    return f"Removed [{task_id[:SHORT_ID_LEN]}]."


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> [HH:MM|-] <text>
    Only tomorrow / day-after tasks can be edited.
    Without a time token the current time is kept; "-" clears it.
    """
    if len(args) < 2:
        return "Usage: /edit <id> [HH:MM|-] <text>"
    board = task_api.list_board(state)
    task_id = _resolve_id(board, args[0])
    if task_id is None:
        return f"No single task matches id {args[0]!r}."

    time_str, text, time_given = _split_time_and_text(args[1:])
    if not time_given:
        found = board.find(task_id)
        time_str = found[1].time if found else None
    if not text.strip():
        return "Task text must not be empty."
    if not task_api.edit_task(state, task_id, text, time_str):
        return "Only tomorrow and day-after tasks can be edited."
    return f"Edited [{task_id[:SHORT_ID_LEN]}]."


def cmd_clear(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /clear <today|tomorrow|dayafter>"
    try:
        bucket = Bucket.parse(args[0])
    except ValueError as e:
        return str(e)
    n = task_api.clear_bucket(state, bucket)
    return f"Cleared {bucket.value} ({n} task(s))."


def cmd_reset(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
) -> str:
    if not args or args[0].lower() != "yes":
        return "This deletes every task. Confirm with: /reset yes"
    if emit:
        with contextlib.suppress(Exception):
            emit("Resetting all buckets...")
    task_api.reset_all(state)
    return "All tasks removed."


def cmd_alarms(state: AppState, args: list[str]) -> str:
    entries = state.alarms.list_all()
    if not entries:
        return "No alarms scheduled."
    lines = ["Scheduled alarms:"]
    for e in entries:
        every = f" (every {e.spec.period_minutes:g} min)" if e.spec.period_minutes else ""
        lines.append(f"  {e.name}: {_fmt_ts(e.spec.at)}{every}")
    return "\n".join(lines)


def _with_time_errors(handler: CommandHandler2) -> CommandHandler2:
    def wrapped(state: AppState, args: list[str]) -> str:
        try:
            return handler(state, args)
        except MalformedTimeString as e:
            return str(e)

    wrapped.__doc__ = handler.__doc__
    return wrapped


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show all three buckets.", aliases=["ls"])
registry.register("add", _with_time_errors(cmd_add), help_text="Add a task: /add <bucket> [HH:MM] <text>.")
registry.register("rm", cmd_rm, help_text="Remove a task: /rm <id>.", aliases=["del"])
registry.register(
    "edit", _with_time_errors(cmd_edit), help_text="Edit a tomorrow/day-after task: /edit <id> [HH:MM|-] <text>."
)
registry.register("clear", cmd_clear, help_text="Empty one bucket: /clear <bucket>.")
registry.register("reset", cmd_reset, help_text="Delete every task: /reset yes.")
registry.register("alarms", cmd_alarms, help_text="Show scheduled alarms.")
