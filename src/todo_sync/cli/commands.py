# src/todo_sync/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.ports import ConfirmPrompt
from ..core.state import AppState
from ..tasks.errors import EmptySelectionError, ValidationError
from ..tasks.task_api import sync_review_tasks
from ..tasks.task_models import Task, TaskFilter, parse_task_id

CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], ConfirmPrompt | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

THEMES = ("light", "dark")

EMPTY_STATE = {
    TaskFilter.ALL: "No tasks yet. Add one!",
    TaskFilter.ACTIVE: "Nothing left to do. Nice work!",
    TaskFilter.COMPLETED: "No completed tasks yet. Keep going!",
}

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        # Handlers that receive the untouched remainder of the line as a single arg.
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        *,
        raw_args: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
            if raw_args:
                self._raw.add(alias.lower())
        if raw_args:
            self._raw.add(key)

    def handle(
        self,
        state: AppState,
        line: str,
        confirm: ConfirmPrompt | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""
        if name in self._raw:
            args = [rest] if rest.strip() else []
        else:
            args = rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, confirm)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task(task: Task) -> str:
    mark = "x" if task.completed else " "
    return f"[{mark}] {task.id}  {task.text}"


def format_stats(state: AppState) -> str:
    s = state.task_store.stats()
    return f"Total: {s.total} | Completed: {s.completed} | Pending: {s.pending}"


def format_last_saved(state: AppState) -> str:
    ts = state.persistence.last_saved(state.settings.todos_key)
    if not ts:
        return "Not saved yet."
    return "Last saved: " + datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def render_tasks(state: AppState, flt: TaskFilter | None = None) -> str:
    flt = flt or state.current_filter
    lines = [format_task(t) for t in state.task_store.filtered_view(flt)]
    if not lines:
        return EMPTY_STATE[flt]
    return "\n".join(lines)


def _task_id_arg(args: list[str], usage: str):
    if not args:
        return None, usage
    task_id = parse_task_id(args[0])
    if task_id is None:
        return None, f"Not a task id: {args[0]!r}. {usage}"
    return task_id, None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    try:
        task = state.task_store.add(args[0] if args else "")
    except ValidationError as e:
        return str(e)
    return f"Added: {format_task(task)}\n{format_stats(state)}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list             -> tasks under the current filter
    /list active      -> switch filter and show
    """
    if args:
        try:
            state.current_filter = TaskFilter.parse(args[0])
        except ValueError as e:
            return str(e)
    return f"{render_tasks(state)}\n{format_stats(state)}"


def cmd_toggle(state: AppState, args: list[str]) -> str:
    task_id, err = _task_id_arg(args, "Usage: /toggle <id>")
    if err:
        return err
    task = state.task_store.toggle(task_id)
    if task is None:
        return f"No task with id {task_id}."
    return f"{format_task(task)}\n{format_stats(state)}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id, err = _task_id_arg(args, "Usage: /delete <id>")
    if err:
        return err
    if not state.task_store.delete(task_id):
        return f"No task with id {task_id}."
    return f"Deleted task {task_id}.\n{format_stats(state)}"


def cmd_stats(state: AppState, args: list[str]) -> str:
    return format_stats(state)


def _clear(state: AppState, confirm: ConfirmPrompt | None, *, completed_only: bool) -> str:
    # No prompt available means no consent.
    ask: ConfirmPrompt = confirm or (lambda _count: False)
    store = state.task_store
    try:
        if completed_only:
            removed = store.clear_completed(confirm=ask)
        else:
            removed = store.clear_all(confirm=ask)
    except EmptySelectionError as e:
        return str(e)
    if not removed:
        return "Cancelled."
    return f"Removed {removed} task(s).\n{format_stats(state)}"


def cmd_clear_completed(
    state: AppState, args: list[str], confirm: ConfirmPrompt | None = None
) -> str:
    return _clear(state, confirm, completed_only=True)


def cmd_clear_all(state: AppState, args: list[str], confirm: ConfirmPrompt | None = None) -> str:
    return _clear(state, confirm, completed_only=False)


def cmd_sync(state: AppState, args: list[str]) -> str:
    if state.bridge is None:
        return "Review-task sync is disabled."
    imported = sync_review_tasks(state.task_store, state.bridge)
    return f"Review tasks synced ({imported} imported).\n{format_stats(state)}"


def cmd_theme(state: AppState, args: list[str]) -> str:
    """
    /theme         -> show current theme
    /theme dark    -> store preference
    """
    key = state.settings.theme_key
    if not args:
        current = state.persistence.read_text(key) or THEMES[0]
        return f"Theme: {current}"
    theme = args[0].lower()
    if theme not in THEMES:
        return "Usage: /theme light | /theme dark."
    state.persistence.write_text(key, theme)
    return f"Theme set to {theme}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <text>.", aliases=["a"], raw_args=True
)
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|active|completed].", aliases=["ls"]
)
registry.register("toggle", cmd_toggle, help_text="Mark done/undone: /toggle <id>.", aliases=["t"])
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("stats", cmd_stats, help_text="Show total/completed/pending counts.")
registry.register(
    "clear-completed", cmd_clear_completed, help_text="Remove all completed tasks."
)
registry.register("clear-all", cmd_clear_all, help_text="Remove every task.")
registry.register("sync", cmd_sync, help_text="Re-run review-task import and export.")
registry.register("theme", cmd_theme, help_text="Show or set theme: /theme light | dark.")
