# src/todo_sync/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import format_last_saved, format_stats, render_tasks
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _today_local() -> str:
    return datetime.now().astimezone().strftime("%A, %d %B %Y")


def ask_confirm(count: int) -> bool:
    """y/N prompt used by the clear commands."""
    try:
        answer = input(f"This will remove {count} task(s) and cannot be undone. Continue? [y/N] ")
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer.strip().lower() in ("y", "yes")


def handle_line(state: AppState, line: str) -> str | None:
    """
    One REPL step. Slash commands go through the registry; anything else is a new task.
    Returns the text to print (None for blank input).
    """
    line = line.strip()
    if not line:
        return None
    if not line.startswith("/"):
        line = f"/add {line}"
    try:
        return command_registry.handle(state, line, confirm=ask_confirm)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "todo"))
    logger.info("Console started (tasks=%d).", len(state.task_store))

    print(f"{app_name} - {_today_local()}")
    print(render_tasks(state))
    print(format_stats(state))
    print(format_last_saved(state))
    print("Type a task to add it. Use /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = input("> ")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.strip().lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input)
        if reply is not None:
            print(reply)

    logger.info("Console finished.")
