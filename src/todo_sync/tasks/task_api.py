# src/todo_sync/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..storage.persistence import PersistenceAdapter
from .review_bridge import ReviewTaskBridge
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def make_save_listener(
    persistence: PersistenceAdapter,
    *,
    todos_key: str,
    bridge: ReviewTaskBridge | None = None,
) -> Callable[[TaskStore], None]:
    """
    Listener run after every TaskStore mutation: save the whole list, then
    push completion state out to the review collection.
    """

    def _on_change(store: TaskStore) -> None:
        persistence.save_todos(todos_key, store.snapshot())
        if bridge is not None:
            bridge.export_completion(store)

    return _on_change


def sync_review_tasks(store: TaskStore, bridge: ReviewTaskBridge | None) -> int:
    """
    Run one full import+export pass (startup or /sync).

    Import persists (and therefore exports) on its own when it adds something;
    otherwise export runs once here so status written elsewhere stays aligned.
    """
    if bridge is None:
        return 0
    imported = bridge.import_new(store)
    if not imported:
        bridge.export_completion(store)
    return len(imported)
