# src/todo_sync/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- loads the saved task list and wires the save/export listener,
- runs the review-task import before the first render.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueStore
from ..core.state import AppState
from ..storage.kv_store import SqliteKVStore
from ..storage.persistence import PersistenceAdapter
from ..tasks.errors import MalformedDataError
from ..tasks.review_bridge import ReviewTaskBridge
from ..tasks.task_api import make_save_listener
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_path.parent.mkdir(parents=True, exist_ok=True)


def load_saved_tasks(persistence: PersistenceAdapter, key: str) -> list[Task]:
    """
    Saved task list. Bad records are skipped by the loader; a blob that cannot be
    read at all is copied to a backup key and the session starts empty.
    """
    try:
        return persistence.load_todos(key)
    except MalformedDataError:
        logger.exception("Failed to load saved tasks from %r; starting empty.", key)
        persistence.backup(key)
        return []


def create_initial_state(*, settings=None, kv: KeyValueStore | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and the key-value store injectable makes the app easier to
    test. If settings is None, falls back to get_settings(); if kv is None, an
    SQLite store at settings.store_path is used.
    """
    if settings is None:
        settings = get_settings()

    if kv is None:
        _ensure_local_dirs(settings)
        kv = SqliteKVStore(settings.store_path)

    persistence = PersistenceAdapter(kv)
    store = TaskStore(load_saved_tasks(persistence, settings.todos_key))

    bridge: ReviewTaskBridge | None = None
    if getattr(settings, "sync_review_tasks", True):
        bridge = ReviewTaskBridge(persistence, key=settings.review_tasks_key)

    store.subscribe(make_save_listener(persistence, todos_key=settings.todos_key, bridge=bridge))

    if bridge is not None:
        bridge.import_new(store)

    logger.info("Loaded %d task(s); sync=%s", len(store), bridge is not None)
    return AppState(settings=settings, persistence=persistence, task_store=store, bridge=bridge)
