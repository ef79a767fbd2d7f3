# src/todo_sync/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..storage.persistence import PersistenceAdapter
from ..tasks.review_bridge import ReviewTaskBridge
from ..tasks.task_models import TaskFilter
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings (or a test namespace with the same attributes).
    settings: object

    persistence: PersistenceAdapter
    task_store: TaskStore
    bridge: ReviewTaskBridge | None

    current_filter: TaskFilter = TaskFilter.ALL
