# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_sync.cli.bootstrap import create_initial_state
from todo_sync.core.state import AppState
from todo_sync.storage.persistence import PersistenceAdapter

from .fakes import CountingKV


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="todo-test",
        log_level="DEBUG",
        console_enabled=False,
        data_dir=tmp_path,
        store_path=tmp_path / "storage.sqlite3",
        todos_key="todos",
        review_tasks_key="review_tasks",
        theme_key="todoTheme",
        sync_review_tasks=True,
    )


@pytest.fixture()
def kv() -> CountingKV:
    return CountingKV()


@pytest.fixture()
def persistence(kv: CountingKV) -> PersistenceAdapter:
    return PersistenceAdapter(kv)


@pytest.fixture()
def state(settings: SimpleNamespace, kv: CountingKV) -> AppState:
    """AppState wired exactly like the CLI, but on an in-memory store."""
    return create_initial_state(settings=settings, kv=kv)
