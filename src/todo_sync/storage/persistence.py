# src/todo_sync/storage/persistence.py

"""
JSON blobs on top of a key-value store.

`todos` is written as a versioned envelope:
    {"version": 1, "todos": [{"id": ..., "text": ..., "completed": ..., "createdAt": ...}]}
A bare array (the older format) is still accepted on read.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from ..core.ports import KeyValueStore
from ..tasks.errors import MalformedDataError
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

TODOS_SCHEMA_VERSION = 1


class PersistenceAdapter:
    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    # ---- raw values ----

    def read_text(self, key: str) -> str | None:
        return self._kv.get(key)

    def write_text(self, key: str, value: str) -> None:
        self._kv.set(key, value)

    def read_json(self, key: str) -> Any | None:
        """Decoded value under `key`, None when absent. Raises MalformedDataError on bad JSON."""
        raw = self._kv.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedDataError(f"{key!r} is not valid JSON: {e}") from e

    def write_json(self, key: str, value: Any) -> None:
        self._kv.set(key, json.dumps(value, ensure_ascii=False))

    def backup(self, key: str) -> str | None:
        """Copy the raw value under `key` to "<key>.corrupt"; returns the backup key."""
        raw = self._kv.get(key)
        if raw is None:
            return None
        backup_key = f"{key}.corrupt"
        self._kv.set(backup_key, raw)
        logger.warning("Kept a copy of %r under %r", key, backup_key)
        return backup_key

    def last_saved(self, key: str) -> float | None:
        """Unix time of the last write to `key`, None when never written."""
        return self._kv.updated_at(key)

    # ---- todos ----

    def load_todos(self, key: str) -> list[Task]:
        data = self.read_json(key)
        if data is None:
            return []

        if isinstance(data, list):
            records = data
        elif isinstance(data, dict):
            version = data.get("version")
            if version != TODOS_SCHEMA_VERSION:
                raise MalformedDataError(f"{key!r} has unsupported schema version {version!r}")
            records = data.get("todos")
            if not isinstance(records, list):
                raise MalformedDataError(f"{key!r} envelope has no todos array")
        else:
            raise MalformedDataError(f"{key!r} must hold an array or an envelope object")

        tasks: list[Task] = []
        skipped = 0
        for r in records:
            try:
                tasks.append(Task.from_dict(r))
            except MalformedDataError as e:
                skipped += 1
                logger.warning("Skipping saved task in %r: %s", key, e)
        if skipped:
            self.backup(key)
        logger.debug("Loaded %d todos from %r (skipped %d)", len(tasks), key, skipped)
        return tasks

    def save_todos(self, key: str, tasks: Iterable[Task]) -> None:
        payload = {
            "version": TODOS_SCHEMA_VERSION,
            "todos": [t.to_dict() for t in tasks],
        }
        self.write_json(key, payload)
        logger.debug("Saved %d todos to %r", len(payload["todos"]), key)
