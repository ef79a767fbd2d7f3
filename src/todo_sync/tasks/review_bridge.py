# src/todo_sync/tasks/review_bridge.py

"""
Review-task bridge.

Keeps the native task list and the externally produced `review_tasks`
collection in step:

- import (startup): review tasks not yet seen become native tasks whose text
  is composed as "<name>[ [<type>]][ (<priority>)][ - <note>]";
- export (after every save): each review task matched to a native task gets
  its `completed` flag overwritten; all other fields pass through.

Matching prefers the foreign key stored on the native task (`external_key`)
and falls back to the base name recovered from the task text for tasks that
were never linked.

Malformed review data is logged and turns both directions into no-ops.
"""

from __future__ import annotations

import logging
from typing import Any

from ..storage.persistence import PersistenceAdapter
from .errors import MalformedDataError, MalformedExternalData
from .task_models import ExternalTask, Task, TaskId, base_name, parse_task_id
from .task_store import TaskStore

logger = logging.getLogger(__name__)


class ReviewTaskBridge:
    def __init__(self, persistence: PersistenceAdapter, *, key: str = "review_tasks") -> None:
        self._persistence = persistence
        self._key = key

    # ---- reading ----

    def _read_records(self) -> list[dict[str, Any]] | None:
        """
        Raw review records, or None when there is nothing usable.

        Absent/empty is a normal steady state and stays silent.
        """
        try:
            data = self._persistence.read_json(self._key)
        except MalformedDataError as e:
            raise MalformedExternalData(str(e)) from e

        if data is None:
            return None
        if not isinstance(data, list):
            raise MalformedExternalData(
                f"{self._key!r} must be an array, got {type(data).__name__}"
            )
        if not data:
            return None
        return data

    def _read_parsed(self) -> list[tuple[dict[str, Any], ExternalTask]] | None:
        records = self._read_records()
        if records is None:
            return None
        return [(r, ExternalTask.from_dict(r)) for r in records]

    # ---- import ----

    def import_new(self, store: TaskStore) -> list[Task]:
        """
        Append review tasks the store has not seen yet, in source order.

        Returns the imported tasks (empty when nothing changed).
        """
        try:
            parsed = self._read_parsed()
        except MalformedExternalData as e:
            logger.warning("Review import skipped: %s", e)
            return []
        if not parsed:
            return []

        known = store.external_keys()
        # Older saves stored imported tasks under the review record's own id, unlinked.
        unlinked_ids = {t.id for t in store if t.external_key is None}
        links: dict[TaskId, str] = {}
        candidates: list[tuple[str, bool, str | None]] = []
        for _raw, ext in parsed:
            key = ext.external_key()
            if key in known:
                continue
            known.add(key)
            legacy_id = parse_task_id(ext.id) if ext.has_id else None
            if legacy_id is not None and legacy_id in unlinked_ids:
                links[legacy_id] = key
                unlinked_ids.discard(legacy_id)
                continue
            candidates.append((ext.composed_text(), bool(ext.completed), key))

        if links:
            logger.info("Linked %d previously imported task(s) by id", store.link(links))

        imported = store.extend(candidates)
        if imported:
            logger.info("Imported %d review task(s) from %r", len(imported), self._key)
        else:
            logger.debug("Review import: nothing new in %r", self._key)
        return imported

    # ---- export ----

    @staticmethod
    def _build_lookups(tasks: list[Task]) -> tuple[dict[str, Task], dict[str, Task]]:
        by_key: dict[str, Task] = {}
        by_name: dict[str, Task] = {}
        for t in tasks:
            if t.external_key is not None:
                by_key[t.external_key] = t
                continue
            name = base_name(t.text)
            if name in by_name:
                # Ambiguous; the later task wins, same as a plain dict overwrite.
                logger.warning(
                    "Several tasks share base name %r (ids %s, %s); using the later one",
                    name,
                    by_name[name].id,
                    t.id,
                )
            by_name[name] = t
        return by_key, by_name

    def export_completion(self, store: TaskStore) -> int:
        """
        Write native completion state into the review collection (full overwrite).

        Returns how many review records were matched.
        """
        try:
            parsed = self._read_parsed()
        except MalformedExternalData as e:
            logger.warning("Review export skipped: %s", e)
            return 0
        if not parsed:
            return 0

        by_key, by_name = self._build_lookups(store.snapshot())

        matched = 0
        out: list[dict[str, Any]] = []
        for raw, ext in parsed:
            task = by_key.get(ext.external_key()) or by_name.get(ext.name)
            if task is None:
                out.append(raw)
                continue
            matched += 1
            patched = dict(raw)
            patched["completed"] = task.completed
            out.append(patched)

        self._persistence.write_json(self._key, out)
        logger.debug("Review export: %d/%d matched in %r", matched, len(out), self._key)
        return matched
