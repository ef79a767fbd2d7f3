# src/todo_sync/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator

from .errors import EmptySelectionError, ValidationError
from .task_models import Task, TaskFilter, TaskId, TaskStats, utc_timestamp

logger = logging.getLogger(__name__)

ChangeListener = Callable[["TaskStore"], None]
ConfirmFn = Callable[[int], bool]


class TaskStore:
    """
    In-memory ordered task list for one session.

    Pure data: the store never touches storage itself. Every mutation ends with
    a call to the registered change listeners; the composition root wires one
    that saves the list and runs the review-task export.

    Ids come from a millisecond clock and are bumped past the largest id this
    store has ever held, so a deleted id is never handed out again.
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tasks: list[Task] = []
        self._listeners: list[ChangeListener] = []
        self._clock = clock
        self._last_id: TaskId = 0
        self.load(tasks)

    # ---- listeners ----

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---- internals ----

    def _next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        if candidate <= self._last_id:
            candidate = int(self._last_id) + 1
        self._last_id = candidate
        return candidate

    def _index_of(self, task_id: TaskId) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    # ---- read API ----

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks))

    def get(self, task_id: TaskId) -> Task | None:
        idx = self._index_of(task_id)
        return self._tasks[idx] if idx is not None else None

    def snapshot(self) -> list[Task]:
        return list(self._tasks)

    def filtered_view(self, flt: TaskFilter | str = TaskFilter.ALL) -> Iterator[Task]:
        """
        Lazily yield tasks matching `flt`, in list order.

        Each call starts a fresh pass; the underlying list is never mutated.
        """
        if not isinstance(flt, TaskFilter):
            flt = TaskFilter.parse(flt)
        return (t for t in self._tasks if flt.matches(t))

    def stats(self) -> TaskStats:
        total = len(self._tasks)
        completed = sum(1 for t in self._tasks if t.completed)
        return TaskStats(total=total, completed=completed, pending=total - completed)

    def external_keys(self) -> set[str]:
        return {t.external_key for t in self._tasks if t.external_key is not None}

    # ---- mutations ----

    def load(self, tasks: Iterable[Task]) -> None:
        """Replace the contents (startup). Duplicate ids keep the first occurrence."""
        seen: set[TaskId] = set()
        loaded: list[Task] = []
        for t in tasks:
            if t.id in seen:
                logger.warning("Dropping task with duplicate id=%s", t.id)
                continue
            seen.add(t.id)
            loaded.append(t)
        self._tasks = loaded
        if loaded:
            self._last_id = max(self._last_id, max(t.id for t in loaded))

    def add(self, text: str, *, external_key: str | None = None) -> Task:
        clean = (text or "").strip()
        if not clean:
            raise ValidationError("Please enter a task.")

        task = Task(
            id=self._next_id(),
            text=clean,
            completed=False,
            created_at=utc_timestamp(),
            external_key=external_key,
        )
        self._tasks.append(task)
        logger.debug("Task added id=%s", task.id)
        self._notify()
        return task

    def extend(self, items: Iterable[tuple[str, bool, str | None]]) -> list[Task]:
        """
        Bulk append of (text, completed, external_key) triples with one notification.

        Entries with blank text are skipped.
        """
        added: list[Task] = []
        for text, completed, external_key in items:
            clean = (text or "").strip()
            if not clean:
                continue
            added.append(
                Task(
                    id=self._next_id(),
                    text=clean,
                    completed=bool(completed),
                    created_at=utc_timestamp(),
                    external_key=external_key,
                )
            )
        if added:
            self._tasks.extend(added)
            self._notify()
        return added

    def link(self, links: dict[TaskId, str]) -> int:
        """
        Attach foreign keys to unlinked tasks ({task id: external key}), one notification.

        Tasks that are missing or already linked are left alone.
        """
        linked = 0
        for t in self._tasks:
            key = links.get(t.id)
            if key is None or t.external_key is not None:
                continue
            t.external_key = key
            linked += 1
        if linked:
            logger.debug("Linked %d task(s) to review records", linked)
            self._notify()
        return linked

    def toggle(self, task_id: TaskId) -> Task | None:
        task = self.get(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        logger.debug("Task toggled id=%s completed=%s", task.id, task.completed)
        self._notify()
        return task

    def delete(self, task_id: TaskId) -> bool:
        idx = self._index_of(task_id)
        if idx is None:
            return False
        del self._tasks[idx]
        logger.debug("Task deleted id=%s", task_id)
        self._notify()
        return True

    def _clear_where(self, doomed: Callable[[Task], bool], confirm: ConfirmFn, empty_msg: str) -> int:
        count = sum(1 for t in self._tasks if doomed(t))
        if count == 0:
            raise EmptySelectionError(empty_msg)
        if not confirm(count):
            return 0
        self._tasks = [t for t in self._tasks if not doomed(t)]
        self._notify()
        return count

    def clear_completed(self, *, confirm: ConfirmFn) -> int:
        """
        Remove completed tasks after `confirm(count)` agrees.

        Raises EmptySelectionError (without calling confirm) when nothing is completed.
        Returns the number removed, 0 when the caller declined.
        """
        return self._clear_where(
            lambda t: t.completed, confirm, "There are no completed tasks to clear."
        )

    def clear_all(self, *, confirm: ConfirmFn) -> int:
        """Same contract as clear_completed, for every task."""
        return self._clear_where(lambda t: True, confirm, "There are no tasks to clear.")
